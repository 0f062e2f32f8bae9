"""
Data URI codec for raster artifacts.

Source images arrive as ``data:image/...;base64,...`` strings; artifacts leave
as PNG data URIs. Decoding uses OpenCV so the surface is a BGR ``uint8``
array at the image's native resolution.
"""

import base64
import binascii
import mimetypes
import re
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from ..utils import ImageDecodeError, RasterizationError, handle_exceptions

_DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w/+.-]*)(?P<params>(?:;[\w=.-]+)*?);base64,(?P<data>.*)$", re.DOTALL)

PNG_MIME = "image/png"


@handle_exceptions(ImageDecodeError)
def decode_data_uri(data_uri: str) -> np.ndarray:
    """
    Decode an image data URI into a BGR surface.

    Args:
        data_uri: ``data:image/...;base64,...`` string

    Returns:
        ``(H, W, 3)`` uint8 array

    Raises:
        ImageDecodeError: If the URI is malformed or the bytes are not an image
    """
    if not isinstance(data_uri, str) or not data_uri:
        raise ImageDecodeError("Image data URI is empty")

    match = _DATA_URI_PATTERN.match(data_uri.strip())
    if not match:
        raise ImageDecodeError("Not a base64 data URI", context={"prefix": data_uri[:32]})

    try:
        raw = base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 payload: {e}") from e

    buffer = np.frombuffer(raw, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
    if image is None or image.size == 0:
        raise ImageDecodeError("Image bytes could not be decoded", context={"mime": match.group("mime"), "bytes": len(raw)})
    return image


@handle_exceptions(RasterizationError)
def encode_png_data_uri(surface: np.ndarray) -> str:
    """Encode a BGR surface as a PNG data URI."""
    ok, encoded = cv2.imencode(".png", surface)
    if not ok:
        raise RasterizationError("PNG encoding failed", context={"shape": surface.shape})
    return f"data:{PNG_MIME};base64,{base64.b64encode(encoded.tobytes()).decode('ascii')}"


def bytes_to_data_uri(raw: bytes, mime: str = PNG_MIME) -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


def data_uri_to_bytes(data_uri: str) -> bytes:
    """Return the decoded payload of a base64 data URI."""
    match = _DATA_URI_PATTERN.match(data_uri.strip())
    if not match:
        raise ImageDecodeError("Not a base64 data URI", context={"prefix": data_uri[:32]})
    return base64.b64decode(match.group("data"))


def file_to_data_uri(path: Union[str, Path]) -> str:
    """Read an image file into a data URI, guessing the MIME type from its suffix."""
    path = Path(path)
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return bytes_to_data_uri(path.read_bytes(), mime)
