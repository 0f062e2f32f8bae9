"""
Custom exception classes for the detection visualization engine.
Provides structured error handling with detailed context.
"""

from functools import wraps
from typing import Optional, Dict, Any


class SpillScopeError(Exception):
    """Base exception class for the rendering engine."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and context.

        Args:
            message: Error message
            context: Additional context information
        """
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """String representation of the exception."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class ImageDecodeError(SpillScopeError):
    """Exception raised when a source image cannot be decoded."""
    pass


class RasterizationError(SpillScopeError):
    """Exception raised when drawing onto a raster surface fails."""
    pass


class ChartLayoutError(SpillScopeError):
    """Exception raised when a data series cannot be laid out."""
    pass


class ChartRenderError(SpillScopeError):
    """Exception raised when a chart back-end fails to render a layout."""
    pass


class ReportError(SpillScopeError):
    """Exception raised when the report cannot be assembled or written."""
    pass


class ConfigurationError(SpillScopeError):
    """Exception raised when configuration is invalid."""
    pass


class DetectionParseError(SpillScopeError):
    """Exception raised when a detection payload does not match the contract."""
    pass


def handle_exceptions(exception_type: type = SpillScopeError):
    """
    Decorator to handle exceptions and convert them to custom types.

    Args:
        exception_type: Type of exception to convert to
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except SpillScopeError:
                # Re-raise custom exceptions as-is
                raise
            except Exception as e:
                raise exception_type(
                    f"Error in {func.__name__}: {str(e)}",
                    context={
                        "function": func.__name__,
                        "args": str(args)[:100],  # Truncate for readability
                        "original_exception": type(e).__name__
                    }
                ) from e
        return wrapper
    return decorator
