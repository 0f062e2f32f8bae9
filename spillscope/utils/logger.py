"""
Logging for the detection visualization engine.

Every record carries the emitting module (``name``) and the mission being
rendered (``mission``). Console output goes to stderr so the CLI can keep
stdout for its own messages; a log directory adds a rotating mission log
and an error-only log.
"""

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, fields
from functools import wraps
from pathlib import Path
from typing import Iterator, Optional, Union
from loguru import logger
import yaml


NO_MISSION = "-"

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[mission]} | "
    "{extra[name]}:{function}:{line} | {message}"
)


@dataclass
class LoggingConfig:
    """The ``logging`` section of the configuration file."""
    level: str = "INFO"
    log_dir: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "30 days"
    compression: str = "zip"

    @classmethod
    def from_file(cls, config_path: Optional[Union[str, Path]]) -> "LoggingConfig":
        """Read the section, falling back to defaults for anything unreadable."""
        if not config_path or not Path(config_path).exists():
            return cls()
        try:
            with open(config_path, 'r') as f:
                section = (yaml.safe_load(f) or {}).get('logging') or {}
        except (OSError, yaml.YAMLError, AttributeError) as e:
            logger.warning(f"Ignoring logging section of {config_path}: {e}")
            return cls()
        if not isinstance(section, dict):
            logger.warning(f"Ignoring logging section of {config_path}: not a mapping")
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in section.items() if k in known})


class LoggerManager:
    """Installs the loguru sinks described by a ``LoggingConfig``."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None, level: Optional[str] = None):
        self.config = LoggingConfig.from_file(config_path)
        if level:
            self.config.level = level
        self._install_sinks()

    def _install_sinks(self):
        logger.remove()
        logger.configure(extra={"name": "spillscope", "mission": NO_MISSION})

        logger.add(sys.stderr, level=self.config.level, format=LOG_FORMAT,
                   colorize=True, backtrace=True, diagnose=False)

        if not self.config.log_dir:
            return

        log_dir = Path(self.config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        for filename, level in (("spillscope.log", self.config.level), ("errors.log", "ERROR")):
            logger.add(
                log_dir / filename,
                level=level,
                format=LOG_FORMAT,
                rotation=self.config.rotation,
                retention=self.config.retention,
                compression=self.config.compression,
                backtrace=True,
                diagnose=False
            )

    def get_logger(self, name: str = __name__):
        return logger.bind(name=name)


_logger_manager = LoggerManager()


def get_logger(name: str = __name__):
    """Get a logger bound to ``name``."""
    return _logger_manager.get_logger(name)


def setup_logging(config_path: Optional[Union[str, Path]] = None, level: Optional[str] = None):
    """Reinstall the sinks from ``config_path``, optionally overriding the level."""
    global _logger_manager
    _logger_manager = LoggerManager(config_path, level=level)


@contextmanager
def mission_context(mission: str) -> Iterator[None]:
    """Tag every record emitted inside the block with ``mission``."""
    with logger.contextualize(mission=mission or NO_MISSION):
        yield


class LoggerMixin:
    """Mixin class to add logging capabilities to any class."""

    @property
    def logger(self):
        return get_logger(self.__class__.__name__)


def log_execution_time(func):
    """Log how long a rendering stage took, in milliseconds."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        log = get_logger(func.__module__)
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            log.error(f"Stage {func.__name__} failed after {_elapsed_ms(started)} ms: {e}")
            raise
        log.info(f"Stage {func.__name__} finished in {_elapsed_ms(started)} ms")
        return result

    return wrapper


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
