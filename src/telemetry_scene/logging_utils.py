# logging_utils.py
import logging
import sys
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from .config import SceneConfig

DEFAULT_LOG_FILENAME = "telemetry-scene.log"
DEFAULT_LOG_ROTATION = "10 MB"
DEFAULT_LOG_RETENTION = 20
RotationRule = str | int | float | timedelta | Callable[[Any, Any], bool]
RetentionRule = str | int | float | timedelta | Callable[[list[Any]], Any]


class InterceptHandler(logging.Handler):
    """Redirect stdlib logging to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except (ValueError, TypeError):
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _parse_retention(value: str | None) -> RetentionRule | None:
    """Plain digit strings mean a file count, anything else is passed to loguru."""
    if value is None:
        return None
    return int(value) if value.isdigit() else value


def configure_logging(
    log_dir: Path | str | None,
    console_level: str = "INFO",
    console_json: bool = False,
    rotation: RotationRule | None = None,
    retention: RetentionRule | None = None,
) -> Path | None:
    """
    Initialize console logging and an optional rotated file sink (default: rotate at 10 MB,
    keep newest 20 files).

    Args:
        log_dir: Target directory for `telemetry-scene.log`; enables file sink when set.
        console_level: Console level string (e.g., INFO/DEBUG).
        console_json: Emit console as JSON when True; otherwise colored text.
        rotation: loguru rotation rule (e.g., '10 MB', '1 day', '12:00') or callable.
        retention: loguru retention rule (e.g., 5, '1 week') or callable.

    Returns:
        Path of the log file, or None when no file sink was added.
    """
    logger.remove()

    console_kwargs: dict[str, Any] = {
        "level": console_level.upper(),
        "serialize": console_json,
        "backtrace": False,
        "diagnose": False,
    }
    if not console_json:
        console_kwargs["format"] = (
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"
        )

    logger.add(sys.stderr, **console_kwargs)

    log_file: Path | None = None
    if log_dir is not None:
        log_dir_path = Path(log_dir)
        try:
            log_dir_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error(f"Failed to create log directory {log_dir_path}: {exc}")
        else:
            log_file = log_dir_path / DEFAULT_LOG_FILENAME
            logger.add(
                log_file,
                level="DEBUG",
                serialize=True,
                rotation=rotation if rotation is not None else DEFAULT_LOG_ROTATION,
                retention=retention if retention is not None else DEFAULT_LOG_RETENTION,
                backtrace=False,
                diagnose=False,
            )
            logger.info(f"File logging enabled at {log_file}")

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.NOTSET, force=True)
    logging.captureWarnings(True)
    return log_file


def configure_logging_from_config(config: "SceneConfig") -> Path | None:
    """Apply the logging section of a SceneConfig."""
    return configure_logging(
        log_dir=config.log_dir,
        console_level=config.log_level_console,
        console_json=config.log_json_console,
        rotation=config.log_rotation,
        retention=_parse_retention(config.log_retention),
    )
