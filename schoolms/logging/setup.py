import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from schoolms.core.config import get_settings
from schoolms.logging.filters import SensitiveDataFilter
from schoolms.logging.formatters import ColorizedFormatter, JSONFormatter

__all__ = ["get_logger", "setup_logging"]

settings = get_settings()


def _file_handler(log_dir: Path, filename: str) -> RotatingFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename, maxBytes=10 * 1024 * 1024, backupCount=5
    )
    handler.setFormatter(JSONFormatter())
    handler.addFilter(SensitiveDataFilter())
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Lấy logger với cấu hình thích hợp.

    Console output is colorized and goes to stdout. In production the cache
    modules additionally write JSON lines to ``{LOG_DIR}/cache.log``.

    Args:
        name: Tên logger

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColorizedFormatter())
    console_handler.addFilter(SensitiveDataFilter())
    logger.addHandler(console_handler)

    if settings.is_production:
        filename = "cache.log" if name.startswith("schoolms.cache") else "app.log"
        logger.addHandler(_file_handler(Path(settings.LOG_DIR), filename))

    return logger


def setup_logging() -> None:
    """
    Thiết lập root logger cho ứng dụng.

    Removes previously installed root handlers so repeated app creation (tests,
    reloads) does not duplicate output.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_schoolms_handler", False):
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColorizedFormatter())
    console_handler.addFilter(SensitiveDataFilter())
    console_handler._schoolms_handler = True
    root_logger.addHandler(console_handler)

    if settings.is_production:
        file_handler = _file_handler(Path(settings.LOG_DIR), "app.log")
        file_handler._schoolms_handler = True
        root_logger.addHandler(file_handler)

    logging.getLogger("uvicorn.access").setLevel(log_level)
