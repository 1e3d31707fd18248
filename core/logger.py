# core/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# requests/urllib3 log every connection at DEBUG; keep that out of progress output
# unless asked for.
HTTP_LOGGERS = ("urllib3", "requests")

_configured = False


def _level(name: str, default: int = logging.INFO) -> int:
    return getattr(logging, name.upper(), default)


def _file_handler(formatter: logging.Formatter) -> logging.Handler | None:
    if os.getenv("LOG_TO_FILE", "false").lower() != "true":
        return None

    log_file = os.getenv("LOG_FILE", "logs/webstore_stats.log")
    try:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=int(os.getenv("LOG_MAX_BYTES", str(2 * 1024 * 1024))),
            backupCount=int(os.getenv("LOG_BACKUPS", "3")),
            encoding="utf-8",
        )
    except OSError as e:
        logging.getLogger(__name__).warning(
            "Failed to initialize file logging at %s: %s", log_file, e
        )
        return None
    fh.setFormatter(formatter)
    return fh


def setup_logging():
    """Configure the root logger once per process from LOG_* variables."""
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger()
    root.setLevel(_level(os.getenv("LOG_LEVEL", "INFO")))

    http_level = _level(os.getenv("LOG_HTTP_LEVEL", "WARNING"), logging.WARNING)
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    # Leave handlers alone when something (pytest, an embedding app) already set them up.
    if root.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT)
    if os.getenv("LOG_TO_STDOUT", "true").lower() == "true":
        ch = logging.StreamHandler(sys.stdout)
        ch.setFormatter(formatter)
        root.addHandler(ch)

    fh = _file_handler(formatter)
    if fh is not None:
        root.addHandler(fh)


def set_level(level: int) -> None:
    """Override the root level after setup, e.g. for --verbose."""
    setup_logging()
    logging.getLogger().setLevel(level)


def get_logger(name: str | None = None) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
