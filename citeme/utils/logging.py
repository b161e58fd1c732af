"""Logging configuration for CiteMe."""
import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that flood DEBUG output during uploads and rendering
NOISY_LOGGERS = ("google", "urllib3", "grpc", "PIL", "fontTools")


def setup_logging(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    log_file: Optional[str] = None
) -> None:
    """Configure logging for CiteMe.

    Records go to stderr, so CLI output on stdout stays clean. Client
    libraries stay at WARNING unless ``level`` is stricter.

    Args:
        level: Logging level for CiteMe (e.g., logging.INFO, logging.DEBUG)
        format_string: Custom format string for log messages
        log_file: Optional file path to also write logs to
    """
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers
    )
    logging.getLogger("citeme").setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``citeme`` namespace.

    Args:
        name: Module name (typically __name__)
    """
    if name != "citeme" and not name.startswith("citeme."):
        name = f"citeme.{name}"
    return logging.getLogger(name)
