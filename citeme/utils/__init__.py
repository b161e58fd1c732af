"""Utility helpers."""
from .logging import get_logger, setup_logging
from .rate_limiter import rate_limit_api, reset_rate_limits

__all__ = ["get_logger", "setup_logging", "rate_limit_api", "reset_rate_limits"]
