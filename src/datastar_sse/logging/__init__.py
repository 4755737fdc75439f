"""Structured logging for datastar-sse."""

from datastar_sse.logging.logger import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
