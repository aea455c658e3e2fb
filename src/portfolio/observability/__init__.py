"""Observability helpers (structured logging)."""

from portfolio.observability.logging import get_logger, setup_logging


__all__ = ["get_logger", "setup_logging"]
