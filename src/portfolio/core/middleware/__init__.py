"""Custom middleware components."""

from portfolio.core.middleware.logging import LoggingMiddleware
from portfolio.core.middleware.request_id import RequestIDMiddleware


__all__ = ["LoggingMiddleware", "RequestIDMiddleware"]
