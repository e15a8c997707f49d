"""HTTP middleware."""
from checkpoint.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
