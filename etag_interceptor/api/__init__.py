from .error_handlers import setup_error_handlers
from .middleware import ETagMiddleware, RequestIDMiddleware, PrometheusMiddleware

__all__ = [
    "setup_error_handlers",
    "ETagMiddleware",
    "RequestIDMiddleware",
    "PrometheusMiddleware",
]
