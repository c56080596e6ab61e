"""Observability - structured logging and request correlation"""

from .logging_config import configure_logging, JSONFormatter, RequestIDFilter
from .middleware import RequestIDMiddleware
from .request_id import get_request_id, set_request_id

__all__ = [
    "configure_logging",
    "JSONFormatter",
    "RequestIDFilter",
    "RequestIDMiddleware",
    "get_request_id",
    "set_request_id",
]
