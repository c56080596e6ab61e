"""Request ID propagation through contextvars (async-safe)."""

import uuid
from contextvars import ContextVar
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

NO_REQUEST_ID = "no-request-id"


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Current request ID, or "no-request-id" outside a request (e.g. Celery tasks)."""
    return request_id_var.get() or NO_REQUEST_ID


def set_request_id(request_id: Optional[str]):
    """Set the request ID for the current context; returns the reset token."""
    return request_id_var.set(request_id)


def reset_request_id(token) -> None:
    request_id_var.reset(token)
