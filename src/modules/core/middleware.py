import re
import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Printable ASCII only: the id is forwarded as an outbound HTTP header.
_VALID_CORRELATION_ID = re.compile(r"^[\x21-\x7e]{1,128}$")

logger = structlog.get_logger()


def get_correlation_id() -> str:
    """Correlation ID of the request being served ("" outside a request)."""
    return correlation_id_var.get()


def _correlation_id_from(request: HttpRequest) -> str:
    cid = request.META.get("HTTP_X_REQUEST_ID", "")
    if cid and _VALID_CORRELATION_ID.match(cid):
        return cid
    return str(uuid.uuid4())


class CorrelationIdMiddleware:
    """Middleware that extracts or generates a correlation ID for each request.

    Reads X-Request-ID header from the incoming request. If absent or not
    a short printable-ASCII token, generates a new UUID4. The ID is stored
    in a ContextVar so structlog processors can inject it into every log
    line, and is returned to the client via the X-Request-ID response
    header.  Outbox rows written while
    serving the request copy it, so later retries log under the same ID.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = _correlation_id_from(request)
        token = correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        logger.info(
            "request_started",
            method=request.method,
            path=request.get_full_path(),
        )

        try:
            response = self.get_response(request)
        finally:
            correlation_id_var.reset(token)

        logger.info(
            "request_finished",
            method=request.method,
            path=request.get_full_path(),
            status_code=response.status_code,
        )

        response["X-Request-ID"] = cid
        return response
