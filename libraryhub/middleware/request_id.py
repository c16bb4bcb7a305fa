"""
LibraryHub Backend — Request ID Middleware
============================================

What:  Gives every request a short correlation id, exposed as the
       `X-Request-ID` response header and through `request_id_var`.

A client-supplied `X-Request-ID` is reused when it looks like an id
(letters, digits, dashes, at most 64 chars); anything else is replaced so
arbitrary header text never reaches the logs.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9-]{1,64}$")

# Coroutine-local; concurrent requests share a thread.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(incoming: str = None) -> str:
    """Reuse a well-formed incoming id, otherwise mint a new one."""
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
