"""
NoteBox: Unhandled Error Middleware
======================================

What:  Turns any exception no handler claimed into a 500 "Server error".
How:   Registered innermost, so the response it builds still passes through
       the request ID, logging and security header middleware on its way out.
       Typed errors (NoteBoxError, HTTPException) never get here; the
       exception handlers in main.py answer them first.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from notebox.exceptions import ErrorMessage
from notebox.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            rid = request_id_var.get("")
            logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=exc)
            return PlainTextResponse(ErrorMessage.SERVER_ERROR.value, status_code=500)
