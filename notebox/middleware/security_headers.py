"""
NoteBox: Security Headers Middleware
=======================================

What:  Adds a fixed set of defensive HTTP headers to every response.
How:   Sets the headers after the downstream app responds and drops the
       Server header so the stack is not advertised.

Headers:
    Content-Security-Policy            default-src 'self' (JSON API, no assets)
    Cross-Origin-Opener-Policy         same-origin
    Cross-Origin-Resource-Policy       same-origin
    Referrer-Policy                    no-referrer
    Strict-Transport-Security          one year, subdomains
    X-Content-Type-Options             nosniff
    X-DNS-Prefetch-Control             off
    X-Download-Options                 noopen
    X-Frame-Options                    SAMEORIGIN
    X-Permitted-Cross-Domain-Policies  none
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

SECURITY_HEADERS: Dict[str, str] = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Applies SECURITY_HEADERS; existing values set by a route win."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if "server" in response.headers:
            del response.headers["server"]

        return response
