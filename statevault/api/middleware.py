"""HTTP middleware: security headers and request body size limit."""
from typing import Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.datastructures import Headers
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .exceptions import PayloadTooLargeError, envelope_response

DEFAULT_CSP = "; ".join([
    "default-src 'self'",
    "script-src 'self' 'unsafe-inline' 'unsafe-eval'",
    "style-src 'self' 'unsafe-inline'",
    "img-src 'self' data: https: blob:",
    "connect-src 'self'",
    "font-src 'self'",
])


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses.

    Includes the cross-origin isolation pair (COEP ``credentialless``, COOP
    ``same-origin``) the bundled SPA expects.
    """

    DEFAULT_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "Referrer-Policy": "no-referrer",
        "Cross-Origin-Embedder-Policy": "credentialless",
        "Cross-Origin-Opener-Policy": "same-origin",
        "Cross-Origin-Resource-Policy": "same-origin",
        "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    }

    def __init__(
        self,
        app,
        csp_policy: Optional[str] = None,
        custom_headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(app)
        self.csp_policy = csp_policy or DEFAULT_CSP
        self.custom_headers = custom_headers or {}

    def get_security_headers(self) -> Dict[str, str]:
        headers = dict(self.DEFAULT_HEADERS)
        headers["Content-Security-Policy"] = self.csp_policy
        headers.update(self.custom_headers)
        return headers

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        for header, value in self.get_security_headers().items():
            # Only add HSTS for HTTPS requests
            if header == "Strict-Transport-Security" and request.url.scheme != "https":
                continue
            response.headers[header] = value

        return response


class BodySizeLimitMiddleware:
    """Reject request bodies larger than ``max_size`` bytes.

    A declared ``Content-Length`` is checked up front. Bodies without one
    (chunked transfer encoding) are counted as they stream in, and the
    request fails with 413 once the limit is crossed.
    """

    def __init__(self, app: ASGIApp, max_size: int = 50 * 1024 * 1024):
        self.app = app
        self.max_size = max_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                await envelope_response(400, "Invalid Content-Length header")(scope, receive, send)
                return
            if size > self.max_size:
                error = PayloadTooLargeError(self.max_size)
                await envelope_response(error.status_code, error.detail)(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_size:
                    raise PayloadTooLargeError(self.max_size)
            return message

        await self.app(scope, limited_receive, send)
