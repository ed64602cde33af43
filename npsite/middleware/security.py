from __future__ import annotations

from collections.abc import Callable
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_CSP = (
    "default-src 'self'",
    "base-uri 'none'",
    "frame-ancestors 'none'",
    "img-src 'self' data:",
    "font-src 'self' https://fonts.gstatic.com",
    "style-src 'self' https://fonts.googleapis.com",
    "script-src 'self'",
    "connect-src 'self'",
    "form-action 'self'",
    "object-src 'none'",
    "upgrade-insecure-requests",
)


def _is_secure_request(request: Request) -> bool:
    xf_proto = request.headers.get("x-forwarded-proto")
    if xf_proto:
        return "https" in xf_proto
    return request.url.scheme == "https"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Hardened response headers for the static pages and the JSON endpoints.
    - CSP built from a directive list, optionally report-only
    - HSTS on HTTPS only, never for local hosts
    - nosniff, frame and referrer policies
    """

    def __init__(
        self,
        app,
        *,
        csp_directives: Iterable[str] | None = None,
        report_only: bool = False,
        hsts: str = "max-age=63072000; includeSubDomains",
        referrer_policy: str = "strict-origin-when-cross-origin",
        permissions_policy: str = "geolocation=(), microphone=(), camera=()",
        frame_options: str = "DENY",
        skip_hsts_hosts: set[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.csp_directives = list(csp_directives or DEFAULT_CSP)
        self.report_only = report_only
        self.hsts = hsts
        self.referrer_policy = referrer_policy
        self.permissions_policy = permissions_policy
        self.frame_options = frame_options
        self.skip_hsts_hosts = skip_hsts_hosts or {"localhost", "127.0.0.1"}

    @property
    def csp(self) -> str:
        return "; ".join(self.csp_directives)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        csp_header = (
            "Content-Security-Policy-Report-Only"
            if self.report_only
            else "Content-Security-Policy"
        )
        response.headers.setdefault(csp_header, self.csp)

        if _is_secure_request(request):
            if request.url.hostname not in self.skip_hsts_hosts:
                response.headers.setdefault("Strict-Transport-Security", self.hsts)

        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", self.frame_options)
        response.headers.setdefault("Referrer-Policy", self.referrer_policy)
        response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        response.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
        if self.permissions_policy:
            response.headers.setdefault("Permissions-Policy", self.permissions_policy)
        return response
