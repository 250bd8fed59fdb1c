"""
security_headers.py — Transport and content security response headers
=====================================================================
A declarative header set applied to every response. apply() is
idempotent and order-independent: it only sets fixed values and removes
headers that would disclose the server or framework.
"""
from __future__ import annotations

from typing import Dict, MutableMapping, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

HSTS_MAX_AGE_SECONDS = 365 * 24 * 60 * 60

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "base-uri 'self'",
        "form-action 'self'",
        "frame-ancestors 'self'",
        "object-src 'none'",
        "script-src 'self'",
        "script-src-attr 'none'",
        "img-src 'self' data:",
        "upgrade-insecure-requests",
    ]
)

DEFAULT_HEADERS: Dict[str, str] = {
    "Strict-Transport-Security": f"max-age={HSTS_MAX_AGE_SECONDS}; includeSubDomains; preload",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Content-Type-Options": "nosniff",
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "X-DNS-Prefetch-Control": "off",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}

SUPPRESSED_HEADERS: Tuple[str, ...] = ("Server", "X-Powered-By")


class SecurityHeaderPolicy:
    def __init__(
        self,
        headers: Dict[str, str] = DEFAULT_HEADERS,
        suppressed: Tuple[str, ...] = SUPPRESSED_HEADERS,
    ) -> None:
        self.headers = dict(headers)
        self.suppressed = suppressed

    def apply(self, headers: MutableMapping[str, str]) -> MutableMapping[str, str]:
        """Set the policy headers on ``headers`` in place and return it."""
        for name in self.suppressed:
            # Plain dicts are case-sensitive; Starlette's MutableHeaders is not.
            for key in [k for k in headers.keys() if k.lower() == name.lower()]:
                del headers[key]
        for name, value in self.headers.items():
            headers[name] = value
        return headers


default_policy = SecurityHeaderPolicy()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, policy: SecurityHeaderPolicy = default_policy) -> None:
        super().__init__(app)
        self.policy = policy

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        self.policy.apply(response.headers)
        return response
