"""
Tests for the response security header policy.

Run with: pytest tests/test_security_headers.py -v
"""
from __future__ import annotations

from starlette.datastructures import MutableHeaders

from paygate.security_headers import SecurityHeaderPolicy, default_policy


def test_hsts_one_year_with_subdomains_and_preload():
    headers = default_policy.apply({})
    assert headers["Strict-Transport-Security"] == "max-age=31536000; includeSubDomains; preload"


def test_full_header_set():
    headers = default_policy.apply({})
    assert headers["X-Frame-Options"] == "SAMEORIGIN"
    assert headers["X-Content-Type-Options"] == "nosniff"
    assert headers["X-DNS-Prefetch-Control"] == "off"
    assert headers["Referrer-Policy"] == "no-referrer"
    assert headers["Content-Security-Policy"].startswith("default-src 'self'")
    assert "object-src 'none'" in headers["Content-Security-Policy"]


def test_identity_headers_are_suppressed():
    headers = default_policy.apply({"server": "uvicorn", "X-Powered-By": "Express", "Content-Type": "application/json"})
    assert "server" not in headers
    assert "X-Powered-By" not in headers
    assert headers["Content-Type"] == "application/json"


def test_apply_is_idempotent_on_starlette_headers():
    headers = MutableHeaders()
    headers["Server"] = "uvicorn"
    default_policy.apply(headers)
    default_policy.apply(headers)
    assert headers.getlist("x-frame-options") == ["SAMEORIGIN"]
    assert "server" not in headers


def test_custom_policy():
    policy = SecurityHeaderPolicy(headers={"X-Frame-Options": "DENY"}, suppressed=())
    headers = policy.apply({"Server": "x"})
    assert headers == {"Server": "x", "X-Frame-Options": "DENY"}
