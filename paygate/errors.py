"""
errors.py — Failure taxonomy for the gatekeeping layer
=======================================================
Validation failures and rate-limit denials are ordinary return values
(ValidationResult, Decision). Only authentication failures and internal
faults are modelled as exceptions.
"""
from __future__ import annotations


class GatekeeperError(Exception):
    """Base class for every error raised by the gatekeeping layer."""


class AuthenticationError(GatekeeperError):
    """Credential check failed. Subclasses pick the status code."""

    status_code = 401
    public_message = "Invalid credentials."


class IdentityNotFound(AuthenticationError):
    status_code = 404
    public_message = "User not found."


class InvalidSecret(AuthenticationError):
    status_code = 401
    public_message = "Invalid credentials."


class InternalFailure(GatekeeperError):
    """Unexpected fault (e.g. in hashing). Never shown to callers in detail."""
