from __future__ import annotations

import logging
import secrets
from typing import Optional

import bcrypt

from .store import Credential, CredentialStore
from ..config import settings
from ..validation.patterns import BCRYPT_MAX_BYTES
from ..errors import IdentityNotFound, InternalFailure, InvalidSecret

logger = logging.getLogger("paygate.auth")


def mask_identity(identity: str) -> str:
    """Keep only the last three characters of an identity for log lines."""
    if not identity:
        return "<empty>"
    return "*" * max(len(identity) - 3, 0) + identity[-3:]


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

class CredentialVerifier:
    """
    bcrypt-backed one-way hashing and verification.

    Each hash() call draws a fresh salt, so hashing the same secret twice
    yields different strings. verify() reads the salt and cost back out of
    the stored hash and relies on bcrypt's constant-time comparison.
    """

    def __init__(self, rounds: Optional[int] = None) -> None:
        self.rounds = settings.bcrypt_rounds if rounds is None else rounds
        if not 4 <= self.rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {self.rounds}")
        # Same cost as real hashes; checked against when the identity is unknown.
        self._decoy_hash = self.hash(secrets.token_urlsafe(16))

    def hash(self, secret: str) -> str:
        try:
            encoded = secret.encode("utf-8")
        except (UnicodeEncodeError, AttributeError) as exc:
            logger.error("Password hashing failed: %s", type(exc).__name__)
            raise InternalFailure("Password hashing failed.") from exc
        if len(encoded) > BCRYPT_MAX_BYTES:
            raise InternalFailure("Secret exceeds the 72-byte bcrypt input limit.")
        try:
            return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")
        except (ValueError, TypeError, AttributeError) as exc:
            logger.error("Password hashing failed: %s", type(exc).__name__)
            raise InternalFailure("Password hashing failed.") from exc

    def verify(self, secret: str, stored_hash: str) -> bool:
        if not secret or not stored_hash:
            return False
        try:
            encoded = secret.encode("utf-8")
        except UnicodeEncodeError:
            return False
        if len(encoded) > BCRYPT_MAX_BYTES:
            logger.info("Secret longer than %d bytes rejected without a bcrypt check.", BCRYPT_MAX_BYTES)
            return False
        try:
            return bcrypt.checkpw(encoded, stored_hash.encode("ascii"))
        except (ValueError, TypeError, UnicodeEncodeError):
            # The hash itself is never logged.
            logger.error("Stored credential hash is malformed; treating as a failed verification.")
            return False

    def authenticate(self, store: CredentialStore, identity: str, secret: str) -> Credential:
        """
        Look up ``identity`` and check ``secret`` against its stored hash.

        Raises IdentityNotFound or InvalidSecret. An unknown identity is still
        run through a full bcrypt check against a decoy hash of the same
        cost, so the two failures take comparable time.
        """
        credential = store.find_by_identity(identity)
        if credential is None:
            self.verify(secret, self._decoy_hash)
            logger.info("Login rejected: unknown identity %s", mask_identity(identity))
            raise IdentityNotFound()

        if not self.verify(secret, credential.hashed_secret):
            logger.info("Login rejected: bad secret for subject %s", credential.subject_id)
            raise InvalidSecret()

        logger.info("Login accepted for subject %s", credential.subject_id)
        return credential
