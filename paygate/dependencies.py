from __future__ import annotations

from functools import lru_cache

from .auth.core import CredentialVerifier
from .auth.seed import load_credentials
from .config import settings
from .gatekeeper import Gatekeeper
from .rate_limit import RateLimiter
from .transaction_store import SqlTransactionStore


@lru_cache
def get_gatekeeper() -> Gatekeeper:
    """Process-wide gatekeeper; the limiter's window table is shared by all requests."""
    return Gatekeeper(
        credentials=load_credentials(settings.credentials_path),
        transactions=SqlTransactionStore(),
        limiter=RateLimiter(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
            storage_uri=settings.rate_limit_storage_uri,
        ),
        verifier=CredentialVerifier(rounds=settings.bcrypt_rounds),
    )
