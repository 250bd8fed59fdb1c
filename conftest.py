"""
pytest configuration – initialise the transaction table before tests run
and provide cheap (low bcrypt cost) credentials and gatekeepers.
"""
import os

os.environ.setdefault("PAYGATE_DATABASE_URL", "sqlite:///./test_paygate.db")
os.environ.setdefault("PAYGATE_LOG_FORMAT", "text")

import pytest
from fastapi.testclient import TestClient

from paygate.auth.core import CredentialVerifier
from paygate.auth.seed import provision_credential
from paygate.auth.store import StaticCredentialStore
from paygate.database import Base, engine, init_db
from paygate.dependencies import get_gatekeeper
from paygate.gatekeeper import Gatekeeper
from paygate.main import app
from paygate.rate_limit import RateLimiter
from paygate.transaction_store import SqlTransactionStore

# bcrypt's minimum cost keeps the suite fast; production uses 12.
TEST_ROUNDS = 4

KNOWN_ID = "9001015009087"
KNOWN_PASSWORD = "Customer123!"


@pytest.fixture(autouse=True, scope="session")
def create_tables():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="session")
def verifier() -> CredentialVerifier:
    return CredentialVerifier(rounds=TEST_ROUNDS)


@pytest.fixture(scope="session")
def credential_store(verifier) -> StaticCredentialStore:
    return StaticCredentialStore(
        [
            provision_credential(1, "John Doe", KNOWN_ID, "1234567890", KNOWN_PASSWORD, verifier),
            provision_credential(2, "Jane Smith", "8505125432109", "2345678901", "TestUser456!", verifier),
        ]
    )


@pytest.fixture
def make_gatekeeper(credential_store, verifier):
    """Factory: a gatekeeper with its own limiter so tests never share windows."""

    def _make(max_requests: int = 100, window_seconds: int = 900, transactions=None) -> Gatekeeper:
        return Gatekeeper(
            credentials=credential_store,
            transactions=transactions or SqlTransactionStore(),
            limiter=RateLimiter(max_requests=max_requests, window_seconds=window_seconds),
            verifier=verifier,
        )

    return _make


@pytest.fixture
def client(make_gatekeeper):
    gatekeeper = make_gatekeeper()
    app.dependency_overrides[get_gatekeeper] = lambda: gatekeeper
    yield TestClient(app)
    app.dependency_overrides.clear()
