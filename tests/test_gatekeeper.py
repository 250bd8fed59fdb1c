"""
Tests for the gatekeeper pipeline: stage exits, status codes and
response bodies, independent of HTTP.

Run with: pytest tests/test_gatekeeper.py -v
"""
from __future__ import annotations

import json
from typing import List

import pytest

from paygate.gatekeeper import Stage
from paygate.transaction_store import Transaction

from conftest import KNOWN_ID, KNOWN_PASSWORD


class RecordingStore:
    """Append-only fake collaborator."""

    def __init__(self) -> None:
        self.appended: List[Transaction] = []

    def append(self, transaction: Transaction) -> Transaction:
        self.appended.append(transaction)
        return transaction


class FailingStore:
    def append(self, transaction: Transaction) -> Transaction:
        raise RuntimeError("database unavailable")


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


def _payment(**overrides) -> dict:
    body = {
        "recipientName": "John Doe",
        "payeeAccountNumber": "1234567890",
        "swiftCode": "abcdzajj",
        "amount": "100.50",
        "currency": "ZAR",
        "memo": "Invoice 42",
    }
    body.update(overrides)
    return body


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

def test_login_success(make_gatekeeper):
    outcome = make_gatekeeper().login("1.1.1.1", {"idNumber": KNOWN_ID, "password": KNOWN_PASSWORD})
    assert outcome.status_code == 200
    assert outcome.stage is Stage.RESPONSE
    assert outcome.body == {"message": "Login successful!", "user": {"id": 1, "fullName": "John Doe"}}
    assert "$2b$" not in json.dumps(outcome.body)


def test_login_unknown_identity_is_404(make_gatekeeper):
    outcome = make_gatekeeper().login("1.1.1.1", {"idNumber": "1234567890123", "password": KNOWN_PASSWORD})
    assert outcome.status_code == 404
    assert outcome.stage is Stage.CREDENTIAL_CHECK
    assert outcome.body == {"message": "User not found."}


def test_login_bad_secret_is_401(make_gatekeeper):
    outcome = make_gatekeeper().login("1.1.1.1", {"idNumber": KNOWN_ID, "password": "Wrong123!"})
    assert outcome.status_code == 401
    assert outcome.stage is Stage.CREDENTIAL_CHECK
    assert outcome.body == {"message": "Invalid credentials."}


def test_login_malformed_identity_is_400(make_gatekeeper):
    outcome = make_gatekeeper().login("1.1.1.1", {"idNumber": "123", "password": ""})
    assert outcome.status_code == 400
    assert outcome.stage is Stage.FIELD_VALIDATION
    assert [e["field"] for e in outcome.body["errors"]] == ["idNumber", "password"]


def test_login_rate_limited_before_validation(make_gatekeeper):
    gk = make_gatekeeper(max_requests=2)
    gk.login("9.9.9.9", {})
    gk.login("9.9.9.9", {})
    outcome = gk.login("9.9.9.9", {"idNumber": KNOWN_ID, "password": KNOWN_PASSWORD})
    assert outcome.status_code == 429
    assert outcome.stage is Stage.RATE_CHECK
    assert outcome.body["remaining"] == 0
    assert "resetAt" in outcome.body
    assert "Retry-After" in outcome.headers
    assert "Strict-Transport-Security" in outcome.headers


def test_every_outcome_carries_security_headers(make_gatekeeper):
    gk = make_gatekeeper()
    for outcome in (
        gk.login("2.2.2.2", {"idNumber": KNOWN_ID, "password": KNOWN_PASSWORD}),
        gk.login("2.2.2.2", {"idNumber": KNOWN_ID, "password": "nope"}),
        gk.login("2.2.2.2", "not an object"),
    ):
        assert outcome.headers["X-Content-Type-Options"] == "nosniff"
        assert outcome.headers["RateLimit-Limit"] == "100"


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------

def test_payment_accepted_and_handed_off(make_gatekeeper, store):
    outcome = make_gatekeeper(transactions=store).submit_payment("3.3.3.3", _payment())
    assert outcome.status_code == 200
    assert outcome.body["message"] == "Payment submitted for processing."

    tx = outcome.body["transaction"]
    assert tx["status"] == "Pending"
    assert tx["swiftCode"] == "ABCDZAJJ"
    assert tx["transactionId"]
    assert len(store.appended) == 1
    assert store.appended[0].transaction_id == tx["transactionId"]


def test_payment_ids_are_unique(make_gatekeeper, store):
    gk = make_gatekeeper(transactions=store)
    ids = {gk.submit_payment("3.3.3.3", _payment()).body["transaction"]["transactionId"] for _ in range(5)}
    assert len(ids) == 5


def test_payment_reports_all_errors_and_skips_store(make_gatekeeper, store):
    outcome = make_gatekeeper(transactions=store).submit_payment(
        "3.3.3.3", _payment(payeeAccountNumber="123", swiftCode="ABC")
    )
    assert outcome.status_code == 400
    assert [e["field"] for e in outcome.body["errors"]] == ["payeeAccountNumber", "swiftCode"]
    assert store.appended == []


def test_payment_cannot_smuggle_status(make_gatekeeper, store):
    outcome = make_gatekeeper(transactions=store).submit_payment("3.3.3.3", _payment(status="Completed"))
    assert outcome.status_code == 400
    assert outcome.body["errors"] == [{"field": "status", "message": "Field is not permitted."}]


def test_store_failure_propagates(make_gatekeeper):
    with pytest.raises(RuntimeError):
        make_gatekeeper(transactions=FailingStore()).submit_payment("3.3.3.3", _payment())
