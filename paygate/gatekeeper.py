"""
gatekeeper.py — Request pipeline for the two protected actions
==============================================================
Every request walks the same stages and stops at the first failing one:

  RATE_CHECK ──deny──▶ 429
  HEADERS_ATTACHED
  FIELD_VALIDATION ──errors──▶ 400 (every failing field)
  CREDENTIAL_CHECK (login only) ──▶ 404 unknown identity / 401 bad secret
  ACTION
  RESPONSE ──▶ 200

The outcome records the stage it stopped at, the status code, the JSON
body and the headers (rate-limit + security policy) to send.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .auth.core import CredentialVerifier
from .auth.store import CredentialStore
from .errors import AuthenticationError
from .rate_limit import RateLimiter
from .security_headers import SecurityHeaderPolicy, default_policy
from .transaction_store import Transaction, TransactionStore
from .validation.engine import LOGIN_RULES, PAYMENT_RULES, ValidationEngine, ValidationResult, default_engine

logger = logging.getLogger("paygate.gatekeeper")

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again after the window resets."


class Stage(str, Enum):
    RATE_CHECK = "rate_check"
    HEADERS_ATTACHED = "headers_attached"
    FIELD_VALIDATION = "field_validation"
    CREDENTIAL_CHECK = "credential_check"
    ACTION = "action"
    RESPONSE = "response"


@dataclass
class GateOutcome:
    status_code: int
    body: Dict[str, Any]
    stage: Stage
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code == 200


class Gatekeeper:
    def __init__(
        self,
        credentials: CredentialStore,
        transactions: TransactionStore,
        limiter: RateLimiter,
        verifier: Optional[CredentialVerifier] = None,
        engine: Optional[ValidationEngine] = None,
        header_policy: Optional[SecurityHeaderPolicy] = None,
    ) -> None:
        self.credentials = credentials
        self.transactions = transactions
        self.limiter = limiter
        self.verifier = verifier or CredentialVerifier()
        self.engine = engine or default_engine
        self.header_policy = header_policy or default_policy

    # -----------------------------------------------------------------------
    # Shared stages
    # -----------------------------------------------------------------------

    def _admit(self, client_key: str) -> tuple[Dict[str, str], Optional[GateOutcome]]:
        decision = self.limiter.check(client_key)
        headers = self.header_policy.apply(decision.as_headers())
        if not decision.allowed:
            logger.warning("Rate limit exceeded for client %s", client_key)
            return headers, GateOutcome(
                status_code=429,
                body={
                    "message": RATE_LIMIT_MESSAGE,
                    "remaining": decision.remaining,
                    "resetAt": decision.reset_at_iso,
                },
                stage=Stage.RATE_CHECK,
                headers=headers,
            )
        return headers, None

    @staticmethod
    def _rejected(result: ValidationResult, headers: Dict[str, str]) -> GateOutcome:
        return GateOutcome(
            status_code=400,
            body={"errors": result.error_list()},
            stage=Stage.FIELD_VALIDATION,
            headers=headers,
        )

    # -----------------------------------------------------------------------
    # Protected actions
    # -----------------------------------------------------------------------

    def login(self, client_key: str, body: Any) -> GateOutcome:
        headers, denied = self._admit(client_key)
        if denied:
            return denied

        result = self.engine.validate(body, LOGIN_RULES)
        if not result.accepted:
            return self._rejected(result, headers)

        fields = result.normalized_fields
        try:
            credential = self.verifier.authenticate(self.credentials, fields["idNumber"], fields["password"])
        except AuthenticationError as exc:
            return GateOutcome(
                status_code=exc.status_code,
                body={"message": exc.public_message},
                stage=Stage.CREDENTIAL_CHECK,
                headers=headers,
            )

        return GateOutcome(
            status_code=200,
            body={"message": "Login successful!", "user": credential.public_view()},
            stage=Stage.RESPONSE,
            headers=headers,
        )

    def submit_payment(self, client_key: str, body: Any) -> GateOutcome:
        headers, denied = self._admit(client_key)
        if denied:
            return denied

        result = self.engine.validate(body, PAYMENT_RULES)
        if not result.accepted:
            return self._rejected(result, headers)

        transaction = self.transactions.append(Transaction.pending(result.normalized_fields))
        logger.info(
            "Payment %s accepted (%s %s)",
            transaction.transaction_id,
            transaction.currency,
            transaction.amount,
        )
        return GateOutcome(
            status_code=200,
            body={"message": "Payment submitted for processing.", "transaction": transaction.to_dict()},
            stage=Stage.RESPONSE,
            headers=headers,
        )
