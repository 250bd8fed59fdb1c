"""
transaction_store.py — Append-only hand-off for accepted payments
================================================================
The gatekeeper validates and normalizes a payment, then appends it here
with status "Pending". Status transitions belong to downstream
processing; nothing in this service updates a stored row.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Protocol
from uuid import uuid4

from .database import db_session
from .models import TransactionRecord

PENDING = "Pending"


@dataclass(frozen=True)
class Transaction:
    transaction_id: str
    payee_account_number: str
    swift_code: str
    amount: str
    currency: str
    status: str
    created_at: datetime
    recipient_name: Optional[str] = None
    memo: Optional[str] = None

    @classmethod
    def pending(cls, fields: Mapping[str, str]) -> "Transaction":
        """Build a new Pending transaction from validated payment fields."""
        return cls(
            transaction_id=uuid4().hex,
            recipient_name=fields.get("recipientName"),
            payee_account_number=fields["payeeAccountNumber"],
            swift_code=fields["swiftCode"],
            amount=fields["amount"],
            currency=fields["currency"],
            memo=fields.get("memo"),
            status=PENDING,
            created_at=datetime.now(timezone.utc),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "transactionId": self.transaction_id,
            "recipientName": self.recipient_name,
            "payeeAccountNumber": self.payee_account_number,
            "swiftCode": self.swift_code,
            "amount": self.amount,
            "currency": self.currency,
            "memo": self.memo,
            "status": self.status,
            "createdAt": self.created_at.isoformat(),
        }
        return {k: v for k, v in data.items() if v is not None}


class TransactionStore(Protocol):
    def append(self, transaction: Transaction) -> Transaction:
        ...


class SqlTransactionStore:
    """Persists transactions to the `transactions` table."""

    def append(self, transaction: Transaction) -> Transaction:
        with db_session() as session:
            session.add(
                TransactionRecord(
                    transaction_id=transaction.transaction_id,
                    created_at=transaction.created_at,
                    recipient_name=transaction.recipient_name,
                    payee_account_number=transaction.payee_account_number,
                    swift_code=transaction.swift_code,
                    amount=transaction.amount,
                    currency=transaction.currency,
                    memo=transaction.memo,
                    status=transaction.status,
                )
            )
        return transaction
