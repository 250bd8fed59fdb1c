from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class TransactionRecord(Base):
    """Append-only record of an accepted payment submission."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    transaction_id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)

    # Normalized payment fields (amount kept as its validated decimal text)
    recipient_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    payee_account_number: Mapped[str] = mapped_column(String(18))
    swift_code: Mapped[str] = mapped_column(String(11))
    amount: Mapped[str] = mapped_column(String(17))
    currency: Mapped[str] = mapped_column(String(3))
    memo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(16), default="Pending", index=True)
