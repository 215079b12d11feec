from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import AppendOnlyMixin, Base


class PointsLedgerEntry(AppendOnlyMixin, Base):
    __tablename__ = "waitlist_points_ledger"
    __table_args__ = (
        UniqueConstraint(
            "signup_id",
            "source",
            "source_id",
            name="uq_waitlist_points_ledger_signup_source",
        ),
        CheckConstraint("amount > 0", name="ck_waitlist_points_ledger_amount_positive"),
        CheckConstraint("length(source_id) > 0", name="ck_waitlist_points_ledger_source_id"),
        Index("idx_waitlist_points_ledger_signup_created", "signup_id", "created_at"),
        Index("idx_waitlist_points_ledger_source", "source"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    signup_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("waitlist_signups.id"), nullable=False
    )
    source: Mapped[str] = mapped_column(String(48), nullable=False)
    source_id: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
