from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class ReferralConversion(Base):
    __tablename__ = "referral_conversions"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','qualified')",
            name="ck_referral_conversions_status",
        ),
        CheckConstraint(
            "(status = 'qualified') = (qualified_at IS NOT NULL)",
            name="ck_referral_conversions_qualified_at",
        ),
        CheckConstraint(
            "referrer_signup_id <> invitee_signup_id",
            name="ck_referral_conversions_no_self_referral",
        ),
        Index(
            "idx_referral_conversions_referrer_created",
            "referrer_signup_id",
            "created_at",
        ),
        Index("idx_referral_conversions_code_created", "referral_code", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    referral_code: Mapped[str] = mapped_column(String(16), nullable=False)
    referrer_signup_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("waitlist_signups.id"), nullable=False
    )
    invitee_signup_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("waitlist_signups.id"),
        unique=True,
        nullable=False,
    )
    is_valid: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    invalid_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, server_default=text("'pending'")
    )
    qualified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
