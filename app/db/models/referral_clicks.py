from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import AppendOnlyMixin, Base


class ReferralClick(AppendOnlyMixin, Base):
    __tablename__ = "referral_clicks"
    __table_args__ = (
        Index("idx_referral_clicks_referrer_created", "referrer_signup_id", "created_at"),
        Index("idx_referral_clicks_code_session_created", "referral_code", "session_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    referral_code: Mapped[str] = mapped_column(String(16), nullable=False)
    referrer_signup_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("waitlist_signups.id"), nullable=False
    )
    ip_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    ua_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    session_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    landing_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_bot_suspected: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
