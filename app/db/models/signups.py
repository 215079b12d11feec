from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class Signup(Base):
    """Waitlist signup row. Owned by the signup flow; this service only reads it,
    except for the set-once ``profile_completed_at`` column."""

    __tablename__ = "waitlist_signups"
    __table_args__ = (
        Index(
            "uq_waitlist_signups_referral_code",
            "referral_code",
            unique=True,
            postgresql_where=text("referral_code IS NOT NULL"),
        ),
        Index("idx_waitlist_signups_primary_wallet", "primary_wallet"),
        Index("idx_waitlist_signups_embedded_wallet", "embedded_wallet"),
        Index("idx_waitlist_signups_persona_coin", "persona", "has_creator_coin"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    referral_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    primary_wallet: Mapped[str | None] = mapped_column(Text, nullable=True)
    embedded_wallet: Mapped[str | None] = mapped_column(Text, nullable=True)
    persona: Mapped[str | None] = mapped_column(String(32), nullable=True)
    has_creator_coin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    profile_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
