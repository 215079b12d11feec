from __future__ import annotations

import hashlib
import hmac

from app.economy.referrals.constants import BOT_USER_AGENT_RE, CONVERSION_SOURCE_ID_PREFIX


def hash_for_attribution(value: str | None, *, secret: str) -> str | None:
    """Keyed one-way digest of an IP or user agent; raw values are never stored.

    Returns None when either the secret or the value is empty.
    """
    key = (secret or "").strip()
    candidate = (value or "").strip()
    if not key or not candidate:
        return None
    digest = hmac.new(
        key.encode("utf-8"),
        candidate.encode("utf-8"),
        hashlib.sha256,
    )
    return digest.hexdigest()


def is_bot_user_agent(user_agent: str | None) -> bool:
    if not user_agent or not user_agent.strip():
        return True
    return BOT_USER_AGENT_RE.search(user_agent) is not None


def conversion_source_id(conversion_id: int) -> str:
    return f"{CONVERSION_SOURCE_ID_PREFIX}{conversion_id}"
