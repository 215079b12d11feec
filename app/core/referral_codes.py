from __future__ import annotations

import re

REFERRAL_CODE_MAX_LENGTH = 16

_NON_CODE_CHARS_RE = re.compile(r"[^A-Z0-9]")


def normalize_referral_code(raw_code: str | None) -> str:
    """Upper-cases, strips everything outside A-Z0-9 and caps the length.

    Returns an empty string for garbage input; callers treat that as "no code".
    """
    normalized = (raw_code or "").strip().upper()
    return _NON_CODE_CHARS_RE.sub("", normalized)[:REFERRAL_CODE_MAX_LENGTH]
