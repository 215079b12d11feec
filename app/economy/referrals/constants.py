from __future__ import annotations

import re
from datetime import timedelta

CLICK_DEDUPE_WINDOW = timedelta(seconds=10)

BOT_USER_AGENT_RE = re.compile(
    r"(bot|crawler|spider|headless|pingdom|uptime|monitor|curl|wget|httpclient)",
    re.IGNORECASE,
)

PENDING_CAP = 10

LEADERBOARD_DEFAULT_LIMIT = 50
LEADERBOARD_MAX_LIMIT = 100

WEEK_LENGTH = timedelta(days=7)

CONVERSION_SOURCE_ID_PREFIX = "conversion:"

CLICK_SESSION_ID_MAX_LENGTH = 128
CLICK_LANDING_URL_MAX_LENGTH = 2048

LOOKUP_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
LOOKUP_WALLET_RE = re.compile(r"^0x[0-9a-f]{40}$")
