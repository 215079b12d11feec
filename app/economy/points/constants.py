from __future__ import annotations

SOURCE_WAITLIST_SIGNUP = "waitlist_signup"
SOURCE_TASK = "task"
SOURCE_CSW_LINK = "csw_link"
SOURCE_REFERRAL_QUALIFIED = "referral_qualified"
# Written by earlier referral flows; still counted as invite points.
SOURCE_REFERRAL_SIGNUP = "referral_signup"
SOURCE_REFERRAL_CSW_LINK = "referral_csw_link"

SOCIAL_SOURCE_PREFIX = "social_"
BONUS_SOURCE_PREFIX = "bonus_"

INVITE_SOURCES = frozenset(
    {
        SOURCE_REFERRAL_QUALIFIED,
        SOURCE_REFERRAL_SIGNUP,
        SOURCE_REFERRAL_CSW_LINK,
    }
)

QUALIFIED_REFERRAL_POINTS = 100

LEDGER_LIST_LIMIT = 200

POINTS_LEADERBOARD_DEFAULT_LIMIT = 10
POINTS_LEADERBOARD_MAX_LIMIT = 100
# Only the earliest profile-complete signups compete on the points board.
POINTS_LEADERBOARD_POPULATION_CAP = 100
