from __future__ import annotations

from .clicks import record_click
from .models import (
    ClickResult,
    Leaderboard,
    LeaderboardPeriod,
    ProfileCompletionResult,
    QualificationResult,
    RankedReferrer,
    RankingPopulation,
    RankStanding,
    ReferralCounts,
    ReferralsMe,
    SignupPosition,
)
from .position import (
    build_rank_standing,
    build_referral_counts,
    compute_percentile,
    find_signup,
    get_position,
    get_referrals_me,
    normalize_lookup_email,
    normalize_lookup_wallet,
)
from .qualification import complete_profile, qualify_on_profile_completion
from .ranking import assign_dense_ranks, get_leaderboard, rank_for, rank_population
from .time_utils import week_bounds_utc


class ReferralService:
    record_click = staticmethod(record_click)
    qualify_on_profile_completion = staticmethod(qualify_on_profile_completion)
    complete_profile = staticmethod(complete_profile)
    week_bounds_utc = staticmethod(week_bounds_utc)
    assign_dense_ranks = staticmethod(assign_dense_ranks)
    rank_population = staticmethod(rank_population)
    get_leaderboard = staticmethod(get_leaderboard)
    rank_for = staticmethod(rank_for)
    compute_percentile = staticmethod(compute_percentile)
    build_rank_standing = staticmethod(build_rank_standing)
    build_referral_counts = staticmethod(build_referral_counts)
    normalize_lookup_email = staticmethod(normalize_lookup_email)
    normalize_lookup_wallet = staticmethod(normalize_lookup_wallet)
    find_signup = staticmethod(find_signup)
    get_position = staticmethod(get_position)
    get_referrals_me = staticmethod(get_referrals_me)


__all__ = [
    "ClickResult",
    "Leaderboard",
    "LeaderboardPeriod",
    "ProfileCompletionResult",
    "QualificationResult",
    "RankStanding",
    "RankedReferrer",
    "RankingPopulation",
    "ReferralCounts",
    "ReferralService",
    "ReferralsMe",
    "SignupPosition",
]
