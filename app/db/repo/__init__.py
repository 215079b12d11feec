from app.db.repo.points_ledger_repo import PointsLedgerRepo
from app.db.repo.referral_clicks_repo import ReferralClicksRepo
from app.db.repo.referral_conversions_repo import ReferralConversionsRepo
from app.db.repo.signups_repo import SignupsRepo

__all__ = [
    "PointsLedgerRepo",
    "ReferralClicksRepo",
    "ReferralConversionsRepo",
    "SignupsRepo",
]
