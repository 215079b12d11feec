from app.db.models.points_ledger import PointsLedgerEntry
from app.db.models.referral_clicks import ReferralClick
from app.db.models.referral_conversions import ReferralConversion
from app.db.models.signups import Signup

__all__ = [
    "PointsLedgerEntry",
    "ReferralClick",
    "ReferralConversion",
    "Signup",
]
