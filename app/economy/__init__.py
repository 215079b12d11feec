from app.economy.points.service import PointsService
from app.economy.referrals.service import ReferralService

__all__ = [
    "PointsService",
    "ReferralService",
]
