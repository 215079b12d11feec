class PointsError(Exception):
    code = "E_POINTS"


class PointsAwardInvalidError(PointsError):
    code = "E_POINTS_AWARD_INVALID"


class UnknownTaskError(PointsError):
    code = "E_TASK_UNKNOWN"
