# app/errors/check_in_errors.py
from app.errors.gym_errors import Invalid, Expired, Conflict, LimitReached


class QRTokenInvalid(Invalid):
    def __init__(self):
        super().__init__("Invalid QR code format")


class QRTokenExpired(Expired):
    def __init__(self):
        super().__init__("QR code expired. Please generate a new one.")


class QRTokenAlreadyUsed(Conflict):
    def __init__(self):
        super().__init__("QR code has already been used for a check-in")


class VisitLimitReached(LimitReached):
    """Monthly visit quota exhausted. Identity and usage travel in `data`."""

    def __init__(self, message: str, data: dict):
        super().__init__(message, data=data)
