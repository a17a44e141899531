# app/errors/booking_errors.py
from app.errors.gym_errors import NotFound, Forbidden, Invalid, Conflict, CapacityExceeded


class UserNotFound(NotFound):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")


class AccountInactive(Forbidden):
    def __init__(self, message: str = "User account is not active", data=None):
        super().__init__(message, data=data)


class BookingNotFound(NotFound):
    def __init__(self, booking_id: int):
        super().__init__(f"Booking {booking_id} not found")


class NotBookingOwner(Forbidden):
    def __init__(self):
        super().__init__("Unauthorized to cancel this booking")


class AlreadyBooked(Conflict):
    def __init__(self):
        super().__init__("You are already booked for this class")


class SlotFull(CapacityExceeded):
    def __init__(self, capacity: int):
        super().__init__("This class is full", data={"capacity": capacity})


class BookingAlreadyCancelled(Invalid):
    def __init__(self):
        super().__init__("Booking is already cancelled")


class BookingStateError(Invalid):
    """Raised when a status transition is not allowed from the booking's current state."""
    pass
