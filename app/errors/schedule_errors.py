# app/errors/schedule_errors.py
from app.errors.gym_errors import NotFound, Invalid, Conflict


class ClassNotFound(NotFound):
    def __init__(self, class_id: int):
        super().__init__(f"Class {class_id} not found")


class InstructorNotFound(NotFound):
    def __init__(self, instructor_id: int):
        super().__init__(f"Instructor {instructor_id} not found")


class SlotNotFound(NotFound):
    def __init__(self, slot_id: int):
        super().__init__(f"Schedule slot {slot_id} not found")


class SlotNotActive(Invalid):
    def __init__(self):
        super().__init__("This class slot is not available for booking")


class SlotAlreadyCancelled(Invalid):
    def __init__(self):
        super().__init__("Schedule slot is already cancelled")


class InvalidSlotDefinition(Invalid):
    """Raised when slot times, day or capacity are inconsistent."""
    pass


class ScheduleConflict(Conflict):
    """Raised when the instructor already teaches an overlapping active slot on that day."""

    def __init__(self, conflicting_slot_id: int):
        super().__init__(
            "Schedule conflict detected. Instructor is already booked at this time.",
            data={"conflicting_slot_id": conflicting_slot_id},
        )


class SlotHasBookings(Conflict):
    def __init__(self):
        super().__init__("Cannot delete schedule slot with confirmed bookings. Cancel bookings first.")


class ClassHasActiveSlots(Conflict):
    def __init__(self):
        super().__init__("Cannot delete class with active schedule slots. Use force delete or remove slots first.")


class InstructorHasActiveSlots(Conflict):
    def __init__(self):
        super().__init__("Cannot delete instructor assigned to active schedule slots.")


class DuplicateInstructor(Conflict):
    def __init__(self, email: str):
        super().__init__(f"Instructor with email {email} already exists")
