from datetime import date, time, datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.schedule_slot import SlotStatus
from app.models.booking import BookingStatus
from app.models.gym_class import Difficulty

NON_NULLABLE_SLOT_FIELDS = {"day_of_week", "start_time", "end_time", "capacity", "is_recurring"}


class SlotClassBrief(BaseModel):
    id: int
    name: str
    duration_minutes: int
    difficulty: Difficulty
    color: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SlotInstructorBrief(BaseModel):
    id: int
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class ScheduleSlotCreate(BaseModel):
    class_id: int
    instructor_id: Optional[int] = None
    day_of_week: int = Field(..., ge=0, le=6)  # 0 = Sunday
    start_time: time
    end_time: time
    capacity: Optional[int] = Field(None, ge=1)  # defaults to the class max_capacity
    is_recurring: bool = True
    specific_date: Optional[date] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if not self.is_recurring and self.specific_date is None:
            raise ValueError("specific_date is required for a non-recurring slot")
        return self


class ClassSlotInline(BaseModel):
    """Slot definition nested in a class create request."""
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: time
    end_time: time
    capacity: Optional[int] = Field(None, ge=1)


class ScheduleSlotUpdate(BaseModel):
    instructor_id: Optional[int] = None
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    capacity: Optional[int] = Field(None, ge=1)
    is_recurring: Optional[bool] = None
    specific_date: Optional[date] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_required_not_cleared(self):
        # Omit a field to keep it; only the optional columns may be set to null
        cleared = sorted(
            name for name in self.model_fields_set
            if name in NON_NULLABLE_SLOT_FIELDS and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self


class SlotCancelRequest(BaseModel):
    reason: Optional[str] = None


class ScheduleSlotResponse(BaseModel):
    id: int
    class_id: int
    instructor_id: Optional[int] = None
    day_of_week: int
    start_time: time
    end_time: time
    capacity: int
    is_recurring: bool
    specific_date: Optional[date] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    status: SlotStatus
    cancellation_reason: Optional[str] = None
    gym_class: Optional[SlotClassBrief] = None
    instructor: Optional[SlotInstructorBrief] = None

    model_config = ConfigDict(from_attributes=True)


class ScheduleSlotWithEnrollment(ScheduleSlotResponse):
    current_enrollment: int = 0
    available_spots: int = 0


class SlotCancelResult(BaseModel):
    slot: ScheduleSlotResponse
    cancelled_bookings: int


class RosterEntry(BaseModel):
    booking_id: int
    member_id: int
    name: str
    email: str
    phone: str = ""
    status: BookingStatus
    booking_date: date
    booked_at: datetime


WeeklySchedule = dict[str, List[ScheduleSlotWithEnrollment]]
