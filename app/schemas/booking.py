from datetime import date, time, datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field

from app.models.booking import BookingStatus
from app.schemas.schedule import ScheduleSlotResponse, RosterEntry
from app.schemas.user import UserBrief


class BookingCreate(BaseModel):
    user_id: int = Field(..., alias="userId")
    schedule_slot_id: int = Field(..., alias="scheduleSlotId")
    booking_date: date = Field(..., alias="bookingDate")

    model_config = ConfigDict(populate_by_name=True)


class ClassBookingRequest(BaseModel):
    """Book a class by date and start time instead of slot id."""
    member_id: Optional[int] = Field(None, alias="memberId")
    booking_date: date = Field(..., alias="date")
    start_time: time = Field(..., alias="time")

    model_config = ConfigDict(populate_by_name=True)


class BookingCancelRequest(BaseModel):
    user_id: int = Field(..., alias="userId")

    model_config = ConfigDict(populate_by_name=True)


class BookingResponse(BaseModel):
    id: int
    user_id: int
    schedule_slot_id: int
    booking_date: date
    status: BookingStatus
    booked_at: datetime
    cancelled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookingDetail(BookingResponse):
    slot: Optional[ScheduleSlotResponse] = None
    user: Optional[UserBrief] = None


class BookingResult(BaseModel):
    booking: BookingDetail
    roster: List[RosterEntry]
    capacity: int


class BookingCancelResult(BaseModel):
    booking_id: int
    roster: List[RosterEntry]
    capacity: Optional[int] = None
