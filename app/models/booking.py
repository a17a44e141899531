from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, Enum, Index, text
from sqlalchemy.orm import relationship

from app.database import Base


class BookingStatus(str, PyEnum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    ATTENDED = "attended"
    NO_SHOW = "no_show"


TERMINAL_BOOKING_STATUSES = (BookingStatus.CANCELLED, BookingStatus.ATTENDED, BookingStatus.NO_SHOW)

# SQLAlchemy stores enum member names, hence the upper-case literal
_CONFIRMED_ONLY = text("status = 'CONFIRMED'")


class Booking(Base):
    __tablename__ = "class_bookings"
    __table_args__ = (
        # At most one confirmed booking per (member, slot, date)
        Index(
            "uq_class_bookings_confirmed_member_slot_date",
            "user_id",
            "schedule_slot_id",
            "booking_date",
            unique=True,
            postgresql_where=_CONFIRMED_ONLY,
            sqlite_where=_CONFIRMED_ONLY,
        ),
        Index("ix_class_bookings_slot_date_status", "schedule_slot_id", "booking_date", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    schedule_slot_id = Column(Integer, ForeignKey("schedule_slots.id"), nullable=False)
    booking_date = Column(Date, nullable=False)
    status = Column(Enum(BookingStatus), nullable=False, default=BookingStatus.CONFIRMED)
    booked_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="bookings")
    slot = relationship("ScheduleSlot", back_populates="bookings")
