from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, Date, Time, Boolean, DateTime, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship

from app.database import Base

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class SlotStatus(str, PyEnum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class ScheduleSlot(Base):
    __tablename__ = "schedule_slots"
    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_schedule_slots_day_of_week"),
        CheckConstraint("capacity > 0", name="ck_schedule_slots_capacity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    instructor_id = Column(Integer, ForeignKey("instructors.id"), nullable=True, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday .. 6 = Saturday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    capacity = Column(Integer, nullable=False)
    is_recurring = Column(Boolean, nullable=False, default=True)
    specific_date = Column(Date, nullable=True)  # one-off slots only
    location = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    status = Column(Enum(SlotStatus), nullable=False, default=SlotStatus.ACTIVE)
    cancellation_reason = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    gym_class = relationship("GymClass", back_populates="schedule_slots")
    instructor = relationship("Instructor", back_populates="schedule_slots")
    bookings = relationship("Booking", back_populates="slot")

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]
