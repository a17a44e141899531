from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, DateTime, JSON, Enum
from sqlalchemy.orm import relationship

from app.database import Base


class InstructorStatus(str, PyEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Instructor(Base):
    __tablename__ = "instructors"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    phone = Column(String, nullable=True)
    specialties = Column(JSON, nullable=False, default=list)
    certifications = Column(JSON, nullable=False, default=list)
    experience_years = Column(Integer, nullable=True)
    status = Column(Enum(InstructorStatus), nullable=False, default=InstructorStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    # Relationships
    class_links = relationship("ClassInstructor", back_populates="instructor", cascade="all, delete-orphan")
    schedule_slots = relationship("ScheduleSlot", back_populates="instructor")
