from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, Enum
from sqlalchemy.orm import relationship

from app.database import Base


class Difficulty(str, PyEnum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    MIXED = "Mixed"


class ClassStatus(str, PyEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class GymClass(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    difficulty = Column(Enum(Difficulty), nullable=False, default=Difficulty.MIXED)
    category = Column(String, nullable=True)
    max_capacity = Column(Integer, nullable=False, default=20)
    equipment = Column(JSON, nullable=False, default=list)
    color = Column(String, nullable=True)
    status = Column(Enum(ClassStatus), nullable=False, default=ClassStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    instructor_links = relationship("ClassInstructor", back_populates="gym_class", cascade="all, delete-orphan")
    schedule_slots = relationship("ScheduleSlot", back_populates="gym_class")

    @property
    def instructors(self):
        return [link.instructor for link in self.instructor_links]


class ClassInstructor(Base):
    __tablename__ = "class_instructors"

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)
    instructor_id = Column(Integer, ForeignKey("instructors.id"), nullable=False)
    is_primary = Column(Boolean, default=False)

    # Relationships
    gym_class = relationship("GymClass", back_populates="instructor_links")
    instructor = relationship("Instructor", back_populates="class_links")
