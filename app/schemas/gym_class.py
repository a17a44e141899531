from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.gym_class import Difficulty, ClassStatus
from app.models.instructor import InstructorStatus
from app.schemas.schedule import ClassSlotInline, ScheduleSlotResponse


class InstructorCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    specialties: List[str] = []
    certifications: List[str] = []
    experience_years: Optional[int] = Field(None, ge=0)
    status: InstructorStatus = InstructorStatus.ACTIVE


class InstructorUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    specialties: Optional[List[str]] = None
    certifications: Optional[List[str]] = None
    experience_years: Optional[int] = Field(None, ge=0)
    status: Optional[InstructorStatus] = None


class InstructorResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    specialties: List[str]
    certifications: List[str]
    experience_years: Optional[int] = None
    status: InstructorStatus

    model_config = ConfigDict(from_attributes=True)


class GymClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    duration_minutes: int = Field(60, ge=5, le=480)
    difficulty: Difficulty = Difficulty.MIXED
    category: Optional[str] = None
    max_capacity: int = Field(20, ge=1)
    equipment: List[str] = []
    color: Optional[str] = None
    instructor_ids: List[int] = Field(default_factory=list, alias="instructorIds")
    schedule_slots: List[ClassSlotInline] = []

    model_config = ConfigDict(populate_by_name=True)


class GymClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=5, le=480)
    difficulty: Optional[Difficulty] = None
    category: Optional[str] = None
    max_capacity: Optional[int] = Field(None, ge=1)
    equipment: Optional[List[str]] = None
    color: Optional[str] = None
    status: Optional[ClassStatus] = None
    instructor_ids: Optional[List[int]] = Field(None, alias="instructorIds")

    model_config = ConfigDict(populate_by_name=True)


class GymClassResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    duration_minutes: int
    difficulty: Difficulty
    category: Optional[str] = None
    max_capacity: int
    equipment: List[str]
    color: Optional[str] = None
    status: ClassStatus
    created_at: Optional[datetime] = None
    instructors: List[InstructorResponse] = []

    model_config = ConfigDict(from_attributes=True)


class GymClassDetail(GymClassResponse):
    schedule_slots: List[ScheduleSlotResponse] = []
