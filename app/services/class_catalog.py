import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.crud import gym_class as crud
from app.crud import instructor as instructor_crud
from app.crud import schedule_slot as slot_crud
from app.database import transactional
from app.errors.schedule_errors import (
    ClassNotFound,
    InstructorNotFound,
    ClassHasActiveSlots,
    InstructorHasActiveSlots,
    DuplicateInstructor,
)
from app.models import GymClass, ClassStatus, Difficulty, Instructor, InstructorStatus
from app.schemas.gym_class import GymClassCreate, GymClassUpdate, InstructorCreate, InstructorUpdate
from app.schemas.schedule import ScheduleSlotCreate
from app.services.schedule import ScheduleService
from app.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class ClassService:
    def __init__(self, db: Session, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.schedule_service = ScheduleService(db, clock)

    def list_classes(
        self,
        status: Optional[ClassStatus] = None,
        difficulty: Optional[Difficulty] = None,
    ) -> List[GymClass]:
        return crud.get_classes(self.db, status=status, difficulty=difficulty)

    def get_class(self, class_id: int) -> GymClass:
        gym_class = crud.get_class(self.db, class_id)
        if not gym_class:
            raise ClassNotFound(class_id)
        return gym_class

    def create_class(self, class_data: GymClassCreate) -> GymClass:
        """
        Creates the class, links its instructors and creates the inline slots.

        Inline slots are taught by the primary (first) instructor and go through
        the same conflict checks as slots created on their own; one conflict
        rolls back the whole class.
        """
        with transactional(self.db) as session:
            gym_class = crud.create_class(session, class_data)
            self._assign_instructors(session, gym_class, class_data.instructor_ids)

            primary_instructor_id = class_data.instructor_ids[0] if class_data.instructor_ids else None
            for slot in class_data.schedule_slots:
                self.schedule_service._create_slot_logic(session, ScheduleSlotCreate(
                    class_id=gym_class.id,
                    instructor_id=primary_instructor_id,
                    day_of_week=slot.day_of_week,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    capacity=slot.capacity,
                ))

            logger.info(
                f"Class {gym_class.id} '{gym_class.name}' created with "
                f"{len(class_data.instructor_ids)} instructors and {len(class_data.schedule_slots)} slots"
            )
            class_id = gym_class.id

        return self.get_class(class_id)

    def update_class(self, class_id: int, class_data: GymClassUpdate) -> GymClass:
        with transactional(self.db) as session:
            gym_class = self.get_class(class_id)
            crud.update_class(session, gym_class, class_data)
            if class_data.instructor_ids is not None:
                self._assign_instructors(session, gym_class, class_data.instructor_ids)
            logger.info(f"Class {class_id} updated")

        return self.get_class(class_id)

    def delete_class(self, class_id: int, force: bool = False) -> None:
        """Refused while the class has active slots, unless `force` removes slots and bookings too."""
        with transactional(self.db) as session:
            gym_class = self.get_class(class_id)
            if not force and slot_crud.has_active_slots_for_class(session, class_id):
                raise ClassHasActiveSlots()
            crud.delete_class(session, gym_class)
            logger.info(f"Class {class_id} deleted (force={force})")

    def _assign_instructors(self, session: Session, gym_class: GymClass, instructor_ids: List[int]) -> None:
        for instructor_id in instructor_ids:
            if not instructor_crud.get_instructor(session, instructor_id):
                raise InstructorNotFound(instructor_id)
        # Keep order, drop repeats
        crud.set_class_instructors(session, gym_class, list(dict.fromkeys(instructor_ids)))


class InstructorService:
    def __init__(self, db: Session):
        self.db = db

    def list_instructors(self, status: Optional[InstructorStatus] = None) -> List[Instructor]:
        return instructor_crud.get_instructors(self.db, status=status)

    def get_instructor(self, instructor_id: int) -> Instructor:
        instructor = instructor_crud.get_instructor(self.db, instructor_id)
        if not instructor:
            raise InstructorNotFound(instructor_id)
        return instructor

    def create_instructor(self, instructor_data: InstructorCreate) -> Instructor:
        with transactional(self.db) as session:
            if instructor_crud.get_instructor_by_email(session, instructor_data.email):
                raise DuplicateInstructor(instructor_data.email)
            instructor = instructor_crud.create_instructor(session, instructor_data)
            logger.info(f"Instructor {instructor.id} created")
            return instructor

    def update_instructor(self, instructor_id: int, instructor_data: InstructorUpdate) -> Instructor:
        with transactional(self.db) as session:
            instructor = self.get_instructor(instructor_id)
            if instructor_data.email and instructor_data.email != instructor.email:
                if instructor_crud.get_instructor_by_email(session, instructor_data.email):
                    raise DuplicateInstructor(instructor_data.email)
            return instructor_crud.update_instructor(session, instructor, instructor_data)

    def delete_instructor(self, instructor_id: int) -> None:
        with transactional(self.db) as session:
            instructor = self.get_instructor(instructor_id)
            if slot_crud.has_active_slots_for_instructor(session, instructor_id):
                raise InstructorHasActiveSlots()
            instructor_crud.delete_instructor(session, instructor)
            logger.info(f"Instructor {instructor_id} deleted")
