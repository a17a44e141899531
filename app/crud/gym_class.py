from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from app.models import GymClass, ClassInstructor, ClassStatus, Difficulty, ScheduleSlot, Booking
from app.schemas.gym_class import GymClassCreate, GymClassUpdate


def get_classes(
    db: Session,
    *,
    status: Optional[ClassStatus] = None,
    difficulty: Optional[Difficulty] = None,
) -> List[GymClass]:
    query = db.query(GymClass).options(
        selectinload(GymClass.instructor_links).selectinload(ClassInstructor.instructor),
    )
    if status:
        query = query.filter(GymClass.status == status)
    if difficulty:
        query = query.filter(GymClass.difficulty == difficulty)
    return query.order_by(GymClass.name).all()


def get_class(db: Session, class_id: int) -> Optional[GymClass]:
    return (
        db.query(GymClass)
        .options(
            selectinload(GymClass.instructor_links).selectinload(ClassInstructor.instructor),
            selectinload(GymClass.schedule_slots),
        )
        .filter(GymClass.id == class_id)
        .first()
    )


def create_class(db: Session, class_data: GymClassCreate) -> GymClass:
    db_class = GymClass(
        name=class_data.name,
        description=class_data.description,
        duration_minutes=class_data.duration_minutes,
        difficulty=class_data.difficulty,
        category=class_data.category,
        max_capacity=class_data.max_capacity,
        equipment=list(class_data.equipment),
        color=class_data.color,
        status=ClassStatus.ACTIVE,
    )
    db.add(db_class)
    db.flush()
    return db_class


def update_class(db: Session, db_class: GymClass, class_data: GymClassUpdate) -> GymClass:
    update_data = class_data.model_dump(exclude_unset=True, exclude={"instructor_ids"})
    for key, value in update_data.items():
        setattr(db_class, key, value)
    db.flush()
    return db_class


def set_class_instructors(db: Session, db_class: GymClass, instructor_ids: List[int]) -> None:
    """Replaces the instructor links; the first id becomes the primary instructor."""
    db_class.instructor_links.clear()
    db.flush()
    for index, instructor_id in enumerate(instructor_ids):
        db_class.instructor_links.append(
            ClassInstructor(instructor_id=instructor_id, is_primary=index == 0)
        )
    db.flush()


def delete_class(db: Session, db_class: GymClass) -> None:
    """Deletes the class with its slots and their bookings."""
    slot_ids = [slot_id for (slot_id,) in db.query(ScheduleSlot.id).filter(ScheduleSlot.class_id == db_class.id)]
    if slot_ids:
        db.query(Booking).filter(Booking.schedule_slot_id.in_(slot_ids)).delete(synchronize_session=False)
        db.query(ScheduleSlot).filter(ScheduleSlot.id.in_(slot_ids)).delete(synchronize_session=False)
        db.expire(db_class, ["schedule_slots"])
    db.delete(db_class)
    db.flush()
