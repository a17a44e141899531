from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import Instructor, InstructorStatus
from app.schemas.gym_class import InstructorCreate, InstructorUpdate


def get_instructors(db: Session, status: Optional[InstructorStatus] = None) -> List[Instructor]:
    query = db.query(Instructor)
    if status:
        query = query.filter(Instructor.status == status)
    return query.order_by(Instructor.last_name, Instructor.first_name).all()


def get_instructor(db: Session, instructor_id: int) -> Optional[Instructor]:
    return db.query(Instructor).filter(Instructor.id == instructor_id).first()


def get_instructor_by_email(db: Session, email: str) -> Optional[Instructor]:
    return db.query(Instructor).filter(Instructor.email == email).first()


def create_instructor(db: Session, instructor_data: InstructorCreate) -> Instructor:
    db_instructor = Instructor(**instructor_data.model_dump())
    db.add(db_instructor)
    db.flush()
    db.refresh(db_instructor)
    return db_instructor


def update_instructor(db: Session, db_instructor: Instructor, instructor_data: InstructorUpdate) -> Instructor:
    for key, value in instructor_data.model_dump(exclude_unset=True).items():
        setattr(db_instructor, key, value)
    db.flush()
    return db_instructor


def delete_instructor(db: Session, db_instructor: Instructor) -> None:
    db.delete(db_instructor)
    db.flush()
