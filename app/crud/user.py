from typing import Optional

from sqlalchemy.orm import Session

from app.models import User


def get_user(db: Session, user_id: int) -> Optional[User]:
    """Lookup used as the user directory by bookings and check-ins."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()
