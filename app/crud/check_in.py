from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models import CheckIn, CheckInMethod


def count_user_check_ins_between(db: Session, user_id: int, start: datetime, end: datetime) -> int:
    """Check-ins of the user with start <= check_in_time < end."""
    return db.query(CheckIn).filter(
        CheckIn.user_id == user_id,
        CheckIn.check_in_time >= start,
        CheckIn.check_in_time < end,
    ).count()


def get_check_in_by_token(db: Session, token_id: str) -> Optional[CheckIn]:
    return db.query(CheckIn).filter(CheckIn.qr_token_id == token_id).first()


def get_check_ins(
    db: Session,
    *,
    user_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    location_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[CheckIn]:
    query = db.query(CheckIn).options(joinedload(CheckIn.user))

    if user_id is not None:
        query = query.filter(CheckIn.user_id == user_id)
    if start:
        query = query.filter(CheckIn.check_in_time >= start)
    if end:
        query = query.filter(CheckIn.check_in_time <= end)
    if location_id:
        query = query.filter(CheckIn.location_id == location_id)

    query = query.order_by(CheckIn.check_in_time.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def create_check_in(
    db: Session,
    *,
    user_id: int,
    check_in_time: datetime,
    method: CheckInMethod,
    location_id: Optional[str] = None,
    notes: Optional[str] = None,
    qr_token_id: Optional[str] = None,
    recorded_by_id: Optional[int] = None,
) -> CheckIn:
    db_check_in = CheckIn(
        user_id=user_id,
        check_in_time=check_in_time,
        method=method,
        location_id=location_id,
        notes=notes,
        qr_token_id=qr_token_id,
        recorded_by_id=recorded_by_id,
    )
    db.add(db_check_in)
    db.flush()
    db.refresh(db_check_in)
    return db_check_in
