from datetime import date, time
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.models import ScheduleSlot, SlotStatus, Booking, BookingStatus


# =============================================================================
# Reads
# =============================================================================

def get_slots(
    db: Session,
    *,
    day_of_week: Optional[int] = None,
    class_id: Optional[int] = None,
    instructor_id: Optional[int] = None,
    status: Optional[SlotStatus] = None,
    recurring_only: bool = False,
) -> List[ScheduleSlot]:
    query = db.query(ScheduleSlot).options(
        joinedload(ScheduleSlot.gym_class),
        joinedload(ScheduleSlot.instructor),
    )

    if day_of_week is not None:
        query = query.filter(ScheduleSlot.day_of_week == day_of_week)
    if class_id:
        query = query.filter(ScheduleSlot.class_id == class_id)
    if instructor_id:
        query = query.filter(ScheduleSlot.instructor_id == instructor_id)
    if status:
        query = query.filter(ScheduleSlot.status == status)
    if recurring_only:
        query = query.filter(ScheduleSlot.is_recurring.is_(True))

    return query.order_by(ScheduleSlot.day_of_week, ScheduleSlot.start_time).all()


def get_slot(db: Session, slot_id: int) -> Optional[ScheduleSlot]:
    return db.query(ScheduleSlot).filter(ScheduleSlot.id == slot_id).first()


def get_slot_for_update(db: Session, slot_id: int) -> Optional[ScheduleSlot]:
    """Row-locks the slot (SELECT ... FOR UPDATE) until the transaction ends."""
    return (
        db.query(ScheduleSlot)
        .filter(ScheduleSlot.id == slot_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def find_active_slot(db: Session, class_id: int, day_of_week: int, start_time: time) -> Optional[ScheduleSlot]:
    return (
        db.query(ScheduleSlot)
        .filter(
            ScheduleSlot.class_id == class_id,
            ScheduleSlot.day_of_week == day_of_week,
            ScheduleSlot.start_time == start_time,
            ScheduleSlot.status == SlotStatus.ACTIVE,
        )
        .first()
    )


def find_overlapping_slot(
    db: Session,
    *,
    instructor_id: int,
    day_of_week: int,
    start_time: time,
    end_time: time,
    exclude_slot_id: Optional[int] = None,
) -> Optional[ScheduleSlot]:
    """
    Active slot of the instructor on the same weekday whose [start, end) intersects the given range.
    """
    query = db.query(ScheduleSlot).filter(
        ScheduleSlot.instructor_id == instructor_id,
        ScheduleSlot.day_of_week == day_of_week,
        ScheduleSlot.status == SlotStatus.ACTIVE,
        ScheduleSlot.start_time < end_time,
        ScheduleSlot.end_time > start_time,
    )
    if exclude_slot_id is not None:
        query = query.filter(ScheduleSlot.id != exclude_slot_id)
    return query.first()


def count_confirmed_by_slot(db: Session, slot_ids: List[int]) -> dict[int, int]:
    """Confirmed bookings per slot across all dates (the weekly "shape" view)."""
    if not slot_ids:
        return {}
    rows = (
        db.query(Booking.schedule_slot_id, func.count(Booking.id))
        .filter(
            Booking.schedule_slot_id.in_(slot_ids),
            Booking.status == BookingStatus.CONFIRMED,
        )
        .group_by(Booking.schedule_slot_id)
        .all()
    )
    return {slot_id: count for slot_id, count in rows}


def max_confirmed_per_date(db: Session, slot_id: int) -> int:
    counts = (
        db.query(func.count(Booking.id))
        .filter(Booking.schedule_slot_id == slot_id, Booking.status == BookingStatus.CONFIRMED)
        .group_by(Booking.booking_date)
        .all()
    )
    return max((count for (count,) in counts), default=0)


def has_active_slots_for_class(db: Session, class_id: int) -> bool:
    return db.query(ScheduleSlot.id).filter(
        ScheduleSlot.class_id == class_id,
        ScheduleSlot.status == SlotStatus.ACTIVE,
    ).first() is not None


def has_active_slots_for_instructor(db: Session, instructor_id: int) -> bool:
    return db.query(ScheduleSlot.id).filter(
        ScheduleSlot.instructor_id == instructor_id,
        ScheduleSlot.status == SlotStatus.ACTIVE,
    ).first() is not None


# =============================================================================
# Writes (flush only, the service owns the transaction)
# =============================================================================

def create_slot(
    db: Session,
    *,
    class_id: int,
    instructor_id: Optional[int],
    day_of_week: int,
    start_time: time,
    end_time: time,
    capacity: int,
    is_recurring: bool = True,
    specific_date: Optional[date] = None,
    location: Optional[str] = None,
    notes: Optional[str] = None,
) -> ScheduleSlot:
    db_slot = ScheduleSlot(
        class_id=class_id,
        instructor_id=instructor_id,
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
        capacity=capacity,
        is_recurring=is_recurring,
        specific_date=specific_date,
        location=location,
        notes=notes,
        status=SlotStatus.ACTIVE,
    )
    db.add(db_slot)
    db.flush()
    db.refresh(db_slot)
    return db_slot


def delete_slot(db: Session, db_slot: ScheduleSlot) -> None:
    # Non-confirmed bookings go with the slot
    db.query(Booking).filter(Booking.schedule_slot_id == db_slot.id).delete(synchronize_session=False)
    db.expire(db_slot, ["bookings"])
    db.delete(db_slot)
    db.flush()
