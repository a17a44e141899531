from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models import Booking, BookingStatus, ScheduleSlot


def get_booking(db: Session, booking_id: int) -> Optional[Booking]:
    return (
        db.query(Booking)
        .options(joinedload(Booking.slot).joinedload(ScheduleSlot.gym_class))
        .filter(Booking.id == booking_id)
        .first()
    )


def get_confirmed_booking(db: Session, user_id: int, slot_id: int, booking_date: date) -> Optional[Booking]:
    return db.query(Booking).filter(
        Booking.user_id == user_id,
        Booking.schedule_slot_id == slot_id,
        Booking.booking_date == booking_date,
        Booking.status == BookingStatus.CONFIRMED,
    ).first()


def count_confirmed(db: Session, slot_id: int, booking_date: date) -> int:
    return db.query(Booking).filter(
        Booking.schedule_slot_id == slot_id,
        Booking.booking_date == booking_date,
        Booking.status == BookingStatus.CONFIRMED,
    ).count()


def get_bookings(
    db: Session,
    *,
    user_id: Optional[int] = None,
    status: Optional[BookingStatus] = None,
    booking_date: Optional[date] = None,
    from_date: Optional[date] = None,
    schedule_slot_id: Optional[int] = None,
) -> List[Booking]:
    query = db.query(Booking).options(
        joinedload(Booking.user),
        joinedload(Booking.slot).joinedload(ScheduleSlot.gym_class),
        joinedload(Booking.slot).joinedload(ScheduleSlot.instructor),
    )

    if user_id is not None:
        query = query.filter(Booking.user_id == user_id)
    if status:
        query = query.filter(Booking.status == status)
    if booking_date:
        query = query.filter(Booking.booking_date == booking_date)
    if from_date:
        query = query.filter(Booking.booking_date >= from_date)
    if schedule_slot_id:
        query = query.filter(Booking.schedule_slot_id == schedule_slot_id)

    return query.order_by(Booking.booking_date.desc(), Booking.booked_at.desc()).all()


def get_slot_bookings(db: Session, slot_id: int, booking_date: Optional[date] = None) -> List[Booking]:
    query = db.query(Booking).options(joinedload(Booking.user)).filter(Booking.schedule_slot_id == slot_id)
    if booking_date:
        query = query.filter(Booking.booking_date == booking_date)
    return query.order_by(Booking.booking_date.asc(), Booking.booked_at.desc()).all()


def create_booking(db: Session, user_id: int, slot_id: int, booking_date: date, booked_at: datetime) -> Booking:
    db_booking = Booking(
        user_id=user_id,
        schedule_slot_id=slot_id,
        booking_date=booking_date,
        status=BookingStatus.CONFIRMED,
        booked_at=booked_at,
    )
    db.add(db_booking)
    db.flush()
    db.refresh(db_booking)
    return db_booking


def cancel_confirmed_for_slot(db: Session, slot_id: int, cancelled_at: datetime) -> int:
    """Cancels every confirmed booking of the slot, all dates. Returns how many were cancelled."""
    bookings = db.query(Booking).filter(
        Booking.schedule_slot_id == slot_id,
        Booking.status == BookingStatus.CONFIRMED,
    ).all()
    for booking in bookings:
        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = cancelled_at
    db.flush()
    return len(bookings)


def has_confirmed_bookings(db: Session, slot_id: int) -> bool:
    return db.query(Booking.id).filter(
        Booking.schedule_slot_id == slot_id,
        Booking.status == BookingStatus.CONFIRMED,
    ).first() is not None
