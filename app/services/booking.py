import logging
from datetime import date, time
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud import booking as crud
from app.crud import schedule_slot as slot_crud
from app.crud import user as user_crud
from app.database import transactional, slot_locks, SlotLockRegistry
from app.errors.booking_errors import (
    UserNotFound,
    AccountInactive,
    BookingNotFound,
    NotBookingOwner,
    AlreadyBooked,
    SlotFull,
    BookingAlreadyCancelled,
    BookingStateError,
)
from app.errors.gym_errors import NotFound
from app.errors.schedule_errors import SlotNotFound, SlotNotActive
from app.models import Booking, BookingStatus, SlotStatus, User
from app.schemas.booking import BookingResult, BookingDetail, BookingCancelResult
from app.services.schedule import build_roster
from app.utils.clock import Clock, utcnow, day_of_week

logger = logging.getLogger(__name__)


class BookingService:
    """
    Booking ledger for schedule slots.

    Two invariants hold for every (slot, date):
      * at most one confirmed booking per member,
      * no more confirmed bookings than the slot's capacity.

    The check-then-insert sequence runs under the slot lock and a row lock on the
    slot, inside one transaction; the partial unique index on confirmed bookings
    backs up the first invariant at the database level.
    """

    def __init__(self, db: Session, clock: Clock = utcnow, locks: SlotLockRegistry = slot_locks):
        self.db = db
        self.clock = clock
        self.locks = locks

    # --- Public Methods (Transactional) ---

    def book_slot(self, user_id: int, schedule_slot_id: int, booking_date: date) -> BookingResult:
        with self.locks.hold(schedule_slot_id):
            try:
                with transactional(self.db) as session:
                    booking, capacity = self._book_slot_logic(session, user_id, schedule_slot_id, booking_date)
            except IntegrityError:
                # Another writer confirmed the same (member, slot, date) first
                logger.warning(f"Duplicate confirmed booking rejected by the database for user {user_id}, slot {schedule_slot_id}")
                raise AlreadyBooked()

        logger.info(f"Booking {booking.id} confirmed: user {user_id}, slot {schedule_slot_id}, date {booking_date}")
        return BookingResult(
            booking=BookingDetail.model_validate(crud.get_booking(self.db, booking.id)),
            roster=build_roster(crud.get_slot_bookings(self.db, schedule_slot_id, booking_date)),
            capacity=capacity,
        )

    def book_class_at(self, user_id: int, class_id: int, booking_date: date, start_time: time) -> BookingResult:
        """Books the active slot of a class that runs on the weekday of `booking_date` at `start_time`."""
        weekday = day_of_week(booking_date)
        slot = slot_crud.find_active_slot(self.db, class_id, weekday, start_time)
        if not slot:
            raise NotFound(
                "No class scheduled for this day/time",
                data={"class_id": class_id, "day_of_week": weekday, "time": start_time.isoformat()},
            )
        return self.book_slot(user_id, slot.id, booking_date)

    def cancel_booking(self, booking_id: int, requesting_user_id: int) -> BookingCancelResult:
        with transactional(self.db) as session:
            booking = crud.get_booking(session, booking_id)
            if not booking:
                raise BookingNotFound(booking_id)

            if booking.user_id != requesting_user_id:
                requester = user_crud.get_user(session, requesting_user_id)
                if not requester or not requester.is_staff:
                    raise NotBookingOwner()

            if booking.status == BookingStatus.CANCELLED:
                raise BookingAlreadyCancelled()
            if booking.status != BookingStatus.CONFIRMED:
                raise BookingStateError(f"Booking is already marked as {booking.status.value}")

            booking.status = BookingStatus.CANCELLED
            booking.cancelled_at = self.clock()
            session.flush()

            slot_id = booking.schedule_slot_id
            capacity = booking.slot.capacity if booking.slot else None

        logger.info(f"Booking {booking_id} cancelled by user {requesting_user_id}")
        return BookingCancelResult(
            booking_id=booking_id,
            roster=build_roster(crud.get_slot_bookings(self.db, slot_id)),
            capacity=capacity,
        )

    def mark_attended(self, booking_id: int) -> Booking:
        with transactional(self.db) as session:
            return self._mark_logic(session, booking_id, BookingStatus.ATTENDED)

    def mark_no_show(self, booking_id: int) -> Booking:
        with transactional(self.db) as session:
            return self._mark_logic(session, booking_id, BookingStatus.NO_SHOW)

    # --- Reads ---

    def list_for_user(
        self,
        user_id: int,
        status: Optional[BookingStatus] = None,
        upcoming: bool = False,
    ) -> List[Booking]:
        if upcoming:
            return crud.get_bookings(
                self.db,
                user_id=user_id,
                status=BookingStatus.CONFIRMED,
                from_date=self.clock().date(),
            ) if status in (None, BookingStatus.CONFIRMED) else []
        return crud.get_bookings(self.db, user_id=user_id, status=status)

    def list_all(
        self,
        status: Optional[BookingStatus] = None,
        booking_date: Optional[date] = None,
        schedule_slot_id: Optional[int] = None,
    ) -> List[Booking]:
        return crud.get_bookings(
            self.db,
            status=status,
            booking_date=booking_date,
            schedule_slot_id=schedule_slot_id,
        )

    # --- Private Logic Methods (Non-Transactional) ---

    def _get_active_user(self, session: Session, user_id: int) -> User:
        user = user_crud.get_user(session, user_id)
        if not user:
            raise UserNotFound(user_id)
        if not user.is_active:
            raise AccountInactive()
        return user

    def _book_slot_logic(
        self,
        session: Session,
        user_id: int,
        schedule_slot_id: int,
        booking_date: date,
    ) -> tuple[Booking, int]:
        self._get_active_user(session, user_id)

        slot = slot_crud.get_slot_for_update(session, schedule_slot_id)
        if not slot:
            raise SlotNotFound(schedule_slot_id)
        if slot.status != SlotStatus.ACTIVE:
            raise SlotNotActive()

        if crud.get_confirmed_booking(session, user_id, schedule_slot_id, booking_date):
            raise AlreadyBooked()

        confirmed = crud.count_confirmed(session, schedule_slot_id, booking_date)
        if confirmed >= slot.capacity:
            logger.warning(f"Slot {schedule_slot_id} is full for {booking_date} ({confirmed}/{slot.capacity})")
            raise SlotFull(slot.capacity)

        booking = crud.create_booking(session, user_id, schedule_slot_id, booking_date, self.clock())
        return booking, slot.capacity

    def _mark_logic(self, session: Session, booking_id: int, new_status: BookingStatus) -> Booking:
        booking = crud.get_booking(session, booking_id)
        if not booking:
            raise BookingNotFound(booking_id)
        if booking.status == BookingStatus.CANCELLED:
            raise BookingStateError("Cannot mark attendance on a cancelled booking")
        if booking.booking_date > self.clock().date():
            raise BookingStateError("Cannot mark attendance before the class date")

        booking.status = new_status
        session.flush()
        logger.info(f"Booking {booking_id} marked as {new_status.value}")
        return booking
