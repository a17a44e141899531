import logging
from datetime import date, time
from typing import List, Optional

from sqlalchemy.orm import Session

from app.crud import booking as booking_crud
from app.crud import gym_class as class_crud
from app.crud import instructor as instructor_crud
from app.crud import schedule_slot as crud
from app.database import transactional, slot_locks, SlotLockRegistry
from app.errors.schedule_errors import (
    ClassNotFound,
    InstructorNotFound,
    SlotNotFound,
    SlotAlreadyCancelled,
    InvalidSlotDefinition,
    ScheduleConflict,
    SlotHasBookings,
)
from app.models import DAY_NAMES, ScheduleSlot, SlotStatus
from app.schemas.schedule import (
    ScheduleSlotCreate,
    ScheduleSlotUpdate,
    ScheduleSlotWithEnrollment,
    SlotCancelResult,
    ScheduleSlotResponse,
    RosterEntry,
)
from app.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


def build_roster(bookings) -> List[RosterEntry]:
    roster = []
    for booking in bookings:
        user = booking.user
        roster.append(RosterEntry(
            booking_id=booking.id,
            member_id=booking.user_id,
            name=user.display_name if user else "Unknown Member",
            email=(user.email if user else "") or "",
            phone=(user.phone if user else "") or "",
            status=booking.status,
            booking_date=booking.booking_date,
            booked_at=booking.booked_at,
        ))
    return roster


class ScheduleService:
    def __init__(self, db: Session, clock: Clock = utcnow, locks: SlotLockRegistry = slot_locks):
        self.db = db
        self.clock = clock
        self.locks = locks

    # --- Reads ---

    def list_slots(
        self,
        *,
        day_of_week: Optional[int] = None,
        class_id: Optional[int] = None,
        instructor_id: Optional[int] = None,
        status: Optional[SlotStatus] = None,
    ) -> List[ScheduleSlotWithEnrollment]:
        slots = crud.get_slots(
            self.db,
            day_of_week=day_of_week,
            class_id=class_id,
            instructor_id=instructor_id,
            status=status,
        )
        return self._with_enrollment(slots)

    def get_slot(self, slot_id: int) -> ScheduleSlot:
        slot = crud.get_slot(self.db, slot_id)
        if not slot:
            raise SlotNotFound(slot_id)
        return slot

    def weekly_schedule(self) -> dict[str, List[ScheduleSlotWithEnrollment]]:
        """
        Active recurring slots grouped by weekday name, Sunday first.

        Enrollment counts confirmed bookings of every date: this is the shape of
        a typical week, not the occupancy of a concrete day.
        """
        slots = crud.get_slots(self.db, status=SlotStatus.ACTIVE, recurring_only=True)
        schedule = {day: [] for day in DAY_NAMES}
        for view in self._with_enrollment(slots):
            schedule[DAY_NAMES[view.day_of_week]].append(view)
        return schedule

    def slot_roster(self, slot_id: int, booking_date: Optional[date] = None) -> List[RosterEntry]:
        self.get_slot(slot_id)
        return build_roster(booking_crud.get_slot_bookings(self.db, slot_id, booking_date))

    # --- Public Methods (Transactional) ---

    def create_slot(self, slot_data: ScheduleSlotCreate) -> ScheduleSlot:
        with transactional(self.db) as session:
            slot = self._create_slot_logic(session, slot_data)
            logger.info(
                f"Schedule slot {slot.id} created for class {slot.class_id} on "
                f"{DAY_NAMES[slot.day_of_week]} {slot.start_time}-{slot.end_time}"
            )
            return slot

    def update_slot(self, slot_id: int, update_data: ScheduleSlotUpdate) -> ScheduleSlot:
        with self.locks.hold(slot_id):
            with transactional(self.db) as session:
                return self._update_slot_logic(session, slot_id, update_data)

    def cancel_slot(self, slot_id: int, reason: Optional[str] = None) -> SlotCancelResult:
        """
        Cancels the slot and every confirmed booking on it in one transaction.

        Runs under the slot lock so that no booking can be confirmed between the
        status change and the cascade.
        """
        with self.locks.hold(slot_id):
            with transactional(self.db) as session:
                slot = crud.get_slot_for_update(session, slot_id)
                if not slot:
                    raise SlotNotFound(slot_id)
                if slot.status == SlotStatus.CANCELLED:
                    raise SlotAlreadyCancelled()

                now = self.clock()
                slot.status = SlotStatus.CANCELLED
                slot.cancellation_reason = reason or "Cancelled"
                cancelled = booking_crud.cancel_confirmed_for_slot(session, slot_id, now)
                session.flush()

                logger.info(f"Schedule slot {slot_id} cancelled, {cancelled} confirmed bookings cancelled with it")
                return SlotCancelResult(
                    slot=ScheduleSlotResponse.model_validate(slot),
                    cancelled_bookings=cancelled,
                )

    def delete_slot(self, slot_id: int) -> None:
        with self.locks.hold(slot_id):
            with transactional(self.db) as session:
                slot = crud.get_slot_for_update(session, slot_id)
                if not slot:
                    raise SlotNotFound(slot_id)
                if booking_crud.has_confirmed_bookings(session, slot_id):
                    raise SlotHasBookings()
                crud.delete_slot(session, slot)
                logger.info(f"Schedule slot {slot_id} deleted")

    # --- Private Logic Methods (Non-Transactional) ---

    def _create_slot_logic(self, session: Session, slot_data: ScheduleSlotCreate) -> ScheduleSlot:
        gym_class = class_crud.get_class(session, slot_data.class_id)
        if not gym_class:
            raise ClassNotFound(slot_data.class_id)

        capacity = slot_data.capacity or gym_class.max_capacity
        self._validate_definition(slot_data.start_time, slot_data.end_time, capacity)
        self._check_instructor(
            session,
            instructor_id=slot_data.instructor_id,
            day_of_week=slot_data.day_of_week,
            start_time=slot_data.start_time,
            end_time=slot_data.end_time,
        )

        return crud.create_slot(
            session,
            class_id=slot_data.class_id,
            instructor_id=slot_data.instructor_id,
            day_of_week=slot_data.day_of_week,
            start_time=slot_data.start_time,
            end_time=slot_data.end_time,
            capacity=capacity,
            is_recurring=slot_data.is_recurring,
            specific_date=slot_data.specific_date,
            location=slot_data.location,
            notes=slot_data.notes,
        )

    def _update_slot_logic(self, session: Session, slot_id: int, update_data: ScheduleSlotUpdate) -> ScheduleSlot:
        slot = crud.get_slot_for_update(session, slot_id)
        if not slot:
            raise SlotNotFound(slot_id)

        changes = update_data.model_dump(exclude_unset=True)
        instructor_id = changes.get("instructor_id", slot.instructor_id)
        day_of_week = changes.get("day_of_week", slot.day_of_week)
        start_time = changes.get("start_time", slot.start_time)
        end_time = changes.get("end_time", slot.end_time)
        capacity = changes.get("capacity", slot.capacity)

        self._validate_definition(start_time, end_time, capacity)

        if slot.status == SlotStatus.ACTIVE:
            self._check_instructor(
                session,
                instructor_id=instructor_id,
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time,
                exclude_slot_id=slot.id,
            )

        if "capacity" in changes:
            booked = crud.max_confirmed_per_date(session, slot.id)
            if capacity < booked:
                raise InvalidSlotDefinition(
                    f"Capacity {capacity} is below the {booked} confirmed bookings already taken for one date"
                )

        for key, value in changes.items():
            setattr(slot, key, value)
        session.flush()
        logger.info(f"Schedule slot {slot_id} updated: {sorted(changes)}")
        return slot

    def _validate_definition(self, start_time: time, end_time: time, capacity: int) -> None:
        if end_time <= start_time:
            raise InvalidSlotDefinition("end_time must be after start_time")
        if capacity is None or capacity < 1:
            raise InvalidSlotDefinition("capacity must be at least 1")

    def _check_instructor(
        self,
        session: Session,
        *,
        instructor_id: Optional[int],
        day_of_week: int,
        start_time: time,
        end_time: time,
        exclude_slot_id: Optional[int] = None,
    ) -> None:
        if instructor_id is None:
            return
        if not instructor_crud.get_instructor(session, instructor_id):
            raise InstructorNotFound(instructor_id)

        conflicting = crud.find_overlapping_slot(
            session,
            instructor_id=instructor_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            exclude_slot_id=exclude_slot_id,
        )
        if conflicting:
            logger.warning(
                f"Instructor {instructor_id} already teaches slot {conflicting.id} on "
                f"{DAY_NAMES[day_of_week]} {conflicting.start_time}-{conflicting.end_time}"
            )
            raise ScheduleConflict(conflicting.id)

    def _with_enrollment(self, slots: List[ScheduleSlot]) -> List[ScheduleSlotWithEnrollment]:
        counts = crud.count_confirmed_by_slot(self.db, [slot.id for slot in slots])
        views = []
        for slot in slots:
            enrolled = counts.get(slot.id, 0)
            view = ScheduleSlotWithEnrollment.model_validate(slot).model_copy(
                update={"current_enrollment": enrolled, "available_spots": max(slot.capacity - enrolled, 0)}
            )
            views.append(view)
        return views
