from datetime import date, time

import pytest

from app.errors.gym_errors import ErrorKind
from app.errors.schedule_errors import (
    ClassNotFound,
    InstructorNotFound,
    InvalidSlotDefinition,
    ScheduleConflict,
    SlotAlreadyCancelled,
    SlotHasBookings,
    SlotNotFound,
)
from app.models import Booking, BookingStatus, ScheduleSlot, SlotStatus
from app.schemas.schedule import ScheduleSlotCreate, ScheduleSlotUpdate
from app.services.booking import BookingService
from app.services.schedule import ScheduleService

TUESDAY = date(2025, 11, 4)


@pytest.fixture
def schedule_service(db_session, clock, locks):
    return ScheduleService(db_session, clock=clock, locks=locks)


@pytest.fixture
def booking_service(db_session, clock, locks):
    return BookingService(db_session, clock=clock, locks=locks)


def slot_data(gym_class, instructor=None, **overrides) -> ScheduleSlotCreate:
    values = dict(
        class_id=gym_class.id,
        instructor_id=instructor.id if instructor else None,
        day_of_week=2,
        start_time=time(9, 0),
        end_time=time(10, 0),
    )
    values.update(overrides)
    return ScheduleSlotCreate(**values)


class TestCreateSlot:
    def test_capacity_defaults_to_class_maximum(self, schedule_service, gym_class, instructor):
        slot = schedule_service.create_slot(slot_data(gym_class, instructor))

        assert slot.capacity == gym_class.max_capacity
        assert slot.status == SlotStatus.ACTIVE
        assert slot.day_name == "Tuesday"

    def test_unknown_class(self, schedule_service, gym_class):
        with pytest.raises(ClassNotFound):
            schedule_service.create_slot(slot_data(gym_class, class_id=9999))

    def test_unknown_instructor(self, schedule_service, gym_class):
        with pytest.raises(InstructorNotFound):
            schedule_service.create_slot(slot_data(gym_class, instructor_id=9999))

    def test_overlapping_slot_for_same_instructor_conflicts(self, schedule_service, gym_class, instructor):
        first = schedule_service.create_slot(slot_data(gym_class, instructor))

        with pytest.raises(ScheduleConflict) as exc_info:
            schedule_service.create_slot(
                slot_data(gym_class, instructor, start_time=time(9, 30), end_time=time(10, 30))
            )

        assert exc_info.value.kind == ErrorKind.CONFLICT
        assert exc_info.value.data == {"conflicting_slot_id": first.id}

    def test_back_to_back_slots_do_not_conflict(self, schedule_service, gym_class, instructor):
        schedule_service.create_slot(slot_data(gym_class, instructor))
        second = schedule_service.create_slot(
            slot_data(gym_class, instructor, start_time=time(10, 0), end_time=time(11, 0))
        )

        assert second.id is not None

    def test_same_time_on_another_day_is_fine(self, schedule_service, gym_class, instructor):
        schedule_service.create_slot(slot_data(gym_class, instructor))
        other_day = schedule_service.create_slot(slot_data(gym_class, instructor, day_of_week=4))

        assert other_day.day_of_week == 4

    def test_cancelled_slot_does_not_block_the_time(self, schedule_service, gym_class, instructor):
        first = schedule_service.create_slot(slot_data(gym_class, instructor))
        schedule_service.cancel_slot(first.id)

        replacement = schedule_service.create_slot(slot_data(gym_class, instructor))

        assert replacement.id != first.id

    def test_end_before_start_is_rejected_by_schema(self, gym_class):
        with pytest.raises(ValueError):
            slot_data(gym_class, start_time=time(10, 0), end_time=time(9, 0))


class TestUpdateSlot:
    def test_move_into_an_occupied_time_conflicts(self, schedule_service, gym_class, instructor):
        schedule_service.create_slot(slot_data(gym_class, instructor))
        evening = schedule_service.create_slot(
            slot_data(gym_class, instructor, start_time=time(18, 0), end_time=time(19, 0))
        )

        with pytest.raises(ScheduleConflict):
            schedule_service.update_slot(
                evening.id, ScheduleSlotUpdate(start_time=time(9, 30), end_time=time(10, 30))
            )

    def test_slot_does_not_conflict_with_itself(self, schedule_service, gym_class, instructor):
        slot = schedule_service.create_slot(slot_data(gym_class, instructor))

        updated = schedule_service.update_slot(slot.id, ScheduleSlotUpdate(end_time=time(10, 30), location="Studio B"))

        assert updated.end_time == time(10, 30)
        assert updated.location == "Studio B"

    def test_capacity_cannot_drop_below_confirmed_bookings(self, schedule_service, booking_service, make_user, slot):
        booking_service.book_slot(make_user().id, slot.id, TUESDAY)
        booking_service.book_slot(make_user().id, slot.id, TUESDAY)

        with pytest.raises(InvalidSlotDefinition):
            schedule_service.update_slot(slot.id, ScheduleSlotUpdate(capacity=1))

    def test_end_time_must_stay_after_start(self, schedule_service, slot):
        with pytest.raises(InvalidSlotDefinition):
            schedule_service.update_slot(slot.id, ScheduleSlotUpdate(end_time=time(8, 0)))

    def test_unknown_slot(self, schedule_service):
        with pytest.raises(SlotNotFound):
            schedule_service.update_slot(9999, ScheduleSlotUpdate(location="Hall"))


class TestCancelSlot:
    def test_cancel_cascades_to_confirmed_bookings_only(self, schedule_service, booking_service, db_session, make_user, slot):
        kept_cancelled = booking_service.book_slot(make_user().id, slot.id, TUESDAY)
        booking_service.cancel_booking(kept_cancelled.booking.id, kept_cancelled.booking.user_id)
        booking_service.book_slot(make_user().id, slot.id, TUESDAY)
        booking_service.book_slot(make_user().id, slot.id, TUESDAY)

        result = schedule_service.cancel_slot(slot.id, "Pool maintenance")

        assert result.cancelled_bookings == 2
        assert result.slot.status == SlotStatus.CANCELLED
        assert result.slot.cancellation_reason == "Pool maintenance"
        statuses = {b.status for b in db_session.query(Booking).filter(Booking.schedule_slot_id == slot.id)}
        assert statuses == {BookingStatus.CANCELLED}

    def test_cancel_twice(self, schedule_service, slot):
        schedule_service.cancel_slot(slot.id)

        with pytest.raises(SlotAlreadyCancelled):
            schedule_service.cancel_slot(slot.id)


class TestDeleteSlot:
    def test_refused_while_confirmed_bookings_exist(self, schedule_service, booking_service, member, slot):
        booking_service.book_slot(member.id, slot.id, TUESDAY)

        with pytest.raises(SlotHasBookings):
            schedule_service.delete_slot(slot.id)

    def test_delete_after_bookings_were_cancelled(self, schedule_service, booking_service, db_session, member, slot):
        booked = booking_service.book_slot(member.id, slot.id, TUESDAY)
        booking_service.cancel_booking(booked.booking.id, member.id)
        slot_id = slot.id

        schedule_service.delete_slot(slot_id)

        assert db_session.get(ScheduleSlot, slot_id) is None
        assert db_session.query(Booking).filter(Booking.schedule_slot_id == slot_id).count() == 0


class TestReads:
    def test_list_slots_reports_enrollment(self, schedule_service, booking_service, member, slot):
        booking_service.book_slot(member.id, slot.id, TUESDAY)

        [view] = schedule_service.list_slots(day_of_week=2)

        assert view.current_enrollment == 1
        assert view.available_spots == 1
        assert view.gym_class.name == "Morning Yoga"
        assert view.instructor.first_name == "Sara"

    def test_list_slots_filters(self, schedule_service, slot, make_slot, gym_class):
        make_slot(gym_class, day_of_week=5, status=SlotStatus.CANCELLED)

        assert [s.id for s in schedule_service.list_slots(status=SlotStatus.ACTIVE)] == [slot.id]
        assert schedule_service.list_slots(day_of_week=0) == []

    def test_weekly_schedule_groups_by_day(self, schedule_service, slot, make_slot, gym_class):
        make_slot(gym_class, day_of_week=0, start=time(8, 0), end=time(9, 0))
        make_slot(gym_class, day_of_week=5, status=SlotStatus.CANCELLED)

        weekly = schedule_service.weekly_schedule()

        assert list(weekly) == ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
        assert [s.id for s in weekly["Tuesday"]] == [slot.id]
        assert len(weekly["Sunday"]) == 1
        assert weekly["Friday"] == []

    def test_roster_for_a_date(self, schedule_service, booking_service, member, other_member, slot):
        booking_service.book_slot(member.id, slot.id, TUESDAY)
        booking_service.book_slot(other_member.id, slot.id, date(2025, 11, 11))

        roster = schedule_service.slot_roster(slot.id, TUESDAY)

        assert [entry.member_id for entry in roster] == [member.id]
        assert roster[0].email == member.email
