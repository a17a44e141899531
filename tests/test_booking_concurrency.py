import threading
from datetime import date

from app.crud import booking as booking_crud
from app.errors.booking_errors import AlreadyBooked, SlotFull
from app.services.booking import BookingService

TUESDAY = date(2025, 11, 4)


def race(database, clock, locks, attempts):
    """
    Runs every (user_id, slot_id) attempt in its own thread and session,
    released together by a barrier. Returns the outcome of each attempt.
    """
    barrier = threading.Barrier(len(attempts))
    outcomes = [None] * len(attempts)

    def attempt(index, user_id, slot_id):
        session = database.session()
        try:
            barrier.wait()
            BookingService(session, clock=clock, locks=locks).book_slot(user_id, slot_id, TUESDAY)
            outcomes[index] = "booked"
        except SlotFull:
            outcomes[index] = "full"
        except AlreadyBooked:
            outcomes[index] = "duplicate"
        finally:
            session.close()

    threads = [
        threading.Thread(target=attempt, args=(index, user_id, slot_id))
        for index, (user_id, slot_id) in enumerate(attempts)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return outcomes


def test_last_seat_goes_to_exactly_one_member(database, db_session, clock, locks, make_user, gym_class, make_slot):
    slot = make_slot(gym_class, capacity=3)
    booked_before = [make_user().id for _ in range(2)]
    for user_id in booked_before:
        BookingService(db_session, clock=clock, locks=locks).book_slot(user_id, slot.id, TUESDAY)
    contenders = [make_user().id for _ in range(8)]

    outcomes = race(database, clock, locks, [(user_id, slot.id) for user_id in contenders])

    assert outcomes.count("booked") == 1
    assert outcomes.count("full") == 7
    db_session.expire_all()
    assert booking_crud.count_confirmed(db_session, slot.id, TUESDAY) == 3


def test_same_member_racing_itself_gets_one_booking(database, db_session, clock, locks, member, gym_class, make_slot):
    slot = make_slot(gym_class, capacity=10)

    outcomes = race(database, clock, locks, [(member.id, slot.id)] * 5)

    assert outcomes.count("booked") == 1
    assert outcomes.count("duplicate") == 4
    db_session.expire_all()
    assert booking_crud.count_confirmed(db_session, slot.id, TUESDAY) == 1
