from datetime import date, time

from clinic.scheduling.domain import BookingCandidate, SessionType
from clinic.scheduling.validation import CONFLICT_MESSAGE, validate_booking

MONDAY = date(2024, 1, 1)


def test_complete_free_booking_has_no_errors(make_appointment) -> None:
    candidate = BookingCandidate(therapist_id=1, patient_id='MR-000001', date=MONDAY, start_time=time(10, 0))

    assert validate_booking(candidate, [make_appointment('09:00')], ignored_statuses=()) == {}


def test_missing_fields_are_reported_per_field() -> None:
    errors = validate_booking(BookingCandidate(), [])

    assert set(errors) == {'therapist_id', 'patient_id', 'date', 'start_time'}


def test_conflict_is_reported(make_appointment) -> None:
    candidate = BookingCandidate(therapist_id=1, patient_id='MR-000009', date=MONDAY, start_time=time(9, 30))

    errors = validate_booking(candidate, [make_appointment('09:00')], ignored_statuses=())

    assert errors == {'conflict': CONFLICT_MESSAGE}


def test_editing_in_place_is_not_a_conflict(make_appointment) -> None:
    existing = make_appointment('09:00')
    candidate = BookingCandidate(therapist_id=1, patient_id='MR-000001', date=MONDAY, start_time=time(9, 15))

    assert validate_booking(candidate, [existing], exclude_appointment_id=existing.id, ignored_statuses=()) == {}


def test_session_running_past_midnight_is_rejected() -> None:
    candidate = BookingCandidate(
        therapist_id=1,
        patient_id='MR-000001',
        date=MONDAY,
        start_time=time(23, 30),
        session_type=SessionType.REGULAR,
    )

    errors = validate_booking(candidate, [])

    assert errors == {'start_time': 'The session would run past midnight.'}


def test_skipping_the_conflict_check_keeps_required_fields(make_appointment) -> None:
    existing = [make_appointment('09:00')]
    overlapping = BookingCandidate(therapist_id=1, patient_id='MR-000009', date=MONDAY, start_time=time(9, 30))

    assert validate_booking(overlapping, existing, ignored_statuses=(), check_conflict=False) == {}
    assert set(validate_booking(BookingCandidate(), existing, check_conflict=False)) == {
        'therapist_id',
        'patient_id',
        'date',
        'start_time',
    }
