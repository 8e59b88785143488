"""Booking validation returning field -> message rejections."""

from collections.abc import Iterable

from clinic.scheduling.domain import BookingCandidate
from clinic.scheduling.overlap import has_scheduling_conflict
from clinic.scheduling.sessions import compute_session_end_time

CONFLICT_MESSAGE = 'The therapist already has an appointment at this time. Choose another time.'


def validate_booking(
    candidate: BookingCandidate,
    appointments: Iterable,
    exclude_appointment_id: int | None = None,
    ignored_statuses: Iterable[str] | None = None,
    check_conflict: bool = True,
) -> dict[str, str]:
    """Return field -> message rejections; an empty dict accepts the booking.

    ``check_conflict=False`` is for bookings whose status does not occupy a
    slot; required fields are still checked.
    """
    errors: dict[str, str] = {}

    if candidate.therapist_id is None:
        errors['therapist_id'] = 'Select a therapist.'
    if not candidate.patient_id:
        errors['patient_id'] = 'Select a patient.'
    if candidate.date is None:
        errors['date'] = 'Select a date.'
    if candidate.start_time is None:
        errors['start_time'] = 'Select a start time.'

    if candidate.start_time is not None:
        try:
            compute_session_end_time(candidate.start_time, candidate.session_type)
        except ValueError:
            errors['start_time'] = 'The session would run past midnight.'
            return errors

    if check_conflict and has_scheduling_conflict(
        candidate,
        appointments,
        exclude_appointment_id=exclude_appointment_id,
        ignored_statuses=ignored_statuses,
    ):
        errors['conflict'] = CONFLICT_MESSAGE

    return errors
