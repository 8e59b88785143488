"""
Overlap Detection

Every busy/free decision in the clinic reduces to ``intervals_overlap`` on
half-open ``[start, end)`` wall-clock intervals of the same therapist and
date. Touching intervals (one ends exactly when the other starts) do not
overlap.

Appointment status does not free a slot unless the status is listed in
``CONFLICT_IGNORED_STATUSES``; by default every status occupies its slot.
"""

from collections.abc import Iterable
from datetime import date, time
from typing import List

from clinic.core import config
from clinic.scheduling.domain import BookingCandidate
from clinic.scheduling.sessions import compute_session_end_time
from clinic.scheduling.timeutils import add_minutes


def intervals_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    return start_a < end_b and end_a > start_b


def _status_value(appointment) -> str:
    status = appointment.status
    return getattr(status, 'value', status)


def find_conflicting_appointments(
    therapist_id: int,
    on_date: date,
    start_time: time,
    end_time: time,
    appointments: Iterable,
    exclude_appointment_id: int | None = None,
    ignored_statuses: Iterable[str] | None = None,
) -> List:
    """
    Return the appointments that collide with ``[start_time, end_time)``.

    Args:
        therapist_id: therapist whose calendar is checked
        on_date: calendar date of the interval
        start_time, end_time: the interval to test
        appointments: snapshot of existing appointments
        exclude_appointment_id: appointment being edited, never counted
            against itself
        ignored_statuses: statuses that do not occupy a slot; defaults to
            the configured policy
    """
    if ignored_statuses is None:
        ignored_statuses = config.CONFLICT_IGNORED_STATUSES
    ignored = {getattr(status, 'value', status) for status in ignored_statuses}

    conflicts = []
    for appointment in appointments:
        if exclude_appointment_id is not None and appointment.id == exclude_appointment_id:
            continue
        if appointment.therapist_id != therapist_id or appointment.date != on_date:
            continue
        if _status_value(appointment) in ignored:
            continue
        if intervals_overlap(start_time, end_time, appointment.start_time, appointment.end_time):
            conflicts.append(appointment)

    return conflicts


def has_scheduling_conflict(
    candidate: BookingCandidate,
    existing_appointments: Iterable,
    exclude_appointment_id: int | None = None,
    ignored_statuses: Iterable[str] | None = None,
) -> bool:
    # Incomplete candidates are left to required-field validation.
    if candidate.therapist_id is None or candidate.date is None or candidate.start_time is None:
        return False

    end_time = compute_session_end_time(candidate.start_time, candidate.session_type)
    conflicts = find_conflicting_appointments(
        candidate.therapist_id,
        candidate.date,
        candidate.start_time,
        end_time,
        existing_appointments,
        exclude_appointment_id=exclude_appointment_id,
        ignored_statuses=ignored_statuses,
    )
    return bool(conflicts)


def is_slot_occupied(
    therapist_id: int | None,
    on_date: date | None,
    slot_start: time,
    slot_duration_minutes: int,
    appointments: Iterable,
    exclude_id: int | None = None,
    ignored_statuses: Iterable[str] | None = None,
) -> bool:
    if therapist_id is None or on_date is None:
        return False

    slot_end = add_minutes(slot_start, slot_duration_minutes)
    conflicts = find_conflicting_appointments(
        therapist_id,
        on_date,
        slot_start,
        slot_end,
        appointments,
        exclude_appointment_id=exclude_id,
        ignored_statuses=ignored_statuses,
    )
    return bool(conflicts)
