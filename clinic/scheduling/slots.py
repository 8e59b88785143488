"""
Slot Generation

Two notions of "slot" live here and are kept apart:

- the booking grid (``generate_candidate_time_slots``): a fixed,
  therapist-independent list of start times offered by the booking form;
- template slots (``list_template_slots``): session-length steps inside a
  therapist's weekly availability window, minus the lunch break. These are
  the slots counted for "remaining today" and for occupancy KPIs.
"""

from collections.abc import Iterable
from datetime import date, time

from clinic.core import config
from clinic.scheduling.domain import SessionType, Therapist
from clinic.scheduling.overlap import intervals_overlap, is_slot_occupied
from clinic.scheduling.sessions import session_duration_minutes
from clinic.scheduling.timeutils import from_minutes, to_minutes


def generate_candidate_time_slots(
    day_start: time | None = None,
    day_end: time | None = None,
    step_minutes: int | None = None,
) -> list[time]:
    """Every ``step_minutes``-aligned start from ``day_start`` up to, not including, ``day_end``."""
    if day_start is None:
        day_start = config.DAY_START
    if day_end is None:
        day_end = config.DAY_END
    if step_minutes is None:
        step_minutes = config.SLOT_STEP_MINUTES
    if step_minutes <= 0:
        raise ValueError('step_minutes must be positive.')

    slots = []
    current = to_minutes(day_start)
    end = to_minutes(day_end)
    while current < end:
        slots.append(from_minutes(current))
        current += step_minutes

    return slots


def list_template_slots(
    therapist: Therapist,
    on_date: date,
    session_duration_minutes: int | None = None,
) -> list[time]:
    """
    Session-length slot starts inside the therapist's window for ``on_date``.

    A slot is kept only if it ends by the template end time and does not
    touch the lunch break at all; a slot straddling the break is dropped
    rather than shifted.
    """
    if session_duration_minutes is None:
        session_duration_minutes = config.AVAILABILITY_SESSION_MINUTES
    if session_duration_minutes <= 0:
        raise ValueError('session_duration_minutes must be positive.')
    day = therapist.availability.for_date(on_date)
    if not day.is_available:
        return []

    slots = []
    current = to_minutes(day.start_time)
    end = to_minutes(day.end_time)
    while current + session_duration_minutes <= end:
        slot_start = from_minutes(current)
        slot_end = from_minutes(current + session_duration_minutes)
        if not intervals_overlap(slot_start, slot_end, config.LUNCH_BREAK_START, config.LUNCH_BREAK_END):
            slots.append(slot_start)
        current += session_duration_minutes

    return slots


def compute_available_slot_count(
    therapist: Therapist,
    on_date: date,
    appointments: Iterable = (),
    session_duration_minutes: int | None = None,
    ignored_statuses: Iterable[str] | None = None,
) -> int:
    """Number of template slots on ``on_date`` not overlapped by an existing appointment."""
    if session_duration_minutes is None:
        session_duration_minutes = config.AVAILABILITY_SESSION_MINUTES
    appointments = list(appointments)

    return sum(
        1
        for slot_start in list_template_slots(therapist, on_date, session_duration_minutes)
        if not is_slot_occupied(
            therapist.id,
            on_date,
            slot_start,
            session_duration_minutes,
            appointments,
            ignored_statuses=ignored_statuses,
        )
    )


def available_start_times(
    therapist_id: int | None,
    on_date: date | None,
    session_type: SessionType,
    appointments: Iterable,
    exclude_appointment_id: int | None = None,
    ignored_statuses: Iterable[str] | None = None,
) -> list[time]:
    """Booking-grid start times where a session of ``session_type`` would fit."""
    duration = session_duration_minutes(session_type)
    appointments = list(appointments)

    return [
        slot_start
        for slot_start in generate_candidate_time_slots()
        if not is_slot_occupied(
            therapist_id,
            on_date,
            slot_start,
            duration,
            appointments,
            exclude_id=exclude_appointment_id,
            ignored_statuses=ignored_statuses,
        )
    ]
