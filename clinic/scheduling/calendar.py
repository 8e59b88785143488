"""Day calendar grid: one column per therapist, one row per slot."""

from collections.abc import Iterable
from datetime import date, time

from pydantic import BaseModel, field_serializer

from clinic.core import config
from clinic.scheduling.domain import Appointment, Specialization, Therapist
from clinic.scheduling.overlap import is_slot_occupied
from clinic.scheduling.timeutils import format_wall_clock, from_minutes, to_minutes


class CalendarRow(BaseModel):
    start_time: time
    is_occupied: bool
    appointments: list[Appointment]

    @field_serializer('start_time')
    def serialize_time(self, value: time) -> str:
        return format_wall_clock(value)


class CalendarColumn(BaseModel):
    therapist: Therapist
    rows: list[CalendarRow]


def calendar_row_times(slot_minutes: int) -> list[time]:
    if slot_minutes <= 0:
        raise ValueError('slot_minutes must be positive.')

    # Rows run from the grid start up to and including the closing label row.
    rows = []
    current = to_minutes(config.DAY_START)
    end = to_minutes(config.DAY_END)
    while current <= end:
        rows.append(from_minutes(current))
        current += slot_minutes
    return rows


def build_calendar_day(
    therapists: Iterable[Therapist],
    appointments: Iterable[Appointment],
    on_date: date,
    specialization: Specialization | None = None,
    slot_minutes: int | None = None,
    ignored_statuses: Iterable[str] | None = None,
) -> list[CalendarColumn]:
    if slot_minutes is None:
        slot_minutes = config.CALENDAR_SLOT_MINUTES
    day_appointments = [appointment for appointment in appointments if appointment.date == on_date]
    row_times = calendar_row_times(slot_minutes)

    columns = []
    for therapist in therapists:
        if specialization is not None and therapist.specialization != specialization:
            continue

        own = sorted(
            (appointment for appointment in day_appointments if appointment.therapist_id == therapist.id),
            key=lambda appointment: appointment.start_time,
        )
        rows = []
        for row_start in row_times:
            row_end_minutes = to_minutes(row_start) + slot_minutes
            # An appointment is listed only in the row its start falls into.
            starting_here = [
                appointment
                for appointment in own
                if to_minutes(row_start) <= to_minutes(appointment.start_time) < row_end_minutes
            ]
            rows.append(
                CalendarRow(
                    start_time=row_start,
                    is_occupied=is_slot_occupied(
                        therapist.id,
                        on_date,
                        row_start,
                        slot_minutes,
                        own,
                        ignored_statuses=ignored_statuses,
                    ),
                    appointments=starting_here,
                )
            )
        columns.append(CalendarColumn(therapist=therapist, rows=rows))

    return columns
