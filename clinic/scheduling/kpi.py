"""
KPI Aggregation

Occupancy compares booked appointments against the template capacity of
every therapist on every day of the range. New-vs-repeat is decided per
appointment: an appointment is a "new patient" visit when its date equals
the patient's earliest appointment date across all appointments on record,
not only those inside the range.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from clinic.scheduling.domain import Appointment, AppointmentStatus, Therapist
from clinic.scheduling.slots import compute_available_slot_count
from clinic.scheduling.timeutils import iterate_dates


@dataclass(frozen=True)
class KpiSummary:
    start: date
    end: date
    total_appointments: int
    no_show_count: int
    no_show_rate: float
    available_slots: int
    occupancy_rate: float
    new_patient_visits: int
    repeat_patient_visits: int


def _ratio(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator else 0.0


def earliest_appointment_dates(appointments: Iterable[Appointment]) -> dict[str, date]:
    earliest: dict[str, date] = {}
    for appointment in appointments:
        current = earliest.get(appointment.patient_id)
        if current is None or appointment.date < current:
            earliest[appointment.patient_id] = appointment.date
    return earliest


def total_available_slots(
    therapists: Iterable[Therapist],
    start: date,
    end: date,
    session_duration_minutes: int | None = None,
) -> int:
    therapists = list(therapists)
    return sum(
        compute_available_slot_count(therapist, day, session_duration_minutes=session_duration_minutes)
        for therapist in therapists
        for day in iterate_dates(start, end)
    )


def compute_kpis(
    appointments: Iterable[Appointment],
    therapists: Iterable[Therapist],
    start: date,
    end: date,
    session_duration_minutes: int | None = None,
) -> KpiSummary:
    if start > end:
        raise ValueError('start must not be after end.')

    appointments = list(appointments)
    in_range = [appointment for appointment in appointments if start <= appointment.date <= end]

    no_show_count = sum(1 for appointment in in_range if appointment.status == AppointmentStatus.NO_SHOW)
    available_slots = total_available_slots(therapists, start, end, session_duration_minutes)

    earliest = earliest_appointment_dates(appointments)
    new_visits = sum(1 for appointment in in_range if earliest[appointment.patient_id] == appointment.date)

    return KpiSummary(
        start=start,
        end=end,
        total_appointments=len(in_range),
        no_show_count=no_show_count,
        no_show_rate=_ratio(no_show_count, len(in_range)),
        available_slots=available_slots,
        occupancy_rate=_ratio(len(in_range), available_slots),
        new_patient_visits=new_visits,
        repeat_patient_visits=len(in_range) - new_visits,
    )
