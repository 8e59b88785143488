from datetime import date

import pytest

from clinic.scheduling.domain import AppointmentStatus
from clinic.scheduling.kpi import compute_kpis, earliest_appointment_dates, total_available_slots


def test_total_available_slots_counts_template_capacity(weekday_therapist, saturday_therapist) -> None:
    assert total_available_slots([weekday_therapist], date(2024, 1, 1), date(2024, 1, 7)) == 80
    assert total_available_slots([saturday_therapist], date(2024, 1, 1), date(2024, 1, 7)) == 6


def test_earliest_appointment_dates(make_appointment) -> None:
    appointments = [
        make_appointment('09:00', patient_id='A', on_date=date(2024, 1, 3)),
        make_appointment('09:00', patient_id='A', on_date=date(2024, 1, 1)),
        make_appointment('09:00', patient_id='B', on_date=date(2024, 1, 2)),
    ]

    assert earliest_appointment_dates(appointments) == {'A': date(2024, 1, 1), 'B': date(2024, 1, 2)}


def test_compute_kpis_over_a_week(weekday_therapist, make_appointment) -> None:
    appointments = [
        make_appointment('09:00', patient_id='A', on_date=date(2024, 1, 1)),
        make_appointment('10:00', patient_id='A', on_date=date(2024, 1, 3), status=AppointmentStatus.NO_SHOW),
        make_appointment('09:00', patient_id='B', on_date=date(2023, 12, 28)),
        make_appointment('11:00', patient_id='B', on_date=date(2024, 1, 2)),
        make_appointment('14:00', patient_id='C', on_date=date(2024, 1, 4)),
        make_appointment('14:00', patient_id='C', on_date=date(2024, 1, 9)),
    ]

    summary = compute_kpis(appointments, [weekday_therapist], date(2024, 1, 1), date(2024, 1, 7))

    assert summary.total_appointments == 4
    assert summary.no_show_count == 1
    assert summary.no_show_rate == pytest.approx(0.25)
    assert summary.available_slots == 80
    assert summary.occupancy_rate == pytest.approx(0.05)
    assert summary.new_patient_visits == 2
    assert summary.repeat_patient_visits == 2


def test_compute_kpis_with_nothing_booked_has_zero_rates(weekday_therapist) -> None:
    summary = compute_kpis([], [weekday_therapist], date(2024, 1, 6), date(2024, 1, 7))

    assert summary.total_appointments == 0
    assert summary.available_slots == 0
    assert summary.no_show_rate == 0.0
    assert summary.occupancy_rate == 0.0


def test_compute_kpis_rejects_inverted_range(weekday_therapist) -> None:
    with pytest.raises(ValueError):
        compute_kpis([], [weekday_therapist], date(2024, 1, 7), date(2024, 1, 1))
