from datetime import date

import pytest

from clinic.scheduling.domain import (
    AppointmentStatus,
    Patient,
    PatientType,
    ReferralData,
    SessionType,
    Specialization,
    Therapist,
)
from clinic.scheduling.referrals import ReferralStatus
from clinic.scheduling.reports import (
    attendance_report,
    dashboard_summary,
    expiring_referrals_report,
    provider_report,
    schedule_report,
)

MONDAY = date(2024, 1, 1)


def test_attendance_report_counts_outcomes_for_the_day(
    regular_patient,
    referral_patient,
    make_appointment,
) -> None:
    appointments = [
        make_appointment('09:00', patient_id='MR-000001', status=AppointmentStatus.COMPLETED),
        make_appointment('10:00', patient_id='MR-000001', status=AppointmentStatus.NO_SHOW),
        make_appointment('13:00', patient_id='MR-000002', status=AppointmentStatus.COMPLETED),
        make_appointment('13:00', patient_id='MR-000002', on_date=date(2024, 1, 2)),
    ]

    rows = attendance_report(appointments, [referral_patient, regular_patient], MONDAY)

    assert [row.medical_record_number for row in rows] == ['MR-000001', 'MR-000002']
    assert rows[0].total_appointments == 2
    assert rows[0].completed == 1
    assert rows[0].no_show == 1
    assert rows[0].attendance_rate == pytest.approx(0.5)
    assert rows[1].attendance_rate == pytest.approx(1.0)


def test_attendance_report_skips_patients_without_appointments(regular_patient) -> None:
    assert attendance_report([], [regular_patient], MONDAY) == []


def test_expiring_referrals_report_is_sorted_by_days_left(regular_patient, referral_patient) -> None:
    soon = Patient(
        medical_record_number='MR-000003',
        name='Wulan',
        patient_type=PatientType.INSURANCE_REFERRAL,
        referral=ReferralData(
            referral_number='REF-900',
            issued_date=date(2023, 11, 1),
            expiry_date=date(2024, 1, 30),
            referring_provider='Klinik Sehat',
        ),
    )

    rows = expiring_referrals_report([regular_patient, referral_patient, soon], MONDAY)

    assert [row.medical_record_number for row in rows] == ['MR-000003', 'MR-000002']
    assert rows[0].days_until_expiry == 29
    assert rows[0].status == ReferralStatus.EXPIRING
    assert rows[1].days_until_expiry == 90
    assert rows[1].status == ReferralStatus.ACTIVE


def test_provider_report(weekday_therapist, make_appointment) -> None:
    idle = Therapist(id=3, name='Citra', specialization=Specialization.OCCUPATIONAL_THERAPY)
    appointments = [
        make_appointment('09:00', status=AppointmentStatus.COMPLETED),
        make_appointment('10:00'),
        make_appointment('10:00', on_date=date(2024, 1, 2)),
    ]

    rows = provider_report([idle, weekday_therapist], appointments, MONDAY)

    assert [row.therapist_id for row in rows] == [1, 3]
    assert rows[0].total_appointments == 3
    assert rows[0].today == 2
    assert rows[0].completed == 1
    assert rows[0].scheduled == 2
    assert rows[1].total_appointments == 0


def test_schedule_report_joins_names_and_orders_by_start(
    weekday_therapist,
    saturday_therapist,
    regular_patient,
    referral_patient,
    make_appointment,
) -> None:
    appointments = [
        make_appointment('13:00', patient_id='MR-000002', session_type=SessionType.INSURANCE_REFERRAL),
        make_appointment('09:00', patient_id='MR-000001'),
        make_appointment('10:00', therapist_id=2, patient_id='MR-000001'),
        make_appointment('11:00', patient_id='MR-404'),
        make_appointment('09:00', on_date=date(2024, 1, 2)),
    ]

    rows = schedule_report(
        appointments,
        [weekday_therapist, saturday_therapist],
        [regular_patient, referral_patient],
        MONDAY,
    )

    assert [row.start_time.strftime('%H:%M') for row in rows] == ['09:00', '10:00', '11:00', '13:00']
    assert rows[0].therapist_name == 'Dewi Lestari'
    assert rows[0].patient_name == 'Rina Wati'
    assert rows[0].contact == '0813555000'
    assert rows[2].patient_name == 'Unknown'
    assert rows[3].session_type == SessionType.INSURANCE_REFERRAL
    assert rows[3].model_dump(mode='json')['end_time'] == '13:30'


def test_schedule_report_filters(weekday_therapist, saturday_therapist, regular_patient, make_appointment) -> None:
    appointments = [
        make_appointment('09:00'),
        make_appointment('10:00', therapist_id=2),
        make_appointment('11:00', therapist_id=99),
    ]
    therapists = [weekday_therapist, saturday_therapist]

    by_therapist = schedule_report(appointments, therapists, [regular_patient], MONDAY, therapist_id=2)
    by_specialization = schedule_report(
        appointments,
        therapists,
        [regular_patient],
        MONDAY,
        specialization=Specialization.SPEECH_THERAPY,
    )

    assert [row.therapist_id for row in by_therapist] == [2]
    assert [row.therapist_id for row in by_specialization] == [1]


def test_dashboard_summary(
    weekday_therapist,
    saturday_therapist,
    regular_patient,
    referral_patient,
    make_appointment,
) -> None:
    wednesday = date(2024, 1, 31)
    appointments = [
        make_appointment('09:00', on_date=wednesday),
        make_appointment('08:00', on_date=wednesday, status=AppointmentStatus.NO_SHOW),
        make_appointment('09:00', on_date=date(2024, 1, 29)),
        make_appointment('09:00', on_date=date(2024, 2, 2), therapist_id=2),
        make_appointment('09:00', on_date=date(2024, 1, 5), status=AppointmentStatus.CANCELED),
        make_appointment('09:00', on_date=date(2023, 12, 29), status=AppointmentStatus.CANCELED),
        make_appointment('09:00', on_date=date(2024, 2, 1), status=AppointmentStatus.CANCELED),
    ]

    summary = dashboard_summary(
        appointments,
        [weekday_therapist, saturday_therapist],
        [regular_patient, referral_patient],
        wednesday,
    )

    assert summary.week_start == date(2024, 1, 29)
    assert [appointment.start_time.hour for appointment in summary.today_appointments] == [8, 9]
    assert summary.week_to_date_count == 3
    assert [appointment.date for appointment in summary.month_canceled_no_show] == [date(2024, 1, 5), wednesday]
    assert [(count.therapist_id, count.appointments) for count in summary.therapist_week_counts] == [(1, 4), (2, 1)]
    assert summary.regular_patients == 1
    assert summary.insurance_patients == 1
