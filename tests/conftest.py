import os
from datetime import date, time

import pytest

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from clinic.scheduling.domain import (  # noqa: E402
    Appointment,
    AppointmentStatus,
    DayAvailability,
    Patient,
    PatientType,
    ReferralData,
    SessionType,
    Specialization,
    Therapist,
    WeeklyAvailability,
)
from clinic.scheduling.sessions import compute_session_end_time  # noqa: E402


@pytest.fixture
def make_appointment():
    counter = iter(range(1, 10_000))

    def factory(
        start: str,
        session_type: SessionType = SessionType.REGULAR,
        therapist_id: int = 1,
        on_date: date = date(2024, 1, 1),
        patient_id: str = 'MR-000001',
        status: AppointmentStatus = AppointmentStatus.SCHEDULED,
        appointment_id: int | None = None,
    ) -> Appointment:
        hours, minutes = (int(part) for part in start.split(':'))
        start_time = time(hours, minutes)
        return Appointment(
            id=appointment_id if appointment_id is not None else next(counter),
            therapist_id=therapist_id,
            patient_id=patient_id,
            date=on_date,
            start_time=start_time,
            end_time=compute_session_end_time(start_time, session_type),
            status=status,
            session_type=session_type,
        )

    return factory


@pytest.fixture
def weekday_therapist() -> Therapist:
    return Therapist(
        id=1,
        name='Dewi Lestari',
        specialization=Specialization.SPEECH_THERAPY,
        phone='0812000111',
        availability=WeeklyAvailability.default(),
    )


@pytest.fixture
def saturday_therapist() -> Therapist:
    return Therapist(
        id=2,
        name='Budi Santoso',
        specialization=Specialization.PHYSIOTHERAPY,
        availability=WeeklyAvailability(
            saturday=DayAvailability(is_available=True, start_time='09:00', end_time='12:00'),
        ),
    )


@pytest.fixture
def regular_patient() -> Patient:
    return Patient(medical_record_number='MR-000001', name='Rina Wati', contact='0813555000')


@pytest.fixture
def referral_patient() -> Patient:
    return Patient(
        medical_record_number='MR-000002',
        name='Agus Salim',
        contact='0813555111',
        patient_type=PatientType.INSURANCE_REFERRAL,
        referral=ReferralData(
            referral_number='REF-778',
            issued_date=date(2024, 1, 1),
            expiry_date=date(2024, 3, 31),
            referring_provider='Puskesmas Kebayoran',
        ),
    )
