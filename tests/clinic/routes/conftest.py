from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic.database import Base
from clinic.models.appointment import Appointment
from clinic.models.patient import Patient
from clinic.models.therapist import Therapist
from clinic.scheduling.domain import WeeklyAvailability

ROUTE_MODULES = (
    'clinic.routes.appointment_routes',
    'clinic.routes.patient_routes',
    'clinic.routes.report_routes',
    'clinic.routes.scheduling_routes',
    'clinic.routes.therapist_routes',
)


@pytest.fixture
def clinic_db(monkeypatch: pytest.MonkeyPatch):
    for module in ROUTE_MODULES:
        monkeypatch.setattr(f'{module}.ensure_database_ready', lambda: None)

    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    tables = [Therapist.__table__, Patient.__table__, Appointment.__table__]
    Base.metadata.create_all(bind=engine, tables=tables)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine, tables=tables)


@pytest.fixture
def seeded_db(clinic_db):
    clinic_db.add_all([
        Therapist(
            id=1,
            name='Dewi Lestari',
            specialization='speech_therapy',
            phone='0812000111',
            availability=WeeklyAvailability.default().model_dump(mode='json'),
        ),
        Patient(medical_record_number='MR-000001', name='Rina Wati', contact='0813555000', patient_type='regular'),
        Patient(
            medical_record_number='MR-000002',
            name='Agus Salim',
            contact='0813555111',
            patient_type='insurance_referral',
            referral_number='REF-778',
            referral_issued_date=date(2024, 1, 1),
            referral_expiry_date=date(2024, 3, 31),
            referring_provider='Puskesmas Kebayoran',
        ),
    ])
    clinic_db.commit()
    return clinic_db
