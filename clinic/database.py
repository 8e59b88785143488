from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from clinic.core import config


connect_args = {'check_same_thread': False} if config.DATABASE_URL.startswith('sqlite') else {}
engine = create_engine(config.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_appointment_schema_checked = False
_patient_schema_checked = False


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(engine)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('session_type', "ALTER TABLE appointments ADD COLUMN session_type VARCHAR DEFAULT 'regular'"),
            ('notes', 'ALTER TABLE appointments ADD COLUMN notes VARCHAR'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_therapist_date ON appointments(therapist_id, date)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_date_start ON appointments(date, start_time)')
            )

        _appointment_schema_checked = True


def ensure_patient_schema() -> None:
    global _patient_schema_checked

    if _patient_schema_checked:
        return

    with _schema_lock:
        if _patient_schema_checked:
            return

        inspector = inspect(engine)

        if 'patients' not in inspector.get_table_names():
            _patient_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('patients')}
        migration_steps = [
            ('referral_number', 'ALTER TABLE patients ADD COLUMN referral_number VARCHAR'),
            ('referral_issued_date', 'ALTER TABLE patients ADD COLUMN referral_issued_date DATE'),
            ('referral_expiry_date', 'ALTER TABLE patients ADD COLUMN referral_expiry_date DATE'),
            ('referring_provider', 'ALTER TABLE patients ADD COLUMN referring_provider VARCHAR'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_patients_referral_expiry ON patients(referral_expiry_date)')
            )

        _patient_schema_checked = True
