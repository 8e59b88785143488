"""Read-only snapshots of clinic data handed to the scheduling engine."""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from clinic.models.appointment import Appointment as AppointmentRecord
from clinic.models.patient import Patient as PatientRecord
from clinic.models.therapist import Therapist as TherapistRecord
from clinic.scheduling.domain import Appointment, Patient, Therapist


@dataclass(frozen=True)
class ScheduleSnapshot:
    therapists: tuple[Therapist, ...] = ()
    patients: tuple[Patient, ...] = ()
    appointments: tuple[Appointment, ...] = ()

    def therapist(self, therapist_id: int) -> Therapist | None:
        return next((therapist for therapist in self.therapists if therapist.id == therapist_id), None)

    def patient(self, medical_record_number: str) -> Patient | None:
        return next(
            (patient for patient in self.patients if patient.medical_record_number == medical_record_number),
            None,
        )


def load_appointments(db: Session) -> tuple[Appointment, ...]:
    rows = db.query(AppointmentRecord).order_by(
        AppointmentRecord.date.asc(),
        AppointmentRecord.start_time.asc(),
    ).all()
    return tuple(Appointment.model_validate(row) for row in rows)


def load_therapists(db: Session) -> tuple[Therapist, ...]:
    rows = db.query(TherapistRecord).order_by(TherapistRecord.name.asc()).all()
    return tuple(Therapist.model_validate(row) for row in rows)


def load_patients(db: Session) -> tuple[Patient, ...]:
    rows = db.query(PatientRecord).order_by(PatientRecord.name.asc()).all()
    return tuple(Patient.model_validate(row) for row in rows)


def load_snapshot(db: Session) -> ScheduleSnapshot:
    return ScheduleSnapshot(
        therapists=load_therapists(db),
        patients=load_patients(db),
        appointments=load_appointments(db),
    )
