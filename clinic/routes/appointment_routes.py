import datetime as dt
import logging
from datetime import time

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic.core import config
from clinic.models.appointment import Appointment as AppointmentRecord
from clinic.routes.common import database_unavailable, ensure_database_ready, get_db
from clinic.scheduling.domain import Appointment, AppointmentStatus, BookingCandidate, SessionType
from clinic.scheduling.overlap import find_conflicting_appointments
from clinic.scheduling.sessions import compute_session_end_time, resolve_session_type
from clinic.scheduling.snapshot import ScheduleSnapshot, load_snapshot
from clinic.scheduling.timeutils import parse_wall_clock
from clinic.scheduling.validation import CONFLICT_MESSAGE, validate_booking

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)


class AppointmentRequest(BaseModel):
    therapist_id: int | None = None
    patient_id: str | None = None
    date: dt.date | None = None
    start_time: time | None = None
    session_type: SessionType | None = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: str | None = None

    @field_validator('patient_id', mode='before')
    @classmethod
    def validate_patient_id(cls, value):
        if value is None:
            return None
        return str(value).strip() or None

    @field_validator('start_time', mode='before')
    @classmethod
    def validate_start_time(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return parse_wall_clock(value, strict=config.STRICT_TIME_PARSING)

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Notes must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

        return normalized


class StatusUpdateRequest(BaseModel):
    status: AppointmentStatus


def get_appointment_record(appointment_id: int, db: Session) -> AppointmentRecord:
    appointment = db.query(AppointmentRecord).filter(AppointmentRecord.id == appointment_id).first()
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Appointment not found.',
        )
    return appointment


def check_booking(
    data: AppointmentRequest,
    snapshot: ScheduleSnapshot,
    exclude_appointment_id: int | None = None,
) -> BookingCandidate:
    """Resolve the session type and run booking validation, raising on rejection."""
    errors: dict[str, str] = {}

    patient = snapshot.patient(data.patient_id) if data.patient_id else None
    if data.therapist_id is not None and snapshot.therapist(data.therapist_id) is None:
        errors['therapist_id'] = 'Therapist not found.'
    if data.patient_id and patient is None:
        errors['patient_id'] = 'Patient not found.'

    candidate = BookingCandidate(
        therapist_id=data.therapist_id,
        patient_id=data.patient_id,
        date=data.date,
        start_time=data.start_time,
        session_type=resolve_session_type(patient.patient_type if patient else None, data.session_type),
    )

    errors.update(
        validate_booking(
            candidate,
            snapshot.appointments,
            exclude_appointment_id=exclude_appointment_id,
            ignored_statuses=config.CONFLICT_IGNORED_STATUSES,
            check_conflict=data.status.value not in config.CONFLICT_IGNORED_STATUSES,
        )
    )

    if errors:
        logger.warning('Rejected booking for therapist %s on %s: %s', data.therapist_id, data.date, errors)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT if 'conflict' in errors else status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=errors,
        )

    return candidate


@router.get('', response_model=list[Appointment])
def list_appointments(
    on_date: dt.date | None = Query(default=None, alias='date'),
    therapist_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        query = db.query(AppointmentRecord)
        if on_date is not None:
            query = query.filter(AppointmentRecord.date == on_date)
        if therapist_id is not None:
            query = query.filter(AppointmentRecord.therapist_id == therapist_id)

        appointments = query.order_by(
            AppointmentRecord.date.asc(),
            AppointmentRecord.start_time.asc(),
        ).all()

        return [Appointment.model_validate(appointment) for appointment in appointments]
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{appointment_id}', response_model=Appointment)
def get_appointment(appointment_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return Appointment.model_validate(get_appointment_record(appointment_id, db))
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=Appointment, status_code=status.HTTP_201_CREATED)
def create_appointment(data: AppointmentRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        candidate = check_booking(data, load_snapshot(db))

        appointment = AppointmentRecord(
            therapist_id=candidate.therapist_id,
            patient_id=candidate.patient_id,
            date=candidate.date,
            start_time=candidate.start_time,
            end_time=compute_session_end_time(candidate.start_time, candidate.session_type),
            status=data.status.value,
            session_type=candidate.session_type.value,
            notes=data.notes,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)

        logger.info(
            'Booked appointment %s: therapist %s, patient %s, %s %s-%s',
            appointment.id,
            appointment.therapist_id,
            appointment.patient_id,
            appointment.date,
            appointment.start_time,
            appointment.end_time,
        )
        return Appointment.model_validate(appointment)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.put('/{appointment_id}', response_model=Appointment)
def update_appointment(appointment_id: int, data: AppointmentRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        appointment = get_appointment_record(appointment_id, db)
        candidate = check_booking(data, load_snapshot(db), exclude_appointment_id=appointment_id)

        appointment.therapist_id = candidate.therapist_id
        appointment.patient_id = candidate.patient_id
        appointment.date = candidate.date
        appointment.start_time = candidate.start_time
        appointment.end_time = compute_session_end_time(candidate.start_time, candidate.session_type)
        appointment.session_type = candidate.session_type.value
        appointment.status = data.status.value
        appointment.notes = data.notes
        db.commit()
        db.refresh(appointment)

        return Appointment.model_validate(appointment)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.patch('/{appointment_id}/status', response_model=Appointment)
def update_appointment_status(appointment_id: int, data: StatusUpdateRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        appointment = get_appointment_record(appointment_id, db)
        ignored = config.CONFLICT_IGNORED_STATUSES

        # Moving out of a status that freed the slot must not double-book it.
        if appointment.status in ignored and data.status.value not in ignored:
            conflicts = find_conflicting_appointments(
                appointment.therapist_id,
                appointment.date,
                appointment.start_time,
                appointment.end_time,
                load_snapshot(db).appointments,
                exclude_appointment_id=appointment.id,
                ignored_statuses=ignored,
            )
            if conflicts:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail={'conflict': CONFLICT_MESSAGE},
                )

        appointment.status = data.status.value
        db.commit()
        db.refresh(appointment)

        logger.info('Appointment %s is now %s', appointment.id, appointment.status)
        return Appointment.model_validate(appointment)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.delete('/{appointment_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        appointment = get_appointment_record(appointment_id, db)
        db.delete(appointment)
        db.commit()
        logger.info('Deleted appointment %s', appointment_id)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
