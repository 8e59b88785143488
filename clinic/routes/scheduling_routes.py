import datetime as dt
from datetime import time

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_serializer, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic.core import config
from clinic.routes.common import database_unavailable, ensure_database_ready, get_db
from clinic.scheduling.calendar import CalendarColumn, build_calendar_day
from clinic.scheduling.domain import SessionType, Specialization
from clinic.scheduling.overlap import find_conflicting_appointments
from clinic.scheduling.sessions import compute_session_end_time, session_duration_minutes
from clinic.scheduling.slots import available_start_times, compute_available_slot_count, generate_candidate_time_slots
from clinic.scheduling.snapshot import load_appointments, load_snapshot
from clinic.scheduling.timeutils import format_wall_clock, parse_wall_clock

router = APIRouter(tags=['scheduling'])


class SessionEndResponse(BaseModel):
    session_type: SessionType
    duration_minutes: int
    start_time: time
    end_time: time

    @field_serializer('start_time', 'end_time')
    def serialize_time(self, value: time) -> str:
        return format_wall_clock(value)


class TimeSlotResponse(BaseModel):
    start_time: time
    is_available: bool

    @field_serializer('start_time')
    def serialize_time(self, value: time) -> str:
        return format_wall_clock(value)


class AvailableSlotCountResponse(BaseModel):
    therapist_id: int
    date: dt.date
    available_slots: int


class ConflictCheckRequest(BaseModel):
    therapist_id: int | None = None
    date: dt.date | None = None
    start_time: time | None = None
    session_type: SessionType = SessionType.REGULAR
    exclude_appointment_id: int | None = None

    @field_validator('start_time', mode='before')
    @classmethod
    def validate_start_time(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return parse_wall_clock(value, strict=config.STRICT_TIME_PARSING)


class ConflictCheckResponse(BaseModel):
    has_conflict: bool
    conflicting_appointment_ids: list[int]


def parse_start_time_param(value: str) -> time:
    try:
        return parse_wall_clock(value, strict=config.STRICT_TIME_PARSING)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid start time.',
        ) from exc


@router.get('/session-end', response_model=SessionEndResponse)
def get_session_end(
    start_time: str = Query(...),
    session_type: SessionType = Query(default=SessionType.REGULAR),
):
    start = parse_start_time_param(start_time)
    try:
        end = compute_session_end_time(start, session_type)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='The session would run past midnight.',
        ) from exc

    return SessionEndResponse(
        session_type=session_type,
        duration_minutes=session_duration_minutes(session_type),
        start_time=start,
        end_time=end,
    )


@router.get('/time-slots', response_model=list[TimeSlotResponse])
def list_time_slots(
    therapist_id: int | None = Query(default=None),
    on_date: dt.date | None = Query(default=None, alias='date'),
    session_type: SessionType = Query(default=SessionType.REGULAR),
    exclude_appointment_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointments = load_appointments(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    open_starts = set(
        available_start_times(
            therapist_id,
            on_date,
            session_type,
            appointments,
            exclude_appointment_id=exclude_appointment_id,
            ignored_statuses=config.CONFLICT_IGNORED_STATUSES,
        )
    )
    return [
        TimeSlotResponse(start_time=slot_start, is_available=slot_start in open_starts)
        for slot_start in generate_candidate_time_slots()
    ]


@router.get('/therapists/{therapist_id}/available-slots', response_model=AvailableSlotCountResponse)
def get_available_slot_count(
    therapist_id: int,
    on_date: dt.date = Query(..., alias='date'),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        snapshot = load_snapshot(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    therapist = snapshot.therapist(therapist_id)
    if therapist is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Therapist not found.',
        )

    return AvailableSlotCountResponse(
        therapist_id=therapist_id,
        date=on_date,
        available_slots=compute_available_slot_count(
            therapist,
            on_date,
            snapshot.appointments,
            ignored_statuses=config.CONFLICT_IGNORED_STATUSES,
        ),
    )


@router.post('/conflicts', response_model=ConflictCheckResponse)
def check_conflict(data: ConflictCheckRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    if data.therapist_id is None or data.date is None or data.start_time is None:
        return ConflictCheckResponse(has_conflict=False, conflicting_appointment_ids=[])

    try:
        appointments = load_appointments(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    try:
        end_time = compute_session_end_time(data.start_time, data.session_type)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='The session would run past midnight.',
        ) from exc

    conflicts = find_conflicting_appointments(
        data.therapist_id,
        data.date,
        data.start_time,
        end_time,
        appointments,
        exclude_appointment_id=data.exclude_appointment_id,
        ignored_statuses=config.CONFLICT_IGNORED_STATUSES,
    )
    return ConflictCheckResponse(
        has_conflict=bool(conflicts),
        conflicting_appointment_ids=[appointment.id for appointment in conflicts],
    )


@router.get('/calendar', response_model=list[CalendarColumn])
def get_calendar_day(
    on_date: dt.date = Query(..., alias='date'),
    specialization: Specialization | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        snapshot = load_snapshot(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return build_calendar_day(
        snapshot.therapists,
        snapshot.appointments,
        on_date,
        specialization=specialization,
        ignored_statuses=config.CONFLICT_IGNORED_STATUSES,
    )
