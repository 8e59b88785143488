"""Session lengths and the end time they imply."""

from datetime import time

from clinic.scheduling.domain import PatientType, SessionType
from clinic.scheduling.timeutils import add_minutes

SESSION_DURATIONS = {
    SessionType.REGULAR: 45,
    SessionType.INSURANCE_REFERRAL: 30,
}


def session_duration_minutes(session_type: SessionType | str) -> int:
    return SESSION_DURATIONS[SessionType(session_type)]


def compute_session_end_time(start_time: time, session_type: SessionType | str) -> time:
    return add_minutes(start_time, session_duration_minutes(session_type))


def resolve_session_type(
    patient_type: PatientType | str | None,
    requested: SessionType | str | None = None,
) -> SessionType:
    # Insurance referral patients are only ever booked into referral-length sessions.
    if patient_type is not None and PatientType(patient_type) == PatientType.INSURANCE_REFERRAL:
        return SessionType.INSURANCE_REFERRAL
    if requested is None:
        return SessionType.REGULAR
    return SessionType(requested)
