"""Immutable scheduling records shared by the engine and the API layer."""

import datetime as dt
from datetime import date, time
from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, field_serializer, field_validator, model_validator

from clinic.core import config
from clinic.scheduling.timeutils import format_wall_clock, parse_calendar_date, parse_wall_clock


class Specialization(str, Enum):
    SPEECH_THERAPY = 'speech_therapy'
    PHYSIOTHERAPY = 'physiotherapy'
    OCCUPATIONAL_THERAPY = 'occupational_therapy'


class PatientType(str, Enum):
    REGULAR = 'regular'
    INSURANCE_REFERRAL = 'insurance_referral'


class SessionType(str, Enum):
    REGULAR = 'regular'
    INSURANCE_REFERRAL = 'insurance_referral'


class AppointmentStatus(str, Enum):
    SCHEDULED = 'scheduled'
    COMPLETED = 'completed'
    NO_SHOW = 'no-show'
    CANCELED = 'canceled'


class Weekday(str, Enum):
    MONDAY = 'monday'
    TUESDAY = 'tuesday'
    WEDNESDAY = 'wednesday'
    THURSDAY = 'thursday'
    FRIDAY = 'friday'
    SATURDAY = 'saturday'
    SUNDAY = 'sunday'

    @classmethod
    def from_date(cls, value: date) -> 'Weekday':
        return list(cls)[value.weekday()]


def _parse_time_field(value):
    return parse_wall_clock(value, strict=config.STRICT_TIME_PARSING)


class DayAvailability(BaseModel):
    """Open hours for a single weekday."""

    is_available: bool = Field(default=False, validation_alias=AliasChoices('is_available', 'available'))
    start_time: time = time(8, 0)
    end_time: time = time(17, 0)

    class Config:
        frozen = True
        from_attributes = True
        populate_by_name = True

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def parse_time(cls, value):
        return _parse_time_field(value)

    @model_validator(mode='after')
    def check_window(self) -> 'DayAvailability':
        if self.is_available and self.start_time >= self.end_time:
            raise ValueError('start_time must be earlier than end_time on available days.')
        return self

    @field_serializer('start_time', 'end_time')
    def serialize_time(self, value: time) -> str:
        return format_wall_clock(value)


_OPEN_DAY = DayAvailability(is_available=True)
_CLOSED_DAY = DayAvailability(is_available=False)


class WeeklyAvailability(BaseModel):
    """A therapist's recurring week, one entry per weekday.

    Mappings keyed by weekday name are accepted in any letter case; days
    that are left out are closed.
    """

    monday: DayAvailability = _CLOSED_DAY
    tuesday: DayAvailability = _CLOSED_DAY
    wednesday: DayAvailability = _CLOSED_DAY
    thursday: DayAvailability = _CLOSED_DAY
    friday: DayAvailability = _CLOSED_DAY
    saturday: DayAvailability = _CLOSED_DAY
    sunday: DayAvailability = _CLOSED_DAY

    class Config:
        frozen = True
        from_attributes = True

    @model_validator(mode='before')
    @classmethod
    def normalize_weekday_keys(cls, data):
        if not isinstance(data, dict):
            return data

        known = {weekday.value for weekday in Weekday}
        normalized = {}
        for key, value in data.items():
            name = str(key).strip().lower()
            if name not in known:
                raise ValueError(f'Unknown weekday: {key}')
            normalized[name] = value
        return normalized

    @classmethod
    def default(cls) -> 'WeeklyAvailability':
        return cls(
            monday=_OPEN_DAY,
            tuesday=_OPEN_DAY,
            wednesday=_OPEN_DAY,
            thursday=_OPEN_DAY,
            friday=_OPEN_DAY,
        )

    def for_weekday(self, weekday: Weekday) -> DayAvailability:
        return getattr(self, weekday.value)

    def for_date(self, value: date) -> DayAvailability:
        return self.for_weekday(Weekday.from_date(value))


class Therapist(BaseModel):
    id: int
    name: str
    specialization: Specialization
    phone: str | None = None
    availability: WeeklyAvailability = Field(default_factory=WeeklyAvailability.default)

    class Config:
        frozen = True
        from_attributes = True


class ReferralData(BaseModel):
    referral_number: str
    issued_date: date
    expiry_date: date
    referring_provider: str

    class Config:
        frozen = True
        from_attributes = True


class Patient(BaseModel):
    medical_record_number: str
    name: str
    contact: str | None = None
    patient_type: PatientType = PatientType.REGULAR
    referral: ReferralData | None = None

    class Config:
        frozen = True
        from_attributes = True

    @model_validator(mode='after')
    def check_referral_matches_type(self) -> 'Patient':
        if self.patient_type == PatientType.INSURANCE_REFERRAL and self.referral is None:
            raise ValueError('Insurance referral patients must carry referral data.')
        if self.patient_type == PatientType.REGULAR and self.referral is not None:
            raise ValueError('Regular patients cannot carry referral data.')
        return self


class Appointment(BaseModel):
    id: int | None = None
    therapist_id: int
    patient_id: str
    date: date
    start_time: time
    end_time: time
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    session_type: SessionType = SessionType.REGULAR
    notes: str | None = None

    class Config:
        frozen = True
        from_attributes = True

    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, value):
        return parse_calendar_date(value)

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def parse_time(cls, value):
        return _parse_time_field(value)

    @field_serializer('start_time', 'end_time')
    def serialize_time(self, value: time) -> str:
        return format_wall_clock(value)


class BookingCandidate(BaseModel):
    """A booking being validated; any field may still be missing."""

    therapist_id: int | None = None
    patient_id: str | None = None
    date: dt.date | None = None
    start_time: time | None = None
    session_type: SessionType = SessionType.REGULAR

    class Config:
        frozen = True
