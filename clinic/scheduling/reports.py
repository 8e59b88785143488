"""Row data for the clinic's schedule, attendance, referral and provider reports
and the dashboard summary."""

from collections.abc import Iterable
from datetime import date, time, timedelta

from pydantic import BaseModel, field_serializer

from clinic.scheduling.domain import (
    Appointment,
    AppointmentStatus,
    Patient,
    PatientType,
    SessionType,
    Specialization,
    Therapist,
)
from clinic.scheduling.referrals import ReferralStatus, classify_referral, days_until_expiry
from clinic.scheduling.timeutils import format_wall_clock

UNKNOWN_NAME = 'Unknown'


class ScheduleRow(BaseModel):
    appointment_id: int | None = None
    date: date
    start_time: time
    end_time: time
    therapist_id: int
    therapist_name: str
    specialization: Specialization | None = None
    patient_id: str
    patient_name: str
    contact: str | None = None
    session_type: SessionType
    status: AppointmentStatus

    @field_serializer('start_time', 'end_time')
    def serialize_time(self, value: time) -> str:
        return format_wall_clock(value)


class AttendanceRow(BaseModel):
    medical_record_number: str
    name: str
    patient_type: PatientType
    contact: str | None = None
    total_appointments: int
    completed: int
    no_show: int
    canceled: int
    attendance_rate: float


class ReferralRow(BaseModel):
    medical_record_number: str
    name: str
    contact: str | None = None
    referral_number: str
    referring_provider: str
    issued_date: date
    expiry_date: date
    days_until_expiry: int
    status: ReferralStatus


class ProviderRow(BaseModel):
    therapist_id: int
    name: str
    specialization: Specialization
    phone: str | None = None
    total_appointments: int
    today: int
    completed: int
    scheduled: int


def attendance_report(
    appointments: Iterable[Appointment],
    patients: Iterable[Patient],
    on_date: date,
) -> list[AttendanceRow]:
    on_day = [appointment for appointment in appointments if appointment.date == on_date]

    rows = []
    for patient in patients:
        own = [appointment for appointment in on_day if appointment.patient_id == patient.medical_record_number]
        if not own:
            continue

        completed = sum(1 for appointment in own if appointment.status == AppointmentStatus.COMPLETED)
        rows.append(
            AttendanceRow(
                medical_record_number=patient.medical_record_number,
                name=patient.name,
                patient_type=patient.patient_type,
                contact=patient.contact,
                total_appointments=len(own),
                completed=completed,
                no_show=sum(1 for appointment in own if appointment.status == AppointmentStatus.NO_SHOW),
                canceled=sum(1 for appointment in own if appointment.status == AppointmentStatus.CANCELED),
                attendance_rate=completed / len(own),
            )
        )

    rows.sort(key=lambda row: row.total_appointments, reverse=True)
    return rows


def expiring_referrals_report(patients: Iterable[Patient], today: date) -> list[ReferralRow]:
    rows = [
        ReferralRow(
            medical_record_number=patient.medical_record_number,
            name=patient.name,
            contact=patient.contact,
            referral_number=patient.referral.referral_number,
            referring_provider=patient.referral.referring_provider,
            issued_date=patient.referral.issued_date,
            expiry_date=patient.referral.expiry_date,
            days_until_expiry=days_until_expiry(patient.referral.expiry_date, today),
            status=classify_referral(patient.referral.expiry_date, today),
        )
        for patient in patients
        if patient.patient_type == PatientType.INSURANCE_REFERRAL and patient.referral is not None
    ]
    rows.sort(key=lambda row: row.days_until_expiry)
    return rows


def provider_report(
    therapists: Iterable[Therapist],
    appointments: Iterable[Appointment],
    today: date,
) -> list[ProviderRow]:
    appointments = list(appointments)

    rows = []
    for therapist in therapists:
        own = [appointment for appointment in appointments if appointment.therapist_id == therapist.id]
        rows.append(
            ProviderRow(
                therapist_id=therapist.id,
                name=therapist.name,
                specialization=therapist.specialization,
                phone=therapist.phone,
                total_appointments=len(own),
                today=sum(1 for appointment in own if appointment.date == today),
                completed=sum(1 for appointment in own if appointment.status == AppointmentStatus.COMPLETED),
                scheduled=sum(1 for appointment in own if appointment.status == AppointmentStatus.SCHEDULED),
            )
        )

    rows.sort(key=lambda row: row.total_appointments, reverse=True)
    return rows


def schedule_report(
    appointments: Iterable[Appointment],
    therapists: Iterable[Therapist],
    patients: Iterable[Patient],
    on_date: date,
    therapist_id: int | None = None,
    specialization: Specialization | None = None,
) -> list[ScheduleRow]:
    """Appointments on ``on_date`` joined to therapist and patient details.

    Rows are ordered by start time. Appointments whose therapist or patient
    no longer exists are kept and labelled ``Unknown``; a specialization
    filter drops them since their specialization cannot be known.
    """
    therapists_by_id = {therapist.id: therapist for therapist in therapists}
    patients_by_number = {patient.medical_record_number: patient for patient in patients}

    rows = []
    for appointment in appointments:
        if appointment.date != on_date:
            continue
        if therapist_id is not None and appointment.therapist_id != therapist_id:
            continue

        therapist = therapists_by_id.get(appointment.therapist_id)
        if specialization is not None and (therapist is None or therapist.specialization != specialization):
            continue

        patient = patients_by_number.get(appointment.patient_id)
        rows.append(
            ScheduleRow(
                appointment_id=appointment.id,
                date=appointment.date,
                start_time=appointment.start_time,
                end_time=appointment.end_time,
                therapist_id=appointment.therapist_id,
                therapist_name=therapist.name if therapist else UNKNOWN_NAME,
                specialization=therapist.specialization if therapist else None,
                patient_id=appointment.patient_id,
                patient_name=patient.name if patient else UNKNOWN_NAME,
                contact=patient.contact if patient else None,
                session_type=appointment.session_type,
                status=appointment.status,
            )
        )

    rows.sort(key=lambda row: row.start_time)
    return rows


class TherapistWeekCount(BaseModel):
    therapist_id: int
    name: str
    appointments: int


class DashboardSummary(BaseModel):
    today: date
    week_start: date
    today_appointments: list[Appointment]
    week_to_date_count: int
    month_canceled_no_show: list[Appointment]
    therapist_week_counts: list[TherapistWeekCount]
    regular_patients: int
    insurance_patients: int


def dashboard_summary(
    appointments: Iterable[Appointment],
    therapists: Iterable[Therapist],
    patients: Iterable[Patient],
    today: date,
) -> DashboardSummary:
    # Weeks run Monday to Sunday.
    week_start = today - timedelta(days=today.weekday())
    week_end = week_start + timedelta(days=6)
    month_start = today.replace(day=1)
    next_month_start = (month_start + timedelta(days=32)).replace(day=1)

    appointments = sorted(appointments, key=lambda appointment: (appointment.date, appointment.start_time))
    patients = list(patients)
    insurance_patients = sum(1 for patient in patients if patient.patient_type == PatientType.INSURANCE_REFERRAL)
    missed = {AppointmentStatus.CANCELED, AppointmentStatus.NO_SHOW}

    return DashboardSummary(
        today=today,
        week_start=week_start,
        today_appointments=[appointment for appointment in appointments if appointment.date == today],
        week_to_date_count=sum(1 for appointment in appointments if week_start <= appointment.date <= today),
        month_canceled_no_show=[
            appointment
            for appointment in appointments
            if month_start <= appointment.date < next_month_start and appointment.status in missed
        ],
        therapist_week_counts=[
            TherapistWeekCount(
                therapist_id=therapist.id,
                name=therapist.name,
                appointments=sum(
                    1
                    for appointment in appointments
                    if appointment.therapist_id == therapist.id and week_start <= appointment.date <= week_end
                ),
            )
            for therapist in therapists
        ],
        regular_patients=len(patients) - insurance_patients,
        insurance_patients=insurance_patients,
    )
