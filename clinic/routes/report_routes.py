import datetime as dt
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic.core import config
from clinic.routes.common import database_unavailable, ensure_database_ready, get_db
from clinic.scheduling.domain import Specialization
from clinic.scheduling.kpi import compute_kpis
from clinic.scheduling.reports import (
    AttendanceRow,
    DashboardSummary,
    ProviderRow,
    ReferralRow,
    ScheduleRow,
    attendance_report,
    dashboard_summary,
    expiring_referrals_report,
    provider_report,
    schedule_report,
)
from clinic.scheduling.snapshot import load_snapshot

router = APIRouter(tags=['reports'])

DEFAULT_KPI_RANGE_DAYS = 7


class KpiResponse(BaseModel):
    start: dt.date
    end: dt.date
    total_appointments: int
    no_show_count: int
    no_show_rate: float
    available_slots: int
    occupancy_rate: float
    new_patient_visits: int
    repeat_patient_visits: int

    class Config:
        from_attributes = True


@router.get('/kpi', response_model=KpiResponse)
def get_kpis(
    start: dt.date | None = Query(default=None),
    end: dt.date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    end = end or dt.date.today()
    start = start or end - timedelta(days=DEFAULT_KPI_RANGE_DAYS - 1)
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='The start date must not be after the end date.',
        )
    if (end - start).days + 1 > config.MAX_KPI_RANGE_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'The date range must not exceed {config.MAX_KPI_RANGE_DAYS} days.',
        )

    ensure_database_ready()

    try:
        snapshot = load_snapshot(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    summary = compute_kpis(snapshot.appointments, snapshot.therapists, start, end)
    return KpiResponse.model_validate(summary)


@router.get('/schedule', response_model=list[ScheduleRow])
def get_schedule_report(
    on_date: dt.date | None = Query(default=None, alias='date'),
    therapist_id: int | None = Query(default=None),
    specialization: Specialization | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        snapshot = load_snapshot(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return schedule_report(
        snapshot.appointments,
        snapshot.therapists,
        snapshot.patients,
        on_date or dt.date.today(),
        therapist_id=therapist_id,
        specialization=specialization,
    )


@router.get('/attendance', response_model=list[AttendanceRow])
def get_attendance_report(
    on_date: dt.date | None = Query(default=None, alias='date'),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        snapshot = load_snapshot(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return attendance_report(snapshot.appointments, snapshot.patients, on_date or dt.date.today())


@router.get('/referrals', response_model=list[ReferralRow])
def get_referrals_report(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        snapshot = load_snapshot(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return expiring_referrals_report(snapshot.patients, dt.date.today())


@router.get('/providers', response_model=list[ProviderRow])
def get_provider_report(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        snapshot = load_snapshot(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return provider_report(snapshot.therapists, snapshot.appointments, dt.date.today())


@router.get('/dashboard', response_model=DashboardSummary)
def get_dashboard(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        snapshot = load_snapshot(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return dashboard_summary(snapshot.appointments, snapshot.therapists, snapshot.patients, dt.date.today())
