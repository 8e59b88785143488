import logging
import time
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinic.models.patient import Patient as PatientRecord
from clinic.routes.common import database_unavailable, ensure_database_ready, get_db
from clinic.scheduling.domain import Patient, PatientType
from clinic.scheduling.referrals import ReferralStatus, compute_referral_expiry, filter_patients
from clinic.scheduling.snapshot import load_patients

router = APIRouter(tags=['patients'])

logger = logging.getLogger(__name__)


def _required(value: str, message: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(message)
    return normalized


class ReferralRequest(BaseModel):
    referral_number: str
    issued_date: date
    referring_provider: str

    @field_validator('referral_number')
    @classmethod
    def validate_referral_number(cls, value: str) -> str:
        return _required(value, 'Referral number is required.')

    @field_validator('referring_provider')
    @classmethod
    def validate_referring_provider(cls, value: str) -> str:
        return _required(value, 'Referring provider is required.')


class PatientRequest(BaseModel):
    medical_record_number: str | None = None
    name: str
    contact: str
    patient_type: PatientType = PatientType.REGULAR
    referral: ReferralRequest | None = None

    @field_validator('medical_record_number')
    @classmethod
    def validate_medical_record_number(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _required(value, 'Patient name is required.')

    @field_validator('contact')
    @classmethod
    def validate_contact(cls, value: str) -> str:
        return _required(value, 'Contact is required.')

    @model_validator(mode='after')
    def validate_referral_matches_type(self) -> 'PatientRequest':
        if self.patient_type == PatientType.INSURANCE_REFERRAL and self.referral is None:
            raise ValueError('Referral data is required for insurance referral patients.')
        if self.patient_type == PatientType.REGULAR and self.referral is not None:
            raise ValueError('Regular patients cannot carry referral data.')
        return self


def generate_medical_record_number() -> str:
    return f'MR-{str(int(time.time() * 1000))[-6:]}'


def get_patient_record(medical_record_number: str, db: Session) -> PatientRecord:
    patient = db.query(PatientRecord).filter(
        PatientRecord.medical_record_number == medical_record_number,
    ).first()
    if not patient:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Patient not found.',
        )
    return patient


def apply_referral(patient: PatientRecord, referral: ReferralRequest | None) -> None:
    if referral is None:
        patient.referral_number = None
        patient.referral_issued_date = None
        patient.referral_expiry_date = None
        patient.referring_provider = None
        return

    # Expiry is fixed when a referral is issued and kept across later edits.
    if patient.referral_expiry_date is None or patient.referral_issued_date != referral.issued_date:
        patient.referral_expiry_date = compute_referral_expiry(referral.issued_date)

    patient.referral_number = referral.referral_number
    patient.referral_issued_date = referral.issued_date
    patient.referring_provider = referral.referring_provider


@router.get('', response_model=list[Patient])
def list_patients(
    search: str | None = Query(default=None),
    patient_type: PatientType | None = Query(default=None),
    referral_status: ReferralStatus | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        patients = load_patients(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return filter_patients(
        patients,
        today=date.today(),
        search=search,
        patient_type=patient_type,
        referral_status=referral_status,
    )


@router.get('/{medical_record_number}', response_model=Patient)
def get_patient(medical_record_number: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return Patient.model_validate(get_patient_record(medical_record_number, db))
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=Patient, status_code=status.HTTP_201_CREATED)
def create_patient(data: PatientRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    medical_record_number = data.medical_record_number or generate_medical_record_number()

    try:
        existing = db.query(PatientRecord).filter(
            PatientRecord.medical_record_number == medical_record_number,
        ).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='A patient with this medical record number already exists.',
            )

        patient = PatientRecord(
            medical_record_number=medical_record_number,
            name=data.name,
            contact=data.contact,
            patient_type=data.patient_type.value,
        )
        apply_referral(patient, data.referral)

        db.add(patient)
        db.commit()
        db.refresh(patient)

        logger.info('Registered patient %s (%s)', patient.medical_record_number, patient.patient_type)
        return Patient.model_validate(patient)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='A patient with this medical record number already exists.',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.put('/{medical_record_number}', response_model=Patient)
def update_patient(medical_record_number: str, data: PatientRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        patient = get_patient_record(medical_record_number, db)

        patient.name = data.name
        patient.contact = data.contact
        patient.patient_type = data.patient_type.value
        apply_referral(patient, data.referral)
        db.commit()
        db.refresh(patient)

        return Patient.model_validate(patient)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.delete('/{medical_record_number}', status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(medical_record_number: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        patient = get_patient_record(medical_record_number, db)
        db.delete(patient)
        db.commit()
        logger.info('Deleted patient %s', medical_record_number)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
