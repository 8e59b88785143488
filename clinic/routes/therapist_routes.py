import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic.models.therapist import Therapist as TherapistRecord
from clinic.routes.common import database_unavailable, ensure_database_ready, get_db
from clinic.scheduling.domain import Specialization, Therapist, WeeklyAvailability
from clinic.scheduling.snapshot import load_therapists

router = APIRouter(tags=['therapists'])

logger = logging.getLogger(__name__)


class TherapistRequest(BaseModel):
    name: str
    specialization: Specialization
    phone: str | None = None
    availability: WeeklyAvailability = Field(default_factory=WeeklyAvailability.default)

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Therapist name is required.')
        return normalized

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


def get_therapist_record(therapist_id: int, db: Session) -> TherapistRecord:
    therapist = db.query(TherapistRecord).filter(TherapistRecord.id == therapist_id).first()
    if not therapist:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Therapist not found.',
        )
    return therapist


@router.get('', response_model=list[Therapist])
def list_therapists(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return list(load_therapists(db))
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{therapist_id}', response_model=Therapist)
def get_therapist(therapist_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return Therapist.model_validate(get_therapist_record(therapist_id, db))
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=Therapist, status_code=status.HTTP_201_CREATED)
def create_therapist(data: TherapistRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        therapist = TherapistRecord(
            name=data.name,
            specialization=data.specialization.value,
            phone=data.phone,
            availability=data.availability.model_dump(mode='json'),
        )
        db.add(therapist)
        db.commit()
        db.refresh(therapist)

        logger.info('Created therapist %s (%s)', therapist.id, therapist.specialization)
        return Therapist.model_validate(therapist)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.put('/{therapist_id}', response_model=Therapist)
def update_therapist(therapist_id: int, data: TherapistRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        therapist = get_therapist_record(therapist_id, db)

        # The weekly template is overwritten in place; no history is kept.
        therapist.name = data.name
        therapist.specialization = data.specialization.value
        therapist.phone = data.phone
        therapist.availability = data.availability.model_dump(mode='json')
        db.commit()
        db.refresh(therapist)

        return Therapist.model_validate(therapist)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.delete('/{therapist_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_therapist(therapist_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        therapist = get_therapist_record(therapist_id, db)
        db.delete(therapist)
        db.commit()
        logger.info('Deleted therapist %s', therapist_id)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
