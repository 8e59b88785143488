"""Insurance referral validity windows."""

from collections.abc import Iterable
from datetime import date, timedelta
from enum import Enum

from clinic.core import config
from clinic.scheduling.domain import Patient, PatientType


class ReferralStatus(str, Enum):
    ACTIVE = 'active'
    EXPIRING = 'expiring'
    EXPIRED = 'expired'


def compute_referral_expiry(issued_date: date) -> date:
    return issued_date + timedelta(days=config.REFERRAL_VALIDITY_DAYS)


def days_until_expiry(expiry_date: date, today: date) -> int:
    return (expiry_date - today).days


def classify_referral(expiry_date: date, today: date) -> ReferralStatus:
    remaining = days_until_expiry(expiry_date, today)
    if remaining < 0:
        return ReferralStatus.EXPIRED
    if remaining <= config.REFERRAL_EXPIRING_WINDOW_DAYS:
        return ReferralStatus.EXPIRING
    return ReferralStatus.ACTIVE


def filter_patients(
    patients: Iterable[Patient],
    today: date,
    search: str | None = None,
    patient_type: PatientType | None = None,
    referral_status: ReferralStatus | None = None,
) -> list[Patient]:
    """Patient list filtering as offered by the patient directory.

    The referral filter only narrows insurance patients that carry referral
    data; everyone else passes it untouched.
    """
    term = (search or '').strip()
    lowered = term.lower()

    matches = []
    for patient in patients:
        if term and not (
            lowered in patient.name.lower()
            or lowered in patient.medical_record_number.lower()
            or (patient.contact and term in patient.contact)
        ):
            continue

        if patient_type is not None and patient.patient_type != patient_type:
            continue

        if (
            referral_status is not None
            and patient.patient_type == PatientType.INSURANCE_REFERRAL
            and patient.referral is not None
            and classify_referral(patient.referral.expiry_date, today) != referral_status
        ):
            continue

        matches.append(patient)

    return matches
