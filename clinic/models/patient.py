"""Patient model definitions."""

from sqlalchemy import Column, Date, String
from clinic.database import Base


class Patient(Base):
    """A patient, keyed by medical record number."""
    __tablename__ = "patients"

    medical_record_number = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    contact = Column(String)
    patient_type = Column(String, nullable=False, default='regular')
    referral_number = Column(String)
    referral_issued_date = Column(Date)
    referral_expiry_date = Column(Date)
    referring_provider = Column(String)

    @property
    def referral(self) -> dict | None:
        if self.referral_number is None:
            return None
        return {
            'referral_number': self.referral_number,
            'issued_date': self.referral_issued_date,
            'expiry_date': self.referral_expiry_date,
            'referring_provider': self.referring_provider,
        }
