"""Appointment model definitions."""

from sqlalchemy import Column, Date, Integer, String, Time
from clinic.database import Base


class Appointment(Base):
    """Represents a scheduled therapy session."""
    __tablename__ = "appointments"
    __table_args__ = {"sqlite_autoincrement": True}  # ids are never reused after a delete

    id = Column(Integer, primary_key=True)
    therapist_id = Column(Integer, nullable=False)  # no FK: deletes never cascade or block
    patient_id = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(String, nullable=False, default='scheduled')
    session_type = Column(String, nullable=False, default='regular')
    notes = Column(String)
