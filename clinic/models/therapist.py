"""Therapist model definitions."""

from sqlalchemy import Column, Integer, JSON, String
from clinic.database import Base


class Therapist(Base):
    """A clinic therapist and their weekly availability template."""
    __tablename__ = "therapists"
    __table_args__ = {"sqlite_autoincrement": True}  # orphaned appointments never attach to a new therapist

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    specialization = Column(String, nullable=False)
    phone = Column(String)
    availability = Column(JSON, nullable=False)  # weekday name -> {is_available, start_time, end_time}
