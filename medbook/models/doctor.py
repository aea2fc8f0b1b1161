"""Doctor and availability model definitions."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from medbook.database import Base


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"
    ON_LEAVE = "on_leave"
    BUSY = "busy"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Doctor(Base):
    """Represents a bookable doctor and their current availability."""
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    speciality = Column(String, nullable=False)
    image = Column(String)
    degree = Column(String)
    experience = Column(String)
    location = Column(String)
    phone = Column(String)
    rating = Column(Float)
    consultation_fee = Column(Float)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    # Mutated only through medbook.services.availability_ledger
    is_active = Column(Boolean, nullable=False, default=True)
    availability_status = Column(String, nullable=False, default=AvailabilityStatus.AVAILABLE.value)
    available_slots = Column(Integer, nullable=False, default=0)
    availability_reason = Column(String, default="")
    expected_back_time = Column(DateTime(timezone=True))
    availability_updated_at = Column(DateTime(timezone=True), default=utc_now)
    availability_updated_by = Column(String, default="system")

    notes = relationship(
        "DoctorNote",
        back_populates="doctor",
        order_by="DoctorNote.created_at",
        cascade="all, delete-orphan",
    )


class DoctorNote(Base):
    """Internal note an administrator attached to a doctor."""
    __tablename__ = "doctor_notes"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False, index=True)
    note = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    created_by = Column(String, nullable=False)

    doctor = relationship("Doctor", back_populates="notes")
