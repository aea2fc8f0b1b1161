"""Appointment model definitions."""

from enum import Enum

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, text

from medbook.database import ACTIVE_SLOT_INDEX_NAME, Base
from medbook.models.doctor import utc_now


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELED = "canceled"


# Statuses that still hold their (doctor, date, time) slot.
ACTIVE_STATUSES = (AppointmentStatus.PENDING.value, AppointmentStatus.UPCOMING.value)

SLOT_TIMES = ("10:00 AM", "10:30 AM", "11:00 AM", "11:30 AM", "12:00 PM")

_active_slot_clause = text("status IN ('pending', 'upcoming')")


class Appointment(Base):
    """Represents a patient's booking of one doctor slot."""
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            ACTIVE_SLOT_INDEX_NAME,
            "doctor_id",
            "slot_date",
            "slot_time",
            unique=True,
            sqlite_where=_active_slot_clause,
            postgresql_where=_active_slot_clause,
        ),
        Index("idx_appointments_user_created", "user_id", "created_at"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    slot_date = Column(Date, nullable=False)
    slot_time = Column(String, nullable=False)
    status = Column(String, nullable=False, default=AppointmentStatus.UPCOMING.value, index=True)
    complaint = Column(String, default="")
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
