import logging
from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medbook.auth.dependencies import Identity, require_admin
from medbook.core.errors import InternalError
from medbook.database import ensure_database_ready, get_db
from medbook.schemas import (
    AdminDoctorListEnvelope,
    AdminDoctorResponse,
    DoctorEnvelope,
    DoctorNoteEnvelope,
    DoctorNoteResponse,
    DoctorResponse,
)
from medbook.services import availability_ledger

router = APIRouter(tags=['admin'])

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 500


class UpdateAvailabilityRequest(BaseModel):
    status: str
    reason: str | None = None
    expected_back_time: datetime | None = Field(default=None, alias='expectedBackTime')
    available_slots: int | None = Field(default=None, alias='availableSlots')

    class Config:
        populate_by_name = True

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if len(normalized) > MAX_REASON_LENGTH:
            raise ValueError(f'Reason must be {MAX_REASON_LENGTH} characters or fewer.')

        return normalized


class AddNoteRequest(BaseModel):
    note: str


@router.get('', response_model=AdminDoctorListEnvelope)
def list_doctors(
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        doctors = availability_ledger.list_doctors(db, include_notes=True)
    except SQLAlchemyError as exc:
        logger.exception('Admin %s could not list doctors', identity.email)
        raise InternalError('Error fetching doctors.') from exc

    return AdminDoctorListEnvelope(doctors=[AdminDoctorResponse.from_doctor(doctor) for doctor in doctors])


@router.put('/{doctor_id}/availability', response_model=DoctorEnvelope)
def update_doctor_availability(
    doctor_id: int,
    data: UpdateAvailabilityRequest,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        doctor = availability_ledger.set_availability(
            db,
            doctor_id,
            data.status,
            reason=data.reason,
            expected_back_time=data.expected_back_time,
            slots=data.available_slots,
            actor=identity,
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Updating availability of doctor %s failed', doctor_id)
        raise InternalError('Error updating doctor availability.') from exc

    return DoctorEnvelope(
        message='Doctor availability updated successfully.',
        doctor=DoctorResponse.from_doctor(doctor),
    )


@router.put('/{doctor_id}/toggle-status', response_model=DoctorEnvelope)
def toggle_doctor_status(
    doctor_id: int,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        doctor = availability_ledger.toggle_active(db, doctor_id, actor=identity)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Toggling doctor %s failed', doctor_id)
        raise InternalError('Error updating doctor status.') from exc

    message = 'Doctor activated successfully.' if doctor.is_active else 'Doctor deactivated successfully.'
    return DoctorEnvelope(message=message, doctor=DoctorResponse.from_doctor(doctor))


@router.post('/{doctor_id}/notes', response_model=DoctorNoteEnvelope, status_code=status.HTTP_201_CREATED)
def add_doctor_note(
    doctor_id: int,
    data: AddNoteRequest,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        note = availability_ledger.add_note(db, doctor_id, data.note, actor=identity)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Adding a note to doctor %s failed', doctor_id)
        raise InternalError('Error adding doctor note.') from exc

    return DoctorNoteEnvelope(note=DoctorNoteResponse.model_validate(note))
