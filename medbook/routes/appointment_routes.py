import logging

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medbook.auth.dependencies import Identity, require_patient
from medbook.core.errors import InternalError
from medbook.database import ensure_database_ready, get_db
from medbook.schemas import AppointmentEnvelope, AppointmentListEnvelope
from medbook.services import booking

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)


class CreateAppointmentRequest(BaseModel):
    doctor_id: int | None = Field(default=None, alias='doctorId')
    slot_date: str | None = Field(default=None, alias='slotDate')
    slot_time: str | None = Field(default=None, alias='slotTime')
    complaint: str | None = None

    class Config:
        populate_by_name = True

    @field_validator('slot_date', 'slot_time', 'complaint')
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip()


@router.post('', response_model=AppointmentEnvelope, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    identity: Identity = Depends(require_patient),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = booking.book_appointment(
            db,
            identity,
            doctor_id=data.doctor_id,
            slot_date=data.slot_date,
            slot_time=data.slot_time,
            complaint=data.complaint,
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Booking failed for user %s', identity.user_id)
        raise InternalError('Error creating appointment.') from exc

    return AppointmentEnvelope(appointment=appointment)


@router.get('/mine', response_model=AppointmentListEnvelope)
def list_my_appointments(
    status_filter: str | None = Query(default=None, alias='status'),
    date_from: str | None = Query(default=None, alias='from'),
    date_to: str | None = Query(default=None, alias='to'),
    page: int | None = Query(default=None, ge=1),
    limit: int | None = Query(default=None, ge=1),
    identity: Identity = Depends(require_patient),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return booking.list_my_appointments(
            db,
            identity,
            status=status_filter,
            date_from=date_from,
            date_to=date_to,
            page=page,
            limit=limit,
        )
    except SQLAlchemyError as exc:
        logger.exception('Listing appointments failed for user %s', identity.user_id)
        raise InternalError('Error fetching appointments.') from exc


@router.api_route('/{appointment_id}/cancel', methods=['PATCH', 'DELETE'], response_model=AppointmentEnvelope)
def cancel_appointment(
    appointment_id: int,
    identity: Identity = Depends(require_patient),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = booking.cancel_my_appointment(db, identity, appointment_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Canceling appointment %s failed', appointment_id)
        raise InternalError('Error canceling appointment.') from exc

    return AppointmentEnvelope(appointment=appointment)
