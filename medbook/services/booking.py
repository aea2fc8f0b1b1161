"""Booking orchestration: composes the slot guard and the appointment store.

The caller's identity always arrives as an explicit ``Identity`` argument
produced by the auth dependency; nothing here reads request state.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from medbook.auth.dependencies import Identity
from medbook.core import config
from medbook.core.errors import InvalidInput
from medbook.models.appointment import Appointment, AppointmentStatus
from medbook.models.doctor import Doctor
from medbook.schemas import AppointmentListEnvelope, AppointmentResponse
from medbook.services import appointment_store, slot_guard

logger = logging.getLogger(__name__)


def to_appointment_response(appointment: Appointment, doctor: Doctor | None = None) -> AppointmentResponse:
    response = AppointmentResponse.model_validate(appointment)
    if doctor is not None:
        response.doctor_name = doctor.name
        response.doctor_speciality = doctor.speciality or ''
        response.doctor_avatar = doctor.image
    return response


def attach_doctor_details(db: Session, appointments: list[Appointment]) -> list[AppointmentResponse]:
    """Serialize appointments with doctor display fields from one batched lookup."""
    doctor_ids = {appointment.doctor_id for appointment in appointments if appointment.doctor_id is not None}

    doctors_by_id: dict[int, Doctor] = {}
    if doctor_ids:
        doctors = db.query(Doctor).filter(Doctor.id.in_(doctor_ids)).all()
        doctors_by_id = {doctor.id: doctor for doctor in doctors}

    return [
        to_appointment_response(appointment, doctors_by_id.get(appointment.doctor_id))
        for appointment in appointments
    ]


def book_appointment(
    db: Session,
    identity: Identity,
    doctor_id: int | None,
    slot_date: str | None,
    slot_time: str | None,
    complaint: str | None = None,
) -> AppointmentResponse:
    missing = [
        field_name
        for field_name, value in (('doctorId', doctor_id), ('slotDate', slot_date), ('slotTime', slot_time))
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise InvalidInput(f'doctorId, slotDate and slotTime are required (missing: {", ".join(missing)}).')

    normalized_complaint = (complaint or '').strip()
    if len(normalized_complaint) > config.MAX_COMPLAINT_LENGTH:
        raise InvalidInput(f'Complaint must be {config.MAX_COMPLAINT_LENGTH} characters or fewer.')

    admission = slot_guard.admit_booking(db, doctor_id, slot_date, slot_time)

    appointment = appointment_store.create_appointment(
        db,
        user_id=identity.user_id,
        doctor_id=admission.doctor.id,
        slot_date=admission.slot_date,
        slot_time=admission.slot_time,
        complaint=normalized_complaint,
    )
    logger.info(
        'Appointment %s booked by user %s with doctor %s on %s %s',
        appointment.id,
        identity.user_id,
        admission.doctor.id,
        admission.slot_date,
        admission.slot_time,
    )

    return to_appointment_response(appointment, admission.doctor)


def parse_status_filter(value: str | None) -> str | None:
    if not value:
        return None
    normalized = value.strip().lower()
    if normalized in {status.value for status in AppointmentStatus}:
        return normalized
    return None


def parse_date_filter(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return slot_guard.parse_slot_date(value)
    except InvalidInput:
        return None


def list_my_appointments(
    db: Session,
    identity: Identity,
    *,
    status: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> AppointmentListEnvelope:
    """List the caller's appointments, newest first.

    Unknown statuses and malformed dates are ignored.
    """
    if limit is not None:
        limit = min(limit, config.MAX_PAGE_SIZE)

    result = appointment_store.list_for_user(
        db,
        identity.user_id,
        status=parse_status_filter(status),
        date_from=parse_date_filter(date_from),
        date_to=parse_date_filter(date_to),
        page=page,
        limit=limit,
    )
    return AppointmentListEnvelope(
        appointments=attach_doctor_details(db, result.appointments),
        total=result.total,
        page=result.page,
        page_size=result.page_size,
    )


def cancel_my_appointment(db: Session, identity: Identity, appointment_id: int) -> AppointmentResponse:
    appointment = appointment_store.cancel_appointment(db, appointment_id, identity.user_id)
    return attach_doctor_details(db, [appointment])[0]
