"""Durable appointment records and their lifecycle."""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from medbook.core.errors import InvalidTransition, NotFound, SlotConflict
from medbook.models.appointment import ACTIVE_STATUSES, Appointment, AppointmentStatus
from medbook.models.doctor import utc_now

logger = logging.getLogger(__name__)


@dataclass
class AppointmentPage:
    appointments: list[Appointment]
    total: int | None = None
    page: int | None = None
    page_size: int | None = None


def create_appointment(
    db: Session,
    *,
    user_id: int,
    doctor_id: int,
    slot_date: date,
    slot_time: str,
    complaint: str = '',
) -> Appointment:
    appointment = Appointment(
        user_id=user_id,
        doctor_id=doctor_id,
        slot_date=slot_date,
        slot_time=slot_time,
        complaint=complaint or '',
        status=AppointmentStatus.UPCOMING.value,
    )
    db.add(appointment)

    try:
        db.commit()
    except IntegrityError as exc:
        # Lost the race to another writer for the same slot.
        db.rollback()
        logger.warning('Slot %s %s for doctor %s taken by a concurrent booking', slot_date, slot_time, doctor_id)
        raise SlotConflict() from exc

    db.refresh(appointment)
    return appointment


def list_for_user(
    db: Session,
    user_id: int,
    *,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> AppointmentPage:
    query = db.query(Appointment).filter(Appointment.user_id == user_id)

    if status is not None:
        query = query.filter(Appointment.status == status)
    if date_from is not None:
        query = query.filter(Appointment.slot_date >= date_from)
    if date_to is not None:
        query = query.filter(Appointment.slot_date <= date_to)

    query = query.order_by(Appointment.created_at.desc(), Appointment.id.desc())

    if page and limit:
        total = query.count()
        appointments = query.offset((page - 1) * limit).limit(limit).all()
        return AppointmentPage(appointments=appointments, total=total, page=page, page_size=limit)

    return AppointmentPage(appointments=query.all())


def cancel_appointment(db: Session, appointment_id: int, user_id: int) -> Appointment:
    updated = db.query(Appointment).filter(
        Appointment.id == appointment_id,
        Appointment.user_id == user_id,
        Appointment.status.in_(ACTIVE_STATUSES),
    ).update(
        {Appointment.status: AppointmentStatus.CANCELED.value, Appointment.updated_at: utc_now()},
        synchronize_session=False,
    )

    if not updated:
        db.rollback()
        appointment = db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.user_id == user_id,
        ).first()
        if appointment is None:
            raise NotFound('Appointment not found.')
        raise InvalidTransition('Only upcoming or pending appointments can be canceled.')

    db.commit()
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).one()
    logger.info('Appointment %s canceled by user %s', appointment_id, user_id)
    return appointment
