"""Administrator-controlled availability of each doctor.

Every mutation is a single conditional ``UPDATE`` so two administrators
editing the same doctor cannot lose each other's writes.
"""

import logging
from datetime import datetime

from sqlalchemy import case, not_
from sqlalchemy.orm import Session, selectinload

from medbook.auth.dependencies import Identity
from medbook.core.errors import InvalidInput, InvalidTransition, NotFound
from medbook.models.doctor import AvailabilityStatus, Doctor, DoctorNote, utc_now

logger = logging.getLogger(__name__)

DEACTIVATION_REASON = 'Deactivated by administrator'
MAX_NOTE_LENGTH = 2000


def is_bookable(doctor: Doctor) -> bool:
    return (
        bool(doctor.is_active)
        and doctor.availability_status == AvailabilityStatus.AVAILABLE.value
        and (doctor.available_slots or 0) > 0
    )


def parse_status(value: str | None) -> AvailabilityStatus:
    normalized = (value or '').strip().lower()
    try:
        return AvailabilityStatus(normalized)
    except ValueError as exc:
        allowed = ', '.join(status.value for status in AvailabilityStatus)
        raise InvalidInput(f'Invalid availability status. Expected one of: {allowed}.') from exc


def get_doctor(db: Session, doctor_id: int) -> Doctor:
    doctor = db.query(Doctor).filter(Doctor.id == doctor_id).first()
    if doctor is None:
        raise NotFound('Doctor not found.')
    return doctor


def list_doctors(db: Session, include_notes: bool = False) -> list[Doctor]:
    query = db.query(Doctor)
    if include_notes:
        query = query.options(selectinload(Doctor.notes))
    return query.order_by(Doctor.created_at.desc(), Doctor.id.desc()).all()


def set_availability(
    db: Session,
    doctor_id: int,
    status: str,
    reason: str | None = None,
    expected_back_time: datetime | None = None,
    slots: int | None = None,
    *,
    actor: Identity,
) -> Doctor:
    """Set a doctor's availability status.

    Only ``available`` keeps a slot count (clamped at zero, or the current
    count when ``slots`` is omitted); every other status forces zero slots.
    Appointments already booked with the doctor are left untouched.
    """
    new_status = parse_status(status)

    values = {
        Doctor.availability_status: new_status.value,
        Doctor.availability_reason: (reason or '').strip(),
        Doctor.expected_back_time: expected_back_time,
        Doctor.availability_updated_at: utc_now(),
        Doctor.availability_updated_by: actor.display_name,
    }
    if new_status is not AvailabilityStatus.AVAILABLE:
        values[Doctor.available_slots] = 0
    elif slots is not None:
        values[Doctor.available_slots] = max(0, int(slots))

    updated = db.query(Doctor).filter(
        Doctor.id == doctor_id,
        Doctor.is_active.is_(True),
    ).update(values, synchronize_session=False)

    if not updated:
        db.rollback()
        doctor = get_doctor(db, doctor_id)
        if not doctor.is_active:
            raise InvalidTransition('Doctor is deactivated. Reactivate the doctor before changing availability.')
        raise InvalidTransition('Doctor availability could not be updated.')

    db.commit()
    doctor = get_doctor(db, doctor_id)
    logger.info(
        'Doctor %s availability set to %s (slots=%s) by %s',
        doctor_id,
        doctor.availability_status,
        doctor.available_slots,
        actor.email,
    )
    return doctor


def toggle_active(db: Session, doctor_id: int, *, actor: Identity) -> Doctor:
    """Flip a doctor's active flag.

    Deactivation makes the doctor temporarily unavailable with zero slots.
    Reactivation does not restore a bookable status; the doctor stays
    unavailable until ``set_availability`` is called.
    """
    # Right-hand sides of an UPDATE see the pre-update row.
    deactivating = Doctor.is_active.is_(True)
    updated = db.query(Doctor).filter(Doctor.id == doctor_id).update(
        {
            Doctor.is_active: not_(Doctor.is_active),
            Doctor.availability_status: case(
                (deactivating, AvailabilityStatus.TEMPORARILY_UNAVAILABLE.value),
                else_=Doctor.availability_status,
            ),
            Doctor.available_slots: case((deactivating, 0), else_=Doctor.available_slots),
            Doctor.availability_reason: case((deactivating, DEACTIVATION_REASON), else_=Doctor.availability_reason),
            Doctor.availability_updated_at: utc_now(),
            Doctor.availability_updated_by: actor.display_name,
        },
        synchronize_session=False,
    )
    if not updated:
        db.rollback()
        raise NotFound('Doctor not found.')

    db.commit()
    doctor = get_doctor(db, doctor_id)
    logger.info(
        'Doctor %s %s by %s',
        doctor_id,
        'activated' if doctor.is_active else 'deactivated',
        actor.email,
    )
    return doctor


def add_note(db: Session, doctor_id: int, note: str, *, actor: Identity) -> DoctorNote:
    normalized = (note or '').strip()
    if not normalized:
        raise InvalidInput('Note text is required.')
    if len(normalized) > MAX_NOTE_LENGTH:
        raise InvalidInput(f'Notes must be {MAX_NOTE_LENGTH} characters or fewer.')

    get_doctor(db, doctor_id)

    doctor_note = DoctorNote(doctor_id=doctor_id, note=normalized, created_by=actor.display_name)
    db.add(doctor_note)
    db.commit()
    db.refresh(doctor_note)
    return doctor_note
