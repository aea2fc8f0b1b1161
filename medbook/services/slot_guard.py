import logging
import re
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from medbook.core.errors import DoctorUnavailable, InvalidDate, InvalidInput, SlotConflict
from medbook.models.appointment import ACTIVE_STATUSES, SLOT_TIMES, Appointment
from medbook.models.doctor import Doctor
from medbook.services.availability_ledger import get_doctor, is_bookable

logger = logging.getLogger(__name__)

_SLOT_DATE_PATTERN = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')


@dataclass(frozen=True)
class Admission:
    doctor: Doctor
    slot_date: date
    slot_time: str


def parse_slot_date(value: str | date) -> date:
    """Read a ``YYYY-MM-DD`` string as a plain calendar day.

    The components are taken literally so the client's time zone can never
    shift the stored day.
    """
    if isinstance(value, date):
        return value

    match = _SLOT_DATE_PATTERN.match(str(value or '').strip())
    if not match:
        raise InvalidDate()

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise InvalidDate() from exc


def normalize_slot_time(value: str) -> str:
    normalized = ' '.join(str(value or '').split()).upper()
    if normalized not in SLOT_TIMES:
        raise InvalidInput(f'Invalid slot time. Expected one of: {", ".join(SLOT_TIMES)}.')
    return normalized


def find_active_booking(db: Session, doctor_id: int, slot_date: date, slot_time: str) -> Appointment | None:
    return db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.slot_date == slot_date,
        Appointment.slot_time == slot_time,
        Appointment.status.in_(ACTIVE_STATUSES),
    ).first()


def admit_booking(db: Session, doctor_id: int, slot_date: str | date, slot_time: str) -> Admission:
    doctor = get_doctor(db, doctor_id)
    if not is_bookable(doctor):
        raise DoctorUnavailable()

    normalized_date = parse_slot_date(slot_date)
    normalized_time = normalize_slot_time(slot_time)

    # Fast path only; the partial unique index on appointments is authoritative.
    if find_active_booking(db, doctor_id, normalized_date, normalized_time) is not None:
        logger.info('Rejected booking for doctor %s on %s %s: slot taken', doctor_id, normalized_date, normalized_time)
        raise SlotConflict()

    return Admission(doctor=doctor, slot_date=normalized_date, slot_time=normalized_time)
