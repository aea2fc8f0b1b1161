"""Insert sample doctors with a spread of availability states.

Usage:
    python -m medbook.seed_doctors
"""
import sys

from sqlalchemy.exc import SQLAlchemyError

from medbook.database import Base, SessionLocal, engine
from medbook.models import appointment, user  # noqa: F401
from medbook.models.doctor import AvailabilityStatus, Doctor

SAMPLE_DOCTORS = [
    {
        'name': 'Dr. Aminul Islam',
        'email': 'aminul.islam@hospital.com',
        'speciality': 'General physician',
        'degree': 'MBBS, FCPS',
        'experience': '8 years',
        'location': 'Ibn Sina Medical College Hospital',
        'rating': 4.8,
        'consultation_fee': 800,
        'available_slots': 12,
        'availability_status': AvailabilityStatus.AVAILABLE.value,
    },
    {
        'name': 'Dr. Fatema Khatun',
        'email': 'fatema.khatun@hospital.com',
        'speciality': 'Gynecologist',
        'degree': 'MBBS, FCPS (Gynae)',
        'experience': '12 years',
        'location': 'Square Hospital',
        'rating': 4.9,
        'consultation_fee': 1200,
        'available_slots': 0,
        'availability_status': AvailabilityStatus.ON_LEAVE.value,
        'availability_reason': 'Annual leave',
    },
    {
        'name': 'Dr. Rafiq Ahmed',
        'email': 'rafiq.ahmed@hospital.com',
        'speciality': 'Dermatologist',
        'degree': 'MBBS, DDV',
        'experience': '6 years',
        'location': 'United Hospital',
        'rating': 4.6,
        'consultation_fee': 1000,
        'available_slots': 0,
        'availability_status': AvailabilityStatus.BUSY.value,
        'availability_reason': 'In surgery',
    },
    {
        'name': 'Dr. Nusrat Jahan',
        'email': 'nusrat.jahan@hospital.com',
        'speciality': 'Pediatrician',
        'degree': 'MBBS, DCH',
        'experience': '10 years',
        'location': 'Evercare Hospital',
        'rating': 4.7,
        'consultation_fee': 900,
        'available_slots': 8,
        'availability_status': AvailabilityStatus.AVAILABLE.value,
    },
]


def seed(db) -> int:
    existing = {email for (email,) in db.query(Doctor.email).all()}
    created = 0
    for data in SAMPLE_DOCTORS:
        if data['email'] in existing:
            continue
        db.add(Doctor(availability_updated_by='system', **data))
        created += 1
    db.commit()
    return created


def main() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = seed(db)
    except SQLAlchemyError as exc:
        db.rollback()
        print(f'Seeding failed: {exc}', file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()
    print(f'Added {created} sample doctor(s).')


if __name__ == '__main__':
    main()
