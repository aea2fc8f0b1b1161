import os

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'medbook-test-signing-key-0123456789abcdef')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from medbook.auth import jwt_handler  # noqa: E402
from medbook.auth.dependencies import Identity  # noqa: E402
from medbook.database import Base, get_db  # noqa: E402
from medbook.models.appointment import Appointment  # noqa: E402
from medbook.models.doctor import AvailabilityStatus, Doctor  # noqa: E402
from medbook.models.user import User  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_user(db_session):
    def _make_user(email: str = 'patient@example.com', role: str = 'user', name: str = 'Pat Patient') -> User:
        user = User(email=email, role=role, name=name)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_doctor(db_session):
    counter = {'value': 0}

    def _make_doctor(
        is_active: bool = True,
        status: AvailabilityStatus = AvailabilityStatus.AVAILABLE,
        available_slots: int = 3,
        name: str | None = None,
    ) -> Doctor:
        counter['value'] += 1
        doctor = Doctor(
            name=name or f'Dr. Example {counter["value"]}',
            email=f'doctor{counter["value"]}@hospital.com',
            speciality='General physician',
            image=f'https://cdn.example.com/doctor{counter["value"]}.png',
            is_active=is_active,
            availability_status=status.value,
            available_slots=available_slots,
        )
        db_session.add(doctor)
        db_session.commit()
        db_session.refresh(doctor)
        return doctor

    return _make_doctor


@pytest.fixture
def patient(make_user) -> User:
    return make_user()


@pytest.fixture
def admin(make_user) -> User:
    return make_user(email='nurse@hospital.com', role='admin', name='Head Nurse')


def identity_for(user: User) -> Identity:
    return Identity(user_id=user.id, email=user.email, name=user.name or '', role=user.role)


@pytest.fixture
def patient_identity(patient) -> Identity:
    return identity_for(patient)


@pytest.fixture
def admin_identity(admin) -> Identity:
    return identity_for(admin)


@pytest.fixture
def store_appointment(db_session):
    def _store_appointment(user: User, doctor: Doctor, slot_date, slot_time='10:00 AM', status='upcoming') -> Appointment:
        appointment = Appointment(
            user_id=user.id,
            doctor_id=doctor.id,
            slot_date=slot_date,
            slot_time=slot_time,
            status=status,
        )
        db_session.add(appointment)
        db_session.commit()
        db_session.refresh(appointment)
        return appointment

    return _store_appointment


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        token = jwt_handler.create_access_token(subject=user.email, role=user.role)
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers


@pytest.fixture
def client(db_session, monkeypatch: pytest.MonkeyPatch):
    from medbook.main import app

    for module in ('doctor_routes', 'appointment_routes', 'admin_routes'):
        monkeypatch.setattr(f'medbook.routes.{module}.ensure_database_ready', lambda: None)

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
