from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from medbook.core import config
from medbook.core.errors import InternalError


connect_args = {'check_same_thread': False} if config.DATABASE_URL.startswith('sqlite') else {}

engine = create_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

ACTIVE_SLOT_INDEX_NAME = 'uq_appointments_active_slot'

_schema_lock = Lock()
_doctor_schema_checked = False
_appointment_schema_checked = False


def ensure_doctor_schema() -> None:
    global _doctor_schema_checked

    if _doctor_schema_checked:
        return

    with _schema_lock:
        if _doctor_schema_checked:
            return

        inspector = inspect(engine)

        if 'doctors' not in inspector.get_table_names():
            _doctor_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('doctors')}
        migration_steps = [
            ('is_active', 'ALTER TABLE doctors ADD COLUMN is_active BOOLEAN NOT NULL DEFAULT TRUE'),
            (
                'availability_status',
                "ALTER TABLE doctors ADD COLUMN availability_status VARCHAR NOT NULL DEFAULT 'available'",
            ),
            ('available_slots', 'ALTER TABLE doctors ADD COLUMN available_slots INTEGER NOT NULL DEFAULT 0'),
            ('availability_reason', "ALTER TABLE doctors ADD COLUMN availability_reason VARCHAR DEFAULT ''"),
            ('expected_back_time', 'ALTER TABLE doctors ADD COLUMN expected_back_time TIMESTAMP'),
            ('availability_updated_at', 'ALTER TABLE doctors ADD COLUMN availability_updated_at TIMESTAMP'),
            ('availability_updated_by', "ALTER TABLE doctors ADD COLUMN availability_updated_by VARCHAR DEFAULT 'system'"),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_doctors_bookable ON doctors(is_active, availability_status)')
            )

        _doctor_schema_checked = True


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(engine)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('complaint', "ALTER TABLE appointments ADD COLUMN complaint VARCHAR DEFAULT ''"),
            ('updated_at', 'ALTER TABLE appointments ADD COLUMN updated_at TIMESTAMP'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_user_created ON appointments(user_id, created_at)')
            )
            # Both SQLite and Postgres accept partial unique indexes with this syntax.
            connection.execute(
                text(
                    f'CREATE UNIQUE INDEX IF NOT EXISTS {ACTIVE_SLOT_INDEX_NAME} '
                    'ON appointments(doctor_id, slot_date, slot_time) '
                    "WHERE status IN ('pending', 'upcoming')"
                )
            )

        _appointment_schema_checked = True


def ensure_database_ready() -> None:
    try:
        ensure_doctor_schema()
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise InternalError('Database unavailable. Verify DATABASE_URL and database credentials.') from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
