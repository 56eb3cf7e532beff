import logging
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from physiobook.core import config

logger = logging.getLogger(__name__)

connect_args = {'check_same_thread': False} if config.DATABASE_URL.startswith('sqlite') else {}

engine = create_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_checked_tables: set[str] = set()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _patch_table(table_name: str, added_columns: list[tuple[str, str]], index_statements: list[str]) -> None:
    """Add missing columns and indexes to a table created by an older release.

    An index that cannot be built, for example a unique index over rows that
    already collide, is logged once and skipped until the next restart.
    """
    if table_name in _checked_tables:
        return

    with _schema_lock:
        if table_name in _checked_tables:
            return

        inspector = inspect(engine)
        if table_name not in inspector.get_table_names():
            _checked_tables.add(table_name)
            return

        existing_columns = {column['name'] for column in inspector.get_columns(table_name)}
        with engine.begin() as connection:
            for column_name, ddl in added_columns:
                if column_name not in existing_columns:
                    connection.execute(text(f'ALTER TABLE {table_name} ADD COLUMN {column_name} {ddl}'))

        for statement in index_statements:
            try:
                with engine.begin() as connection:
                    connection.execute(text(statement))
            except SQLAlchemyError:
                logger.exception('Could not apply schema change on %s: %s', table_name, statement)

        _checked_tables.add(table_name)


def ensure_availability_schema() -> None:
    _patch_table(
        'availabilities',
        [
            ('special_date', 'DATE'),
            ('is_available', 'BOOLEAN DEFAULT TRUE NOT NULL'),
        ],
        [
            'CREATE INDEX IF NOT EXISTS idx_availabilities_therapist_day ON availabilities(therapist_id, day_of_week)',
            'CREATE INDEX IF NOT EXISTS idx_availabilities_therapist_special ON availabilities(therapist_id, special_date)',
        ],
    )


def ensure_appointment_schema() -> None:
    _patch_table(
        'appointments',
        [
            ('consultation_type', 'VARCHAR(50)'),
            ('plan_id', 'INTEGER'),
        ],
        [
            'CREATE INDEX IF NOT EXISTS idx_appointments_therapist_date ON appointments(therapist_id, appointment_date)',
            # One live booking per therapist slot; cancelled rows free it again.
            'CREATE UNIQUE INDEX IF NOT EXISTS uq_appointments_active_slot '
            "ON appointments(therapist_id, appointment_date, time) WHERE status <> 'Cancelled'",
        ],
    )
