from datetime import date

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from physiobook.database import ensure_appointment_schema, ensure_availability_schema
from physiobook.services.date_utils import utc_today


def ensure_database_ready() -> None:
    try:
        ensure_availability_schema()
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc


def get_today() -> date:
    return utc_today()
