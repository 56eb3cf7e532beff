"""Booking guard: resolves the parties of a new appointment and rejects double bookings.

Lookups run patient -> business -> staff, and the insert comes last, so a
failure anywhere in the chain leaves no appointment behind. The pre-insert
check catches the common case; the partial unique index on
``(therapist_id, appointment_date, time)`` catches two requests racing past it.
"""

import logging
from datetime import date

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from physiobook.auth.identity import CallerIdentity, PatientIdentity
from physiobook.core.errors import Conflict, InternalError, NotFound, ValidationError
from physiobook.models.appointment import ACTIVE_SLOT_INDEX, Appointment
from physiobook.models.business import BusinessEntity
from physiobook.models.physiotherapist import Physiotherapist
from physiobook.models.staff import Staff
from physiobook.schemas.appointment import CreateBookingRequest
from physiobook.services import appointment_service
from physiobook.services.date_utils import normalize_time

logger = logging.getLogger(__name__)

REQUIRED_BOOKING_FIELDS = ('appointment_date', 'time')

# SQLite names the columns instead of the index.
_SQLITE_SLOT_VIOLATION = 'appointments.therapist_id, appointments.appointment_date, appointments.time'


def validate_booking_fields(request: CreateBookingRequest) -> tuple[date, str]:
    missing = [field for field in REQUIRED_BOOKING_FIELDS if not getattr(request, field)]
    if missing:
        raise ValidationError(f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required.")

    try:
        appointment_date = date.fromisoformat(request.appointment_date)
    except ValueError as exc:
        raise ValidationError('appointment_date must use the YYYY-MM-DD format.') from exc

    try:
        slot_time = normalize_time(request.time)
    except ValueError as exc:
        raise ValidationError('time must use the 24-hour HH:MM format.') from exc

    return appointment_date, slot_time


def is_slot_conflict(exc: IntegrityError) -> bool:
    """True when ``exc`` was raised by the one-live-booking-per-slot index."""
    constraint_name = getattr(getattr(exc.orig, 'diag', None), 'constraint_name', None)
    if constraint_name:
        return constraint_name == ACTIVE_SLOT_INDEX

    message = str(exc.orig)
    return ACTIVE_SLOT_INDEX in message or _SQLITE_SLOT_VIOLATION in message


def resolve_patient_id(identity: CallerIdentity) -> int:
    if not isinstance(identity, PatientIdentity):
        raise NotFound('No patient found for the provided identity.')
    return identity.patient_id


def resolve_business_id(db: Session, therapist_id: int) -> int:
    therapist = db.query(Physiotherapist).filter(Physiotherapist.id == therapist_id).first()
    if therapist is None:
        raise NotFound('No physiotherapist found for the provided ID.')

    business_id = db.query(BusinessEntity.id).filter(BusinessEntity.id == therapist.business_id).scalar()
    if business_id is None:
        raise NotFound('No business found for the selected physiotherapist.')
    return business_id


def resolve_staff_id(db: Session, business_id: int) -> int:
    # TODO: spread appointments across staff instead of always taking the lowest id.
    staff_id = db.query(Staff.id).filter(Staff.business_id == business_id).order_by(Staff.id.asc()).limit(1).scalar()
    if staff_id is None:
        raise NotFound('No staff found for the business associated with this therapist.')
    return staff_id


def create_booking(db: Session, request: CreateBookingRequest, identity: CallerIdentity) -> Appointment:
    appointment_date, slot_time = validate_booking_fields(request)
    patient_id = resolve_patient_id(identity)
    therapist_id = request.therapist_id

    try:
        business_id = resolve_business_id(db, therapist_id)
        staff_id = resolve_staff_id(db, business_id)

        if appointment_service.find_active_appointment(db, therapist_id, appointment_date, slot_time):
            logger.warning('Rejected booking for therapist %s on %s %s: slot taken', therapist_id, appointment_date, slot_time)
            raise Conflict('This time slot is already booked.')

        return appointment_service.create_appointment(
            db,
            patient_id=patient_id,
            therapist_id=therapist_id,
            staff_id=staff_id,
            appointment_date=appointment_date,
            time=slot_time,
            consultation_type=request.consultation_type,
        )
    except IntegrityError as exc:
        db.rollback()
        if not is_slot_conflict(exc):
            logger.exception('Integrity error creating appointment for therapist %s', therapist_id)
            raise InternalError('Unable to create appointment.') from exc
        logger.warning('Appointment booking conflict for therapist %s on %s %s: %s', therapist_id, appointment_date, slot_time, exc)
        raise Conflict('This time slot is already booked.') from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error creating appointment for therapist %s', therapist_id)
        raise InternalError('Unable to create appointment.') from exc
