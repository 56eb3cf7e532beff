"""Appointment record access.

Appointments are never deleted. Payment confirmation moves them to ``Ongoing``
and cancellation to ``Cancelled``; a cancelled row no longer holds its slot.
"""

import logging
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from physiobook.auth.identity import (
    BusinessIdentity,
    CallerIdentity,
    PatientIdentity,
    StaffIdentity,
    TherapistIdentity,
)
from physiobook.core.errors import Conflict, Forbidden, InternalError, NotFound, ValidationError
from physiobook.models.appointment import (
    ALLOWED_STATUS_TRANSITIONS,
    STATUS_CANCELLED,
    STATUS_ONGOING,
    STATUS_PENDING,
    Appointment,
)
from physiobook.models.patient import Patient
from physiobook.models.physiotherapist import Physiotherapist
from physiobook.models.staff import Staff
from physiobook.models.user import User
from physiobook.schemas.appointment import AppointmentDetailResponse, AppointmentResponse

logger = logging.getLogger(__name__)


def create_appointment(
    db: Session,
    *,
    patient_id: int,
    therapist_id: int,
    staff_id: int,
    appointment_date: date,
    time: str,
    consultation_type: str | None = None,
) -> Appointment:
    """Insert a pending appointment. Integrity errors are left to the caller."""
    appointment = Appointment(
        patient_id=patient_id,
        therapist_id=therapist_id,
        staff_id=staff_id,
        appointment_date=appointment_date,
        time=time,
        consultation_type=consultation_type,
        status=STATUS_PENDING,
        plan_id=None,
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)

    logger.info('Created appointment %s for therapist %s on %s %s', appointment.id, therapist_id, appointment_date, time)
    return appointment


def find_active_appointment(db: Session, therapist_id: int, appointment_date: date, time: str) -> Appointment | None:
    return db.query(Appointment).filter(
        Appointment.therapist_id == therapist_id,
        Appointment.appointment_date == appointment_date,
        Appointment.time == time,
        Appointment.status != STATUS_CANCELLED,
    ).first()


def list_booked_times(db: Session, therapist_id: int, dates: list[date]) -> dict[str, set[str]]:
    """Map each ISO date to the times already held by a non-cancelled appointment."""
    rows = db.query(Appointment.appointment_date, Appointment.time).filter(
        Appointment.therapist_id == therapist_id,
        Appointment.appointment_date.in_(dates),
        Appointment.status != STATUS_CANCELLED,
    ).all()

    booked: dict[str, set[str]] = {}
    for appointment_date, appointment_time in rows:
        booked.setdefault(appointment_date.isoformat(), set()).add(appointment_time)
    return booked


def _visible_to(identity: CallerIdentity):
    if isinstance(identity, PatientIdentity):
        return Appointment.patient_id == identity.patient_id
    if isinstance(identity, TherapistIdentity):
        return Appointment.therapist_id == identity.therapist_id
    if isinstance(identity, StaffIdentity):
        return Appointment.staff_id == identity.staff_id
    if isinstance(identity, BusinessIdentity):
        return Physiotherapist.business_id == identity.business_id
    raise Forbidden('Only authorized users can access this.')


def _detailed_query(db: Session):
    patient_user = aliased(User)
    therapist_user = aliased(User)
    staff_user = aliased(User)

    return (
        db.query(Appointment, patient_user.name, Patient.gender, therapist_user.name, staff_user.name)
        .outerjoin(Patient, Patient.id == Appointment.patient_id)
        .outerjoin(patient_user, patient_user.id == Patient.user_id)
        .outerjoin(Physiotherapist, Physiotherapist.id == Appointment.therapist_id)
        .outerjoin(therapist_user, therapist_user.id == Physiotherapist.user_id)
        .outerjoin(Staff, Staff.id == Appointment.staff_id)
        .outerjoin(staff_user, staff_user.id == Staff.user_id)
    )


def _to_detail(row) -> AppointmentDetailResponse:
    appointment, patient_name, gender, therapist_name, staff_name = row
    base = AppointmentResponse.model_validate(appointment)
    return AppointmentDetailResponse(
        **base.model_dump(),
        patient_name=patient_name or 'Unknown Patient',
        gender=gender or 'Unknown',
        therapist_name=therapist_name or 'Unknown Therapist',
        staff_name=staff_name or 'Unknown Staff',
    )


def list_appointments_for_identity(db: Session, identity: CallerIdentity) -> list[AppointmentDetailResponse]:
    try:
        rows = _detailed_query(db).filter(_visible_to(identity)).order_by(
            Appointment.appointment_date.asc(),
            Appointment.time.asc(),
            Appointment.id.asc(),
        ).all()
    except SQLAlchemyError as exc:
        logger.exception('Unable to fetch appointments for user %s', identity.user_id)
        raise InternalError() from exc

    return [_to_detail(row) for row in rows]


def get_appointment_for_identity(db: Session, identity: CallerIdentity, appointment_id: int) -> AppointmentDetailResponse:
    try:
        row = _detailed_query(db).filter(
            Appointment.id == appointment_id,
            _visible_to(identity),
        ).first()
    except SQLAlchemyError as exc:
        logger.exception('Unable to fetch appointment %s', appointment_id)
        raise InternalError() from exc

    if row is None:
        raise NotFound('Appointment not found.')
    return _to_detail(row)


def transition_appointment_status(db: Session, appointment: Appointment, new_status: str) -> Appointment:
    if new_status not in ALLOWED_STATUS_TRANSITIONS:
        raise ValidationError(f'Unknown appointment status: {new_status}.')

    current_status = appointment.status or STATUS_PENDING
    if new_status not in ALLOWED_STATUS_TRANSITIONS.get(current_status, set()):
        raise Conflict(f'Cannot change appointment status from {current_status} to {new_status}.')

    try:
        appointment.status = new_status
        db.commit()
        db.refresh(appointment)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to move appointment %s to %s', appointment.id, new_status)
        raise InternalError() from exc

    logger.info('Appointment %s moved from %s to %s', appointment.id, current_status, new_status)
    return appointment


def cancel_appointment(db: Session, identity: CallerIdentity, appointment_id: int) -> Appointment:
    if not isinstance(identity, PatientIdentity):
        raise Forbidden('Only patients can cancel their own appointments.')

    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise NotFound('Appointment not found.')
    if appointment.patient_id != identity.patient_id:
        raise Forbidden('Only the patient who booked this appointment can cancel it.')

    return transition_appointment_status(db, appointment, STATUS_CANCELLED)


def confirm_appointment(db: Session, identity: CallerIdentity, appointment_id: int) -> Appointment:
    if not isinstance(identity, StaffIdentity):
        raise Forbidden('Only staff can confirm appointments.')

    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise NotFound('Appointment not found.')
    if appointment.staff_id != identity.staff_id:
        raise Forbidden('Only the staff member assigned to this appointment can confirm it.')

    return transition_appointment_status(db, appointment, STATUS_ONGOING)
