from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from physiobook.auth.dependencies import get_current_identity
from physiobook.auth.identity import CallerIdentity
from physiobook.database import get_db
from physiobook.routes import common
from physiobook.schemas.appointment import (
    AppointmentDetailResponse,
    AppointmentResponse,
    CreateBookingRequest,
)
from physiobook.services import appointment_service, booking_service

router = APIRouter(tags=['booking'])


@router.post('/appointments', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateBookingRequest,
    identity: CallerIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    return booking_service.create_booking(db, data, identity)


@router.get('/appointments', response_model=list[AppointmentDetailResponse])
def list_appointments(
    identity: CallerIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    return appointment_service.list_appointments_for_identity(db, identity)


@router.get('/appointments/{appointment_id}', response_model=AppointmentDetailResponse)
def get_appointment(
    appointment_id: int,
    identity: CallerIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    return appointment_service.get_appointment_for_identity(db, identity, appointment_id)


@router.patch('/appointments/{appointment_id}/cancel', response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    identity: CallerIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    return appointment_service.cancel_appointment(db, identity, appointment_id)


@router.patch('/appointments/{appointment_id}/confirm', response_model=AppointmentResponse)
def confirm_appointment(
    appointment_id: int,
    identity: CallerIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    common.ensure_database_ready()

    return appointment_service.confirm_appointment(db, identity, appointment_id)
