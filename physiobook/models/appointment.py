"""Appointment model definitions."""

from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, Index, String, func, text
from physiobook.database import Base


STATUS_PENDING = 'pending'
STATUS_ONGOING = 'Ongoing'
STATUS_CANCELLED = 'Cancelled'

ACTIVE_SLOT_INDEX = 'uq_appointments_active_slot'

ALLOWED_STATUS_TRANSITIONS = {
    STATUS_PENDING: {STATUS_ONGOING, STATUS_CANCELLED},
    STATUS_ONGOING: set(),
    STATUS_CANCELLED: set(),
}


class Appointment(Base):
    """Represents a booking of one therapist slot by a patient."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    therapist_id = Column(Integer, ForeignKey("physiotherapists.id"), nullable=False)
    staff_id = Column(Integer, ForeignKey("staffs.id"), nullable=False)
    appointment_date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)
    consultation_type = Column(String(50))
    status = Column(String(50), nullable=False, default=STATUS_PENDING)
    plan_id = Column(Integer)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index('idx_appointments_therapist_date', 'therapist_id', 'appointment_date'),
        Index(
            ACTIVE_SLOT_INDEX,
            'therapist_id', 'appointment_date', 'time',
            unique=True,
            postgresql_where=text("status <> 'Cancelled'"),
            sqlite_where=text("status <> 'Cancelled'"),
        ),
    )
