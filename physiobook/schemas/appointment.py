from datetime import date

from pydantic import BaseModel, field_validator


class CreateBookingRequest(BaseModel):
    therapist_id: int
    appointment_date: str | None = None
    time: str | None = None
    consultation_type: str | None = None

    @field_validator('appointment_date', 'time', 'consultation_type')
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    therapist_id: int
    staff_id: int
    appointment_date: date
    time: str
    consultation_type: str | None = None
    status: str
    plan_id: int | None = None

    class Config:
        from_attributes = True


class AppointmentDetailResponse(AppointmentResponse):
    patient_name: str = 'Unknown Patient'
    gender: str = 'Unknown'
    therapist_name: str = 'Unknown Therapist'
    staff_name: str = 'Unknown Staff'
