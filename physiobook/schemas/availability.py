from datetime import date

from pydantic import BaseModel, field_validator, model_validator

from physiobook.services.date_utils import DAYS_OF_WEEK, get_day_of_week, normalize_time


class MaterializedSlot(BaseModel):
    date: str
    day_of_week: str
    morning: list[str] = []
    afternoon: list[str] = []
    unavailable: bool = True


class AvailabilityRuleRequest(BaseModel):
    day_of_week: str
    start_time: str | None = None
    end_time: str | None = None
    is_available: bool = True
    special_date: date | None = None

    @field_validator('day_of_week')
    @classmethod
    def validate_day_of_week(cls, value: str) -> str:
        normalized = value.strip().capitalize()
        if normalized not in DAYS_OF_WEEK:
            raise ValueError('Day of week must be a weekday name such as Monday.')
        return normalized

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_clock_time(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        try:
            return normalize_time(value)
        except ValueError as exc:
            raise ValueError('Times must use the 24-hour HH:MM format.') from exc

    @model_validator(mode='after')
    def validate_rule(self) -> 'AvailabilityRuleRequest':
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValueError('Start time must be before end time.')
        if self.special_date and get_day_of_week(self.special_date) != self.day_of_week:
            raise ValueError('Special date does not fall on the given day of week.')
        return self


class AvailabilityRuleResponse(BaseModel):
    id: int
    therapist_id: int
    day_of_week: str
    start_time: str | None = None
    end_time: str | None = None
    is_available: bool
    special_date: date | None = None

    class Config:
        from_attributes = True


class AvailabilityRuleResult(BaseModel):
    rule: AvailabilityRuleRequest
    status: str
    id: int | None = None
    error: str | None = None


class AvailabilityBatchResponse(BaseModel):
    message: str
    success_count: int
    error_count: int
    results: list[AvailabilityRuleResult]
