import re
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_times(times: list[str]) -> list[str]:
    cleaned = []
    for t in times:
        t = t.strip()
        if not _TIME_RE.match(t):
            raise ValueError(f"Invalid time '{t}', expected HH:MM")
        if t not in cleaned:
            cleaned.append(t)
    return sorted(cleaned)


class ReminderCreate(BaseModel):
    medicine_id: int | None = None
    medicine_name: str | None = Field(default=None, max_length=200)
    dosage: str = Field(min_length=1, max_length=120)
    times: list[str] = Field(min_length=1, max_length=12)
    start_date: date | None = None
    end_date: date | None = None
    quantity_units: int = Field(default=30, ge=1, le=2000)
    units_per_dose: int = Field(default=1, ge=1, le=10)

    @field_validator("times")
    @classmethod
    def validate_times(cls, v):
        return _check_times(v)

    @model_validator(mode="after")
    def validate_source(self):
        if self.medicine_id is None and not (self.medicine_name or "").strip():
            raise ValueError("Either medicine_id or medicine_name is required")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ReminderUpdate(BaseModel):
    dosage: str | None = Field(default=None, min_length=1, max_length=120)
    times: list[str] | None = Field(default=None, min_length=1, max_length=12)
    end_date: date | None = None
    quantity_units: int | None = Field(default=None, ge=1, le=2000)
    units_per_dose: int | None = Field(default=None, ge=1, le=10)
    is_active: bool | None = None

    @field_validator("times")
    @classmethod
    def validate_times(cls, v):
        if v is None:
            return v
        return _check_times(v)


class ReminderOut(BaseModel):
    id: int
    medicine_id: int | None
    medicine_name: str
    dosage: str
    times: list[str]
    start_date: date
    end_date: date | None
    quantity_units: int
    units_per_dose: int
    is_active: bool
    days_left: int
    created_at: datetime | None
