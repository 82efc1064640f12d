from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

BLOOD_GROUPS = {"A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"}


class MedicalProfileUpdate(BaseModel):
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=10)
    blood_group: str | None = None
    height_cm: float | None = Field(default=None, gt=0, lt=300)
    weight_kg: float | None = Field(default=None, gt=0, lt=700)
    allergies: str | None = None
    conditions: str | None = None
    current_medications: str | None = None
    emergency_contact_name: str | None = Field(default=None, max_length=100)
    emergency_contact_phone: str | None = Field(default=None, max_length=20)

    @field_validator("blood_group")
    @classmethod
    def validate_blood_group(cls, v):
        if v is None:
            return v
        v = v.strip().upper()
        if v not in BLOOD_GROUPS:
            raise ValueError("Invalid blood group")
        return v


class MedicalProfileOut(BaseModel):
    id: int
    user_id: int
    date_of_birth: date | None
    gender: str | None
    blood_group: str | None
    height_cm: float | None
    weight_kg: float | None
    bmi: float | None = None
    allergies: str | None
    conditions: str | None
    current_medications: str | None
    emergency_contact_name: str | None
    emergency_contact_phone: str | None
    updated_at: datetime | None
