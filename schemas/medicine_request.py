from pydantic import BaseModel, Field
from datetime import datetime


class MedicineRequestCreate(BaseModel):
    medicine_name: str = Field(min_length=2, max_length=200)
    quantity: int = Field(default=1, ge=1, le=1000)
    note: str | None = Field(default=None, max_length=500)


class MedicineRequestOut(BaseModel):
    id: int
    user_id: int
    medicine_name: str
    quantity: int
    note: str | None
    status: str
    staff_note: str | None
    created_at: datetime | None

    class Config:
        from_attributes = True


class MedicineRequestStatusUpdate(BaseModel):
    status: str
    staff_note: str | None = Field(default=None, max_length=500)
