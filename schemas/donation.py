from pydantic import BaseModel, Field
from datetime import date, datetime


class DonationCreate(BaseModel):
    medicine_name: str = Field(min_length=2, max_length=200)
    quantity: int = Field(ge=1, le=10000)
    expiry_date: date
    pickup_address: str | None = Field(default=None, max_length=255)
    note: str | None = Field(default=None, max_length=500)


class DonationOut(BaseModel):
    id: int
    user_id: int
    medicine_name: str
    quantity: int
    expiry_date: date
    pickup_address: str | None
    note: str | None
    status: str
    created_at: datetime | None

    class Config:
        from_attributes = True


class DonationStatusUpdate(BaseModel):
    status: str
