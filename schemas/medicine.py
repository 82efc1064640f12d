from pydantic import BaseModel, Field
from datetime import datetime


class MedicineCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    generic_name: str | None = None
    category: str | None = None
    manufacturer: str | None = None
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    rx_required: bool = False
    description: str | None = None


class MedicineUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    generic_name: str | None = None
    category: str | None = None
    manufacturer: str | None = None
    price: float | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    rx_required: bool | None = None
    description: str | None = None


class MedicineOut(BaseModel):
    id: int
    name: str
    generic_name: str | None
    category: str | None
    manufacturer: str | None
    price: float
    stock: int
    rx_required: bool
    description: str | None
    image_url: str | None
    created_at: datetime | None

    class Config:
        from_attributes = True
