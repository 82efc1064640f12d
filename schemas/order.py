from pydantic import BaseModel, Field
from datetime import datetime


class CheckoutRequest(BaseModel):
    delivery_address: str | None = Field(default=None, max_length=255)
    payment_method: str | None = None
    # medicine_id -> uploaded prescription URL
    prescriptions: dict[int, str] = {}


class OrderItemOut(BaseModel):
    id: int
    medicine_id: int
    name: str
    quantity: int
    price: float
    rx_required: bool
    prescription_file: str | None = None

    class Config:
        from_attributes = True


class OrderOut(BaseModel):
    id: int
    order_uid: str
    user_id: int
    status: str
    payment_status: str
    total: float
    payment_method: str | None
    delivery_address: str | None
    points_awarded: int = 0
    last_status_updated_by_role: str | None = None
    last_status_updated_at: datetime | None = None
    items: list[OrderItemOut] = []
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True


class OrderStatusUpdate(BaseModel):
    status: str
