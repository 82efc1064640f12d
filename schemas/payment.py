from pydantic import BaseModel, Field
from datetime import datetime


class PaymentCreate(BaseModel):
    order_id: int
    amount: float = Field(gt=0)
    method: str
    reference: str | None = Field(default=None, max_length=120)


class PaymentOut(BaseModel):
    id: int
    transaction_id: str
    order_id: int
    user_id: int
    amount: float
    method: str
    status: str
    reference: str | None
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True
