from pydantic import BaseModel, Field
from datetime import datetime


class DisputeCreate(BaseModel):
    order_id: int
    reason: str = Field(min_length=3, max_length=80)
    description: str | None = Field(default=None, max_length=1000)


class DisputeResolve(BaseModel):
    status: str
    resolution: str = Field(min_length=3, max_length=1000)
    refund_amount: float = Field(default=0.0, ge=0)


class DisputeOut(BaseModel):
    id: int
    order_id: int
    user_id: int
    reason: str
    description: str | None
    evidence_url: str | None
    status: str
    resolution: str | None
    refund_amount: float
    resolved_at: datetime | None
    created_at: datetime | None

    class Config:
        from_attributes = True
