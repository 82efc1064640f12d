from pydantic import BaseModel, Field
from datetime import datetime


class RevenueAdjustmentCreate(BaseModel):
    amount: float
    reason: str = Field(min_length=3, max_length=300)
    order_id: int | None = None


class RevenueAdjustmentOut(BaseModel):
    id: int
    amount: float
    reason: str
    order_id: int | None
    created_by_id: int
    created_at: datetime | None

    class Config:
        from_attributes = True


class RevenueSummary(BaseModel):
    gross_revenue: float
    adjustments_total: float
    net_revenue: float
    delivered_orders: int
    adjustment_count: int
