from pydantic import BaseModel, Field
from datetime import datetime


class PointEntryOut(BaseModel):
    id: int
    points: int
    reason: str
    order_id: int | None
    created_at: datetime | None

    class Config:
        from_attributes = True


class PointsBalanceOut(BaseModel):
    user_id: int
    balance: int
    history: list[PointEntryOut] = []


class PointsRedeem(BaseModel):
    points: int = Field(gt=0)
    reason: str = Field(default="Redeemed", max_length=200)


class PointsAdjust(BaseModel):
    user_id: int
    points: int
    reason: str = Field(min_length=3, max_length=200)
