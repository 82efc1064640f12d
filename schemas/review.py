from pydantic import BaseModel, Field
from datetime import datetime


class ReviewCreate(BaseModel):
    medicine_id: int
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)


class ReviewOut(BaseModel):
    id: int
    user_id: int
    medicine_id: int
    rating: int
    comment: str | None
    created_at: datetime | None

    class Config:
        from_attributes = True


class MedicineReviewsOut(BaseModel):
    medicine_id: int
    average_rating: float | None
    count: int
    reviews: list[ReviewOut] = []


class ServiceReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)


class ServiceReviewOut(BaseModel):
    id: int
    user_id: int
    rating: int
    comment: str | None
    created_at: datetime | None

    class Config:
        from_attributes = True


class ServiceReviewSummary(BaseModel):
    count: int
    average_rating: float | None
    distribution: dict[int, int]
