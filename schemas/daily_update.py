from pydantic import BaseModel, Field
from datetime import datetime


class DailyUpdateCreate(BaseModel):
    title: str = Field(min_length=2, max_length=200)
    body: str = Field(min_length=2)
    category: str = "health_tip"


class DailyUpdateOut(BaseModel):
    id: int
    title: str
    body: str
    category: str
    author_id: int
    created_at: datetime | None

    class Config:
        from_attributes = True
