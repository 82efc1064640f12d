from pydantic import BaseModel
from datetime import datetime


class NotificationOut(BaseModel):
    id: int
    type: str
    title: str
    body: str
    has_action: bool
    is_read: bool
    created_at: datetime | None

    class Config:
        from_attributes = True


class ReadAllResult(BaseModel):
    updated: int
