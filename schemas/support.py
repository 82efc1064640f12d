from pydantic import BaseModel, Field
from datetime import datetime


class TicketCreate(BaseModel):
    subject: str = Field(min_length=3, max_length=200)
    message: str = Field(min_length=3)


class TicketUpdate(BaseModel):
    status: str | None = None
    reply: str | None = Field(default=None, min_length=1)


class TicketOut(BaseModel):
    id: int
    user_id: int
    subject: str
    message: str
    status: str
    reply: str | None
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True
