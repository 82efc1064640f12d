from pydantic import BaseModel, Field
from datetime import datetime


class UserOut(BaseModel):
    id: int
    email: str
    name: str | None
    phone: str | None
    address: str | None = None
    profile_picture: str | None = None
    role: str
    is_active: bool
    created_at: datetime | None

    class Config:
        from_attributes = True


class UserAdminUpdate(BaseModel):
    role: str | None = None
    is_active: bool | None = None


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=255)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6, max_length=128)


class PushTokenUpdate(BaseModel):
    push_token: str = Field(min_length=10, max_length=255)
