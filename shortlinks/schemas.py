from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Generic, Optional, List, TypeVar
from datetime import datetime, timezone

T = TypeVar("T")

class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None

class LinkCreate(BaseModel):
    # Plain str: bare domains like "example.com" are accepted and validated by the service
    original_url: str = Field(..., min_length=1, max_length=2048)
    custom_code: Optional[str] = Field(None, max_length=50, pattern="^[a-zA-Z0-9_-]+$")
    title: Optional[str] = Field(None, max_length=255)
    expires_at: Optional[datetime] = None

    @field_validator("custom_code", "title", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("expires_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

class LinkUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)

class LinkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    original_url: str
    short_code: str
    short_url: str
    title: str
    created_at: Optional[datetime]
    expires_at: Optional[datetime]
    clicks: int
    last_clicked_at: Optional[datetime]

class LinkStatsResponse(BaseModel):
    url: LinkResponse
    total_clicks: int
    last_clicked: Optional[datetime]

class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    created_at: Optional[datetime]
    is_active: bool

class RegisterRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = Field(None, max_length=255)

class LoginRequest(BaseModel):
    email: str
    password: str

class ForgotPasswordRequest(BaseModel):
    email: str

class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str

class AuthPayload(BaseModel):
    user: AccountOut
    token: str

class ResetTokenPayload(BaseModel):
    reset_token: str

class TokenClaims(BaseModel):
    user_id: int
    email: str

class MessagePayload(BaseModel):
    message: str

LinkList = List[LinkResponse]
