"""Authentication and account Pydantic v2 schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

ROLE_PATTERN = "^(STUDENT|EXPERT|ADMIN)$"


class TokenResponse(BaseModel):
    """JWT access token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token expiration in seconds")


class UserCreateRequest(BaseModel):
    """Request to create a new account."""

    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str | None = Field(default=None, max_length=200)
    role: str = Field(default="STUDENT", pattern=ROLE_PATTERN)


class UserResponse(BaseModel):
    """Account information returned to the account itself."""

    id: int
    username: str
    email: str
    full_name: str | None = None
    role: str
    is_active: bool
    created_at: datetime
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}
