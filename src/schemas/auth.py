"""Account and profile schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRegister(BaseModel):
    """Sign up with email and password; profile fields are optional."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=72)
    name: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=255)


class UserLogin(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=72)


class ProfileUpdate(BaseModel):
    """Patch the current user's profile."""

    name: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=255)
    dietary_preference: str | None = Field(None, max_length=100)
    budget_range: float | None = Field(None, ge=0)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None
    location: str | None
    dietary_preference: str | None = None
    budget_range: float | None = None


class AuthResponse(BaseModel):
    """Issued token plus the user it belongs to."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserResponse
