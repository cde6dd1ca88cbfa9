# teamcal/core/auth/schemas.py

from __future__ import annotations

from pydantic import BaseModel, Field

from teamcal.core.users.schemas import UserOut


class LoginRequest(BaseModel):
    """Логин по email, без пароля."""
    # Необязательное, чтобы вернуть понятное "Email is required" вместо общей 400
    email: str | None = Field(None, description="Email of an existing user")


class UserEnvelope(BaseModel):
    user: UserOut | None = None


class SuccessOut(BaseModel):
    success: bool = True
