# teamcal/core/users/schemas.py

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .models import Role


class UserOut(BaseModel):
    """Публичное представление пользователя (без служебных полей)."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: Role


class UserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class UserNameOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class UsersListOut(BaseModel):
    users: List[UserOut] = Field(default_factory=list)


__all__: list[str] = ["UserOut", "UserBrief", "UserNameOut", "UsersListOut"]
