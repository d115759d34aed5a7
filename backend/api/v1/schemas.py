"""Request and response payloads shared by the v1 routers."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_FULL_NAME_LENGTH = 120
USERNAME_PATTERN = r"^[a-z0-9_.]+$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    username: str
    email: str
    full_name: str
    avatar_url: str
    cover_image_url: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RegisterRequest(CamelModel):
    full_name: str = Field(min_length=1, max_length=MAX_FULL_NAME_LENGTH)
    email: EmailStr
    username: str = Field(min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("full_name", mode="before")
    @classmethod
    def _strip_full_name(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("username", mode="before")
    @classmethod
    def _lower_username(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class LoginRequest(CamelModel):
    username: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class RefreshRequest(CamelModel):
    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=8, max_length=128)


class UpdateAccountRequest(CamelModel):
    full_name: str | None = Field(default=None, max_length=MAX_FULL_NAME_LENGTH)
    email: str | None = Field(default=None, max_length=255)


class TokenData(CamelModel):
    access_token: str
    refresh_token: str


class LoginData(TokenData):
    user: UserResponse


class EmptyData(BaseModel):
    pass
