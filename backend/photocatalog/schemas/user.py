"""
User Schemas
Pydantic models for registration, login and password management.

Fields are optional here so that handlers can answer a missing or empty value
with their own 400 message.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(WireModel):
    login: Optional[str] = None
    password: Optional[str] = None
    display_name: Optional[str] = Field(None, alias="displayName")


class LoginRequest(WireModel):
    login: Optional[str] = None
    password: Optional[str] = None


class ChangePasswordRequest(WireModel):
    old_password: Optional[str] = Field(None, alias="oldPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")


class AdminResetPasswordRequest(WireModel):
    login: Optional[str] = None
    new_password: Optional[str] = Field(None, alias="newPassword")


class MessageResponse(WireModel):
    message: str


class RegisterResponse(MessageResponse):
    user_id: int = Field(..., alias="userId")


class LoginResponse(MessageResponse):
    token: str


class TokenClaims(WireModel):
    """Identity attached to a request by the token guard."""
    id: int
    login: str
    iat: int
    exp: int
