# src/schema/auth.py
from typing import Optional

from pydantic import BaseModel

from src.schema.base import BaseResponse


class Credentials(BaseModel):
    email: str
    password: str


class SignUpRequest(Credentials):
    display_name: str = ""


class PasswordResetRequest(BaseModel):
    email: str


class AuthUser(BaseModel):
    """User returned by the identity provider"""
    uid: str
    email: str
    display_name: Optional[str] = None
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class AuthResponse(BaseResponse[AuthUser]):
    pass
