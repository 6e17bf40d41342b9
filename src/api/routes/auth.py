# src/api/routes/auth.py
from fastapi import APIRouter, Depends

from src.api.dependencies.identity import get_identity_client
from src.schema.auth import (
    AuthResponse,
    Credentials,
    PasswordResetRequest,
    SignUpRequest,
)
from src.schema.base import BaseResponse
from src.services.identity import IdentityClient

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/sign-in", response_model=AuthResponse)
async def sign_in(
    request: Credentials,
    identity: IdentityClient = Depends(get_identity_client),
) -> AuthResponse:
    user = await identity.sign_in(request.email, request.password)
    return AuthResponse(data=user, message="Signed in")


@router.post("/sign-up", response_model=AuthResponse)
async def sign_up(
    request: SignUpRequest,
    identity: IdentityClient = Depends(get_identity_client),
) -> AuthResponse:
    user = await identity.sign_up(
        request.email, request.password, request.display_name
    )
    return AuthResponse(data=user, message="User registered")


@router.post("/password-reset", response_model=BaseResponse)
async def reset_password(
    request: PasswordResetRequest,
    identity: IdentityClient = Depends(get_identity_client),
) -> BaseResponse:
    await identity.reset_password(request.email)
    return BaseResponse(message="Password reset email sent")
