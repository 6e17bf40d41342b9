# src/services/identity.py
"""
Client for the external identity provider (Firebase Identity Toolkit REST API).

Only email and password accounts are supported. The provider owns the
accounts; this module signs users in and keeps track of who is signed in.
"""
import re

from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from src.logging_config import app_logger
from src.schema.auth import AuthUser
from src.settings import settings

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

# Provider error messages mapped to stable auth codes
PROVIDER_ERROR_CODES = {
    "INVALID_EMAIL": "auth/invalid-email",
    "USER_DISABLED": "auth/user-disabled",
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
    "EMAIL_EXISTS": "auth/email-already-in-use",
    "OPERATION_NOT_ALLOWED": "auth/operation-not-allowed",
    "WEAK_PASSWORD": "auth/weak-password",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "EXPIRED_OOB_CODE": "auth/expired-action-code",
    "INVALID_OOB_CODE": "auth/invalid-action-code",
}

AUTH_ERROR_MESSAGES = {
    "auth/invalid-email": "The email address is not valid",
    "auth/missing-email": "The email address is required",
    "auth/missing-password": "The password is required",
    "auth/user-disabled": "This account has been disabled",
    "auth/user-not-found": "There is no account with this email address",
    "auth/wrong-password": "Wrong password",
    "auth/invalid-credential": "Invalid credentials. Check your email and password",
    "auth/email-already-in-use": "This email address is already registered",
    "auth/operation-not-allowed": "Operation not allowed",
    "auth/weak-password": "The password must be at least 6 characters long",
    "auth/too-many-requests": "Too many failed attempts. Try again later",
    "auth/network-request-failed": "Connection error. Check your network",
    "auth/invalid-action-code": "The recovery code is invalid or has expired",
    "auth/expired-action-code": "The recovery code has expired",
}
DEFAULT_AUTH_ERROR_MESSAGE = "The operation failed. Please try again"


def get_auth_error_message(code: str) -> str:
    return AUTH_ERROR_MESSAGES.get(code, DEFAULT_AUTH_ERROR_MESSAGE)


class AuthError(Exception):
    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or get_auth_error_message(code)
        super().__init__(self.message)


def validate_email(email: str) -> str:
    """Return the trimmed email or raise AuthError"""
    if not email or not email.strip():
        raise AuthError("auth/missing-email")
    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        raise AuthError("auth/invalid-email")
    return email


def validate_password(password: str) -> None:
    if not password or not password.strip():
        raise AuthError("auth/missing-password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError("auth/weak-password")


def password_strength(password: str) -> Tuple[bool, List[str]]:
    """
    Report which strength rules a password breaks.

    Returns:
        (is_valid, errors) where errors lists one message per broken rule
    """
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append("The password must be at least 6 characters long")
    if not re.search(r"[A-Z]", password):
        errors.append("It must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("It must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        errors.append("It must contain at least one number")
    return not errors, errors


class AuthSession:
    """
    Holds the signed-in user and notifies listeners when it changes.
    """

    def __init__(self):
        self._current_user: Optional[AuthUser] = None
        self._listeners: List[Callable[[Optional[AuthUser]], None]] = []

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    def set_user(self, user: Optional[AuthUser]) -> None:
        self._current_user = user
        for listener in list(self._listeners):
            listener(user)

    def on_change(
        self, callback: Callable[[Optional[AuthUser]], None]
    ) -> Callable[[], None]:
        """
        Subscribe to user changes. The callback is invoked immediately with
        the current user, then on every change.

        Returns:
            A function that removes the subscription
        """
        self._listeners.append(callback)
        callback(self._current_user)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe


class IdentityClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[AuthSession] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.IDENTITY_API_KEY
        self.base_url = base_url or settings.IDENTITY_BASE_URL
        self.timeout = timeout or settings.IDENTITY_TIMEOUT
        self.session = session
        self.transport = transport

    async def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            try:
                response = await client.post(
                    f"/accounts:{endpoint}",
                    params={"key": self.api_key},
                    json=payload,
                )
            except httpx.HTTPError as e:
                app_logger.error(f"Identity provider request failed: {e}")
                raise AuthError("auth/network-request-failed") from e

        try:
            response_data = response.json()
        except ValueError:
            response_data = {}

        if not response.is_success:
            # Errors look like {"error": {"message": "EMAIL_NOT_FOUND"}}, some
            # with a detail suffix: "WEAK_PASSWORD : Password should be ..."
            error_msg = "UNKNOWN"
            error = response_data.get("error") if isinstance(response_data, dict) else None
            if isinstance(error, dict):
                error_msg = error.get("message", error_msg)
            provider_code = error_msg.split(":")[0].strip()
            code = PROVIDER_ERROR_CODES.get(provider_code, "auth/unknown")
            app_logger.warning(f"Identity provider error on {endpoint}: {error_msg}")
            raise AuthError(code)

        return response_data

    @staticmethod
    def _to_user(data: Dict[str, Any]) -> AuthUser:
        expires_in = data.get("expiresIn")
        return AuthUser(
            uid=data["localId"],
            email=data.get("email", ""),
            display_name=data.get("displayName") or None,
            id_token=data.get("idToken"),
            refresh_token=data.get("refreshToken"),
            expires_in=int(expires_in) if expires_in else None,
        )

    def _set_current_user(self, user: Optional[AuthUser]) -> None:
        if self.session is not None:
            self.session.set_user(user)

    async def sign_in(self, email: str, password: str) -> AuthUser:
        email = validate_email(email)
        validate_password(password)

        data = await self._post(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        user = self._to_user(data)
        app_logger.info(f"User {user.uid} signed in")
        self._set_current_user(user)
        return user

    async def sign_up(
        self, email: str, password: str, display_name: str = ""
    ) -> AuthUser:
        email = validate_email(email)
        validate_password(password)

        data = await self._post(
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )

        if display_name:
            # The account exists at this point; a failed profile update
            # leaves it without a display name
            try:
                await self._post(
                    "update",
                    {
                        "idToken": data["idToken"],
                        "displayName": display_name,
                        "returnSecureToken": False,
                    },
                )
                data = {**data, "displayName": display_name}
            except AuthError as e:
                app_logger.warning(
                    f"Could not set display name for {data.get('localId')}: {e.code}"
                )

        user = self._to_user(data)
        app_logger.info(f"User {user.uid} registered")
        self._set_current_user(user)
        return user

    async def reset_password(self, email: str) -> None:
        email = validate_email(email)
        await self._post(
            "sendOobCode", {"requestType": "PASSWORD_RESET", "email": email}
        )

    def sign_out(self) -> None:
        # ID tokens are bearer tokens; signing out means forgetting them
        self._set_current_user(None)
