"""Tests for the identity provider client and auth routes."""

import asyncio
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.dependencies.identity import get_identity_client
from src.main import app
from src.services.identity import (
    AuthError,
    AuthSession,
    IdentityClient,
    get_auth_error_message,
    password_strength,
    validate_email,
    validate_password,
)

SIGN_IN_RESPONSE = {
    "localId": "uid-123",
    "email": "ana@uni.edu",
    "displayName": "",
    "idToken": "id-token",
    "refreshToken": "refresh-token",
    "expiresIn": "3600",
}


def provider(handler):
    """IdentityClient backed by a fake provider, recording every request."""
    requests = []

    def _handle(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    session = AuthSession()
    client = IdentityClient(
        api_key="test-key",
        base_url="https://identity.test/v1",
        session=session,
        transport=httpx.MockTransport(_handle),
    )
    return client, session, requests


def error_response(message: str) -> httpx.Response:
    return httpx.Response(400, json={"error": {"code": 400, "message": message}})


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def test_validate_email_trims():
    assert validate_email("  ana@uni.edu ") == "ana@uni.edu"


@pytest.mark.parametrize(
    "email, code",
    [("", "auth/missing-email"), ("ana", "auth/invalid-email"), ("ana@uni", "auth/invalid-email")],
)
def test_validate_email_errors(email, code):
    with pytest.raises(AuthError) as exc_info:
        validate_email(email)
    assert exc_info.value.code == code


def test_validate_password():
    validate_password("secret")
    with pytest.raises(AuthError, match="at least 6"):
        validate_password("abc")
    with pytest.raises(AuthError, match="required"):
        validate_password("   ")


def test_password_strength():
    assert password_strength("Secret12") == (True, [])
    is_valid, errors = password_strength("abc")
    assert not is_valid
    assert len(errors) == 3


def test_unknown_code_has_default_message():
    assert get_auth_error_message("auth/something-new") == (
        "The operation failed. Please try again"
    )


# ---------------------------------------------------------------------------
# IdentityClient
# ---------------------------------------------------------------------------


def test_sign_in_sets_current_user():
    client, session, requests = provider(lambda r: httpx.Response(200, json=SIGN_IN_RESPONSE))

    user = asyncio.run(client.sign_in(" ana@uni.edu", "secret"))

    assert user.uid == "uid-123"
    assert user.display_name is None
    assert user.expires_in == 3600
    assert session.current_user == user

    request = requests[0]
    assert request.url.path == "/v1/accounts:signInWithPassword"
    assert request.url.params["key"] == "test-key"
    assert json.loads(request.content) == {
        "email": "ana@uni.edu",
        "password": "secret",
        "returnSecureToken": True,
    }


@pytest.mark.parametrize(
    "provider_message, code",
    [
        ("EMAIL_NOT_FOUND", "auth/user-not-found"),
        ("INVALID_PASSWORD", "auth/wrong-password"),
        ("INVALID_LOGIN_CREDENTIALS", "auth/invalid-credential"),
        ("TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled", "auth/too-many-requests"),
    ],
)
def test_sign_in_errors(provider_message, code):
    client, session, _ = provider(lambda r: error_response(provider_message))

    with pytest.raises(AuthError) as exc_info:
        asyncio.run(client.sign_in("ana@uni.edu", "secret"))

    assert exc_info.value.code == code
    assert session.current_user is None


def test_invalid_email_never_reaches_provider():
    client, _, requests = provider(lambda r: httpx.Response(200, json=SIGN_IN_RESPONSE))
    with pytest.raises(AuthError):
        asyncio.run(client.sign_in("not-an-email", "secret"))
    assert requests == []


def test_network_failure():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    client, _, _ = provider(handler)
    with pytest.raises(AuthError) as exc_info:
        asyncio.run(client.sign_in("ana@uni.edu", "secret"))
    assert exc_info.value.code == "auth/network-request-failed"


def test_sign_up_with_display_name():
    def handler(request):
        if request.url.path.endswith("accounts:signUp"):
            return httpx.Response(200, json=SIGN_IN_RESPONSE)
        return httpx.Response(200, json={"localId": "uid-123", "displayName": "Ana"})

    client, session, requests = provider(handler)
    user = asyncio.run(client.sign_up("ana@uni.edu", "secret", display_name="Ana"))

    assert user.display_name == "Ana"
    assert [r.url.path for r in requests] == ["/v1/accounts:signUp", "/v1/accounts:update"]
    assert json.loads(requests[1].content)["idToken"] == "id-token"
    assert session.current_user.uid == "uid-123"


def test_sign_up_keeps_account_when_display_name_update_fails():
    def handler(request):
        if request.url.path.endswith("accounts:signUp"):
            return httpx.Response(200, json=SIGN_IN_RESPONSE)
        return error_response("INVALID_ID_TOKEN")

    client, session, requests = provider(handler)
    user = asyncio.run(client.sign_up("ana@uni.edu", "secret", display_name="Ana"))

    assert user.uid == "uid-123"
    assert user.display_name is None
    assert len(requests) == 2
    assert session.current_user == user


@pytest.mark.parametrize(
    "body",
    [b'["EMAIL_EXISTS"]', b'"EMAIL_EXISTS"', b"not json", b'{"error": "EMAIL_EXISTS"}'],
)
def test_unexpected_error_body(body):
    client, session, _ = provider(lambda r: httpx.Response(400, content=body))

    with pytest.raises(AuthError) as exc_info:
        asyncio.run(client.sign_in("ana@uni.edu", "secret"))

    assert exc_info.value.code == "auth/unknown"
    assert session.current_user is None


def test_sign_up_email_taken():
    client, _, _ = provider(lambda r: error_response("EMAIL_EXISTS"))
    with pytest.raises(AuthError, match="already registered"):
        asyncio.run(client.sign_up("ana@uni.edu", "secret"))


def test_reset_password():
    client, _, requests = provider(lambda r: httpx.Response(200, json={"email": "ana@uni.edu"}))
    asyncio.run(client.reset_password("ana@uni.edu"))
    assert json.loads(requests[0].content) == {
        "requestType": "PASSWORD_RESET",
        "email": "ana@uni.edu",
    }


def test_sign_out_clears_session():
    client, session, _ = provider(lambda r: httpx.Response(200, json=SIGN_IN_RESPONSE))
    asyncio.run(client.sign_in("ana@uni.edu", "secret"))
    client.sign_out()
    assert session.current_user is None
    assert not session.is_authenticated


# ---------------------------------------------------------------------------
# AuthSession
# ---------------------------------------------------------------------------


def test_session_listeners():
    session = AuthSession()
    seen = []
    unsubscribe = session.on_change(seen.append)

    client, _, _ = provider(lambda r: httpx.Response(200, json=SIGN_IN_RESPONSE))
    user = asyncio.run(client.sign_in("ana@uni.edu", "secret"))
    session.set_user(user)
    session.set_user(None)
    unsubscribe()
    session.set_user(user)

    assert seen == [None, user, None]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@pytest.fixture()
def auth_client():
    def make(handler):
        client, _, _ = provider(handler)
        app.dependency_overrides[get_identity_client] = lambda: client
        return TestClient(app)

    yield make
    app.dependency_overrides.clear()


def test_sign_in_route(auth_client):
    client = auth_client(lambda r: httpx.Response(200, json=SIGN_IN_RESPONSE))
    response = client.post(
        "/api/auth/sign-in", json={"email": "ana@uni.edu", "password": "secret"}
    )
    assert response.status_code == 200
    assert response.json()["data"]["uid"] == "uid-123"


def test_sign_in_route_wrong_password(auth_client):
    client = auth_client(lambda r: error_response("INVALID_PASSWORD"))
    response = client.post(
        "/api/auth/sign-in", json={"email": "ana@uni.edu", "password": "secret"}
    )
    assert response.status_code == 401
    body = response.json()
    assert body["message"] == "Wrong password"
    assert body["error"]["code"] == "auth/wrong-password"


def test_sign_up_route_weak_password(auth_client):
    client = auth_client(lambda r: httpx.Response(200, json=SIGN_IN_RESPONSE))
    response = client.post(
        "/api/auth/sign-up", json={"email": "ana@uni.edu", "password": "abc"}
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "auth/weak-password"


def test_password_reset_route(auth_client):
    client = auth_client(lambda r: httpx.Response(200, json={}))
    response = client.post("/api/auth/password-reset", json={"email": "ana@uni.edu"})
    assert response.status_code == 200
    assert response.json()["message"] == "Password reset email sent"
