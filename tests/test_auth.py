import asyncio

import httpx
import pytest

from clothing_inventory.core.errors import AuthError
from clothing_inventory.domain.sync.auth import FirebaseAuth

from fake_firebase import API_KEY

pytestmark = pytest.mark.anyio


async def test_sign_in_sets_user_and_notifies(auth):
    events = []

    async def listener(user):
        events.append(user.uid if user else None)

    auth.on_auth_state_changed(listener)
    user = await auth.sign_in("owner@example.com", "secret123")

    assert user.uid == "uid-owner"
    assert user.id_token == "id-token-1"
    assert auth.current_user == user

    await auth.sign_out()
    await auth.sign_out()
    assert auth.current_user is None
    assert events == ["uid-owner", None]


@pytest.mark.parametrize(
    "email, password, provider_message, kind",
    [
        ("owner@example.com", "nope", None, "invalid-credentials"),
        ("not-an-email", "secret123", None, "invalid-email"),
        ("owner@example.com", "secret123", "EMAIL_NOT_FOUND", "user-not-found"),
        ("owner@example.com", "secret123", "INVALID_PASSWORD", "wrong-password"),
        ("owner@example.com", "secret123", "USER_DISABLED", "user-disabled"),
        (
            "owner@example.com",
            "secret123",
            "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been temporarily disabled",
            "too-many-requests",
        ),
        ("owner@example.com", "secret123", "OPERATION_NOT_ALLOWED", "unknown"),
    ],
)
async def test_provider_errors_map_to_kinds(auth, fake_firebase, email, password, provider_message, kind):
    fake_firebase.sign_in_error = provider_message

    with pytest.raises(AuthError) as exc_info:
        await auth.sign_in(email, password)

    error = exc_info.value
    assert error.kind == kind
    assert error.code == "auth_" + kind.replace("-", "_")
    assert error.status_code == 401
    assert error.message
    assert auth.current_user is None


async def test_network_failure():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http:
        auth = FirebaseAuth(http, API_KEY)
        with pytest.raises(AuthError) as exc_info:
            await auth.sign_in("owner@example.com", "secret123")

    assert exc_info.value.kind == "network-request-failed"
    assert exc_info.value.status_code == 503


async def test_sign_in_times_out():
    async def stall(request):
        await asyncio.sleep(5)
        return httpx.Response(200, json={})

    async with httpx.AsyncClient(transport=httpx.MockTransport(stall)) as http:
        auth = FirebaseAuth(http, API_KEY, timeout=0.05)
        with pytest.raises(AuthError) as exc_info:
            await auth.sign_in("owner@example.com", "secret123")

    assert exc_info.value.kind == "timeout"
    assert auth.current_user is None


async def test_sign_in_requires_configuration(http):
    auth = FirebaseAuth(http, None)
    assert not auth.configured
    with pytest.raises(AuthError) as exc_info:
        await auth.sign_in("owner@example.com", "secret123")
    assert exc_info.value.kind == "unknown"
