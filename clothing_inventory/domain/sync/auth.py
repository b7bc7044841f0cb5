# clothing_inventory/domain/sync/auth.py
"""Email/password sign-in against the Firebase identity toolkit REST API."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import httpx

from clothing_inventory.core.errors import AuthError
from clothing_inventory.core.observability import log_event

from .schemas import AuthUser

logger = logging.getLogger("clothing_inventory.auth")

AuthListener = Callable[[Optional[AuthUser]], Awaitable[None]]

# provider error message -> AuthError kind
PROVIDER_ERRORS = {
    "INVALID_EMAIL": "invalid-email",
    "USER_DISABLED": "user-disabled",
    "EMAIL_NOT_FOUND": "user-not-found",
    "INVALID_PASSWORD": "wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "invalid-credentials",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "too-many-requests",
}


def _provider_error_kind(response: httpx.Response) -> str:
    try:
        message = response.json().get("error", {}).get("message", "")
    except ValueError:
        return "unknown"
    # e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been ..."
    code = str(message).split(":")[0].strip()
    return PROVIDER_ERRORS.get(code, "unknown")


class FirebaseAuth:
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str],
        *,
        base_url: str = "https://identitytoolkit.googleapis.com/v1",
        timeout: float = 30.0,
    ):
        self.client = client
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.current_user: Optional[AuthUser] = None
        self._listeners: List[AuthListener] = []

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _set_user(self, user: Optional[AuthUser]) -> None:
        self.current_user = user
        for listener in list(self._listeners):
            await listener(user)

    async def _request_sign_in(self, email: str, password: str) -> AuthUser:
        try:
            response = await self.client.post(
                f"{self.base_url}/accounts:signInWithPassword",
                params={"key": self.api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
            )
        except httpx.HTTPError as exc:
            raise AuthError("network-request-failed") from exc

        if response.status_code != 200:
            raise AuthError(_provider_error_kind(response))
        try:
            data = response.json()
            return AuthUser(
                uid=data["localId"],
                email=data.get("email", email),
                id_token=data["idToken"],
                refresh_token=data.get("refreshToken"),
            )
        except (ValueError, KeyError):
            raise AuthError("unknown") from None

    async def sign_in(self, email: str, password: str) -> AuthUser:
        if not self.configured:
            raise AuthError("unknown", "Cloud sign-in is not configured")
        try:
            user = await asyncio.wait_for(self._request_sign_in(email, password), timeout=self.timeout)
        except asyncio.TimeoutError:
            log_event(logger, "sign_in_failed", logging.WARNING, email=email, kind="timeout")
            raise AuthError("timeout") from None
        except AuthError as exc:
            log_event(logger, "sign_in_failed", logging.WARNING, email=email, kind=exc.kind)
            raise

        log_event(logger, "sign_in", uid=user.uid, email=user.email)
        await self._set_user(user)
        return user

    async def sign_out(self) -> None:
        if self.current_user is None:
            return
        log_event(logger, "sign_out", uid=self.current_user.uid)
        await self._set_user(None)
