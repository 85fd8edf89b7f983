from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from .base import BaseEndpoint
from ..base_client import RequestMeta
from ..models import ApiResponse, User


log = logging.getLogger(__name__)

# Error codes after which a profile update is retried on `/users/me`.
PROFILE_FALLBACK_CODES = frozenset({"UNAUTHORIZED", "401", "404", "405"})


def _issued_token(response: ApiResponse) -> Optional[str]:
    """Return the token carried by a successful reply, if any."""
    if not (response.success and isinstance(response.data, dict)):
        return None
    token = response.data.get("token")
    if isinstance(token, str) and token.strip():
        return token
    return None


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "LoginResult":
        return cls(
            token=raw.get("token", ""),
            user=User.from_dict(raw.get("user") or {}),
        )


class AuthAPI(BaseEndpoint):
    """
    Login, logout and profile management.

    Successful logins and profile updates that return a token write it to
    the client's token store; logout always clears it.
    """

    def login(self, username: str, password: str) -> ApiResponse:
        """
        Authenticate and store the returned token.

        Returns
        -------
        ApiResponse
            `data` is a `LoginResult` on success.

        Raises
        ------
        AuthenticationError
            Offline, for anything but the demo credentials.
        """
        response = self.api_client.post(
            "/auth/login",
            {"username": username, "password": password},
        )
        token = _issued_token(response)
        if token:
            self.api_client.token_store.set_token(token)
            log.info(f"Logged in as {username}")
        return response.map_data(LoginResult.from_dict)

    def logout(self) -> None:
        """Tell the backend, then clear the token whatever it answered."""
        try:
            self.api_client.post("/auth/logout")
        finally:
            self.api_client.token_store.remove_token()

    def get_profile(self) -> ApiResponse:
        return self.api_client.get("/auth/profile", parse=User.from_dict)

    def validate_token(self) -> ApiResponse:
        return self.api_client.get("/auth/validate")

    def refresh_token(self) -> ApiResponse:
        return self.api_client.refresh_token()

    def update_profile(
        self,
        *,
        nickname: Optional[str] = None,
        email: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None
    ) -> ApiResponse:
        """
        Update the current user's profile.

        Tries `PUT /auth/profile` first and falls back to `PUT /users/me`
        for backends that only expose the latter. A 401 here never clears
        the stored token. When the backend issues a new token (e.g. after a
        username change) it replaces the stored one.

        Returns
        -------
        ApiResponse
            `data` is the updated `User` when the reply carries an object;
            any other success payload is passed through unchanged.
        """
        body = {
            key: value
            for key, value in (
                ("nickname", nickname),
                ("email", email),
                ("username", username),
                ("password", password),
            )
            if value is not None
        }
        meta = RequestMeta(suppress_auth_clear=True)

        response = self.api_client.request(
            "/auth/profile", method="PUT", json_body=body, meta=meta
        )
        code = response.error.code if response.error else None
        if not response.success and code in PROFILE_FALLBACK_CODES:
            response = self.api_client.request(
                "/users/me", method="PUT", json_body=body, meta=meta
            )

        if not (response.success and isinstance(response.data, dict)):
            return response

        token = _issued_token(response)
        if token:
            self.api_client.token_store.set_token(token)

        return response.map_data(
            lambda data: User.from_dict(data.get("user") or data)
        )

    def is_authenticated(self) -> bool:
        return self.api_client.token_store.get_token() is not None
