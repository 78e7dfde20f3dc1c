"""Bearer-token authentication.

TokenAuthority issues and verifies tokens for the write endpoint; it holds
the shared secret and lives server-side. AuthClient is what the recorder
is handed: it only knows the current user's token, if any.

Token format: ``<user_id>.<hex hmac-sha256(secret, user_id)>``.
"""

from __future__ import annotations

import hashlib
import hmac
import os
import uuid

from perfectscrabble.core.errors import Unauthenticated

TOKEN_ENV = "PSG_ID_TOKEN"
SECRET_ENV = "PSG_TOKEN_SECRET"


class TokenAuthority:
    """Issues and verifies HMAC-signed user tokens."""

    def __init__(self, secret: str | bytes):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._key = secret.encode("utf-8") if isinstance(secret, str) else secret

    @classmethod
    def from_env(cls) -> TokenAuthority:
        secret = os.environ.get(SECRET_ENV)
        if not secret:
            raise ValueError(f"{SECRET_ENV} not set")
        return cls(secret)

    def _sign(self, user_id: str) -> str:
        return hmac.new(self._key, user_id.encode("utf-8"), hashlib.sha256).hexdigest()

    def issue(self, user_id: str | None = None) -> str:
        """Token for ``user_id``; a fresh anonymous id when omitted."""
        if user_id is None:
            user_id = f"anon-{uuid.uuid4().hex}"
        if not user_id or "." in user_id:
            raise ValueError(f"Invalid user id: {user_id!r}")
        return f"{user_id}.{self._sign(user_id)}"

    def verify(self, token: str) -> str:
        """Return the user id the token was issued for."""
        user_id, sep, signature = (token or "").rpartition(".")
        if not sep or not user_id or not signature:
            raise Unauthenticated("Malformed token")
        if not hmac.compare_digest(self._sign(user_id), signature):
            raise Unauthenticated("Invalid token signature")
        return user_id


class AuthClient:
    """Holds the current user's credential."""

    def __init__(self, token: str | None = None):
        self._token = token

    @classmethod
    def from_env(cls) -> AuthClient:
        return cls(os.environ.get(TOKEN_ENV) or None)

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def sign_in(self, token: str) -> None:
        self._token = token

    def sign_out(self) -> None:
        self._token = None

    def current_token(self) -> str:
        if not self._token:
            raise Unauthenticated("User not authenticated")
        return self._token
