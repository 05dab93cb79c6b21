"""Security helpers for password hashing, session cookie signing and shared-key checks."""
from __future__ import annotations

import secrets

from fastapi import Response
from itsdangerous import BadSignature, URLSafeSerializer
from passlib.context import CryptContext

from .config import get_settings


_password_context = CryptContext(schemes=["argon2"], deprecated="auto")


class PasswordHasher:
    """Hash and verify user passwords using Argon2id."""

    _dummy_hash: str | None = None

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str | None) -> bool:
        if not hashed:
            return False
        try:
            return _password_context.verify(password, hashed)
        except ValueError:
            # Unrecognized or corrupt hash in the store.
            return False

    @classmethod
    def burn(cls, password: str) -> None:
        """Spend the same effort as a real verify when the username is unknown."""
        if cls._dummy_hash is None:
            cls._dummy_hash = _password_context.hash(secrets.token_hex(16))
        _password_context.verify(password, cls._dummy_hash)


class SessionSigner:
    """Sign and unsign opaque session tokens carried in the session cookie.

    Expiry is tracked server-side from last activity, so the signature carries
    no timestamp.
    """

    def __init__(self, salt: str = "sims-session") -> None:
        settings = get_settings()
        self._serializer = URLSafeSerializer(settings.secret_key, salt=salt)

    def dumps(self, token: str) -> str:
        return self._serializer.dumps(token)

    def loads(self, value: str) -> str:
        try:
            token = self._serializer.loads(value)
        except BadSignature as exc:
            raise ValueError("Invalid session cookie") from exc
        if not isinstance(token, str) or not token:
            raise ValueError("Invalid session cookie")
        return token


def api_key_matches(supplied: str | None, expected: str | None) -> bool:
    """Constant-time comparison of a partner API key. An unset key never matches."""
    if not supplied or not expected:
        return False
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=SessionSigner().dumps(token),
        httponly=True,
        secure=settings.is_production,
        samesite=settings.session_cookie_samesite,
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite=settings.session_cookie_samesite,
    )
