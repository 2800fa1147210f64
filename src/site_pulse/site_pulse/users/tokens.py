from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from ..core.constants import DEFAULT_JWT_EXPIRES_HOURS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import User

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    """What a verified Bearer token tells us about the caller."""

    user_id: int
    username: str
    role: Role


class TokenService:
    """Issue and verify HS256 JWTs."""

    def __init__(self, secret: str, *, expires_hours: int = DEFAULT_JWT_EXPIRES_HOURS):
        self._secret = secret
        self._expires = timedelta(hours=int(expires_hours))

    def issue(self, user: User, *, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user.user_id),
            "username": user.username,
            "role": user.role.value,
            "iat": now,
            "exp": now + self._expires,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> TokenClaims:
        try:
            data = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired") from None
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token") from None

        try:
            return TokenClaims(user_id=int(data["sub"]), username=str(data.get("username", "")), role=Role(data["role"]))
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid token") from None
