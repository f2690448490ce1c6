from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt

from auth_center.application.dto.auth import IssuedToken, TokenClaims
from auth_center.application.ports.token_port import TokenPort
from auth_center.domain.exceptions import (
    MalformedTokenError,
    SignatureInvalidError,
    TokenExpiredError,
)


TOKEN_LIFETIME = timedelta(days=7)
SIGNING_ALGORITHM = "HS256"


class JwtTokenService(TokenPort):
    def __init__(self, *, jwt_secret: str, lifetime: timedelta = TOKEN_LIFETIME):
        if not jwt_secret:
            raise ValueError("jwt_secret is required.")
        self._jwt_secret = jwt_secret
        self._lifetime = lifetime

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def issue(self, *, user_id: str, now: datetime) -> IssuedToken:
        token_id = str(uuid4())
        issued_at = now.replace(microsecond=0)
        expires_at = issued_at + self._lifetime
        payload = {
            "userId": user_id,
            "jti": token_id,
            "iat": int(issued_at.timestamp()),
            "nbf": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._jwt_secret, algorithm=SIGNING_ALGORITHM)
        return IssuedToken(
            token=token,
            token_id=token_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )

    def verify(self, *, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._jwt_secret,
                algorithms=[SIGNING_ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired.") from exc
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as exc:
            raise SignatureInvalidError("Invalid token signature.") from exc
        except jwt.PyJWTError as exc:
            raise MalformedTokenError("Malformed token.") from exc

        user_id = payload.get("userId")
        if not user_id or not isinstance(user_id, str):
            raise MalformedTokenError("Invalid token subject.")

        token_id = payload.get("jti")
        return TokenClaims(
            user_id=user_id,
            token_id=token_id if isinstance(token_id, str) else None,
            issued_at=_from_timestamp(payload.get("iat")),
            expires_at=_from_timestamp(payload["exp"]),
        )


def _from_timestamp(value) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
