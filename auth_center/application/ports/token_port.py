from __future__ import annotations

from datetime import datetime
from typing import Protocol

from auth_center.application.dto.auth import IssuedToken, TokenClaims


class TokenPort(Protocol):
    def issue(self, *, user_id: str, now: datetime) -> IssuedToken:
        ...

    def verify(self, *, token: str) -> TokenClaims:
        ...
