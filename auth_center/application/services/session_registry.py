from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from auth_center.application.ports.auth_port import AuthPort
from auth_center.domain.entities.user import Session
from auth_center.domain.exceptions import NotFoundError


logger = logging.getLogger(__name__)


class SessionRegistry:
    """Store-backed record of issued tokens, so a token can be revoked early.

    Expired rows are left in place; every lookup checks ``expires_at``.
    """

    def __init__(self, *, auth_port: AuthPort, lifetime: timedelta):
        self._auth_port = auth_port
        self._lifetime = lifetime

    def create(
        self,
        *,
        user_id: str,
        token: str,
        now: datetime,
        device_info: dict[str, Any] | None = None,
    ) -> str:
        session = self._auth_port.create_session(
            user_id=user_id,
            token=token,
            device_info=device_info,
            expires_at=now + self._lifetime,
            created_at=now,
        )
        logger.info("session_registry: created session_id=%s user_id=%s", session.id, user_id)
        return session.id

    def find_live(self, *, token: str, now: datetime) -> Session:
        session = self._auth_port.get_session_by_token(token=token)
        if session is None:
            raise NotFoundError("Session not found.")
        if session.expires_at <= now:
            raise NotFoundError("Session expired.")
        return session

    def revoke(self, *, token: str) -> None:
        self._auth_port.delete_session_by_token(token=token)
        logger.info("session_registry: revoked")
