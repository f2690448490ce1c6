from __future__ import annotations

from auth_center.application.dto.auth import LogoutInput
from auth_center.application.services.session_registry import SessionRegistry


class LogoutSessionUseCase:
    def __init__(self, *, session_registry: SessionRegistry):
        self._session_registry = session_registry

    def execute(self, command: LogoutInput) -> None:
        token = command.token.strip()
        if not token:
            raise ValueError("token is required.")
        self._session_registry.revoke(token=token)
