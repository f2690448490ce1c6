from __future__ import annotations

from auth_center.application.ports.auth_port import AuthPort
from auth_center.application.ports.token_port import TokenPort
from auth_center.application.services.session_registry import SessionRegistry
from auth_center.domain.entities.user import User
from auth_center.domain.exceptions import NotFoundError

from .auth_common import utcnow


class VerifyTokenUseCase:
    def __init__(
        self,
        *,
        auth_port: AuthPort,
        token_port: TokenPort,
        session_registry: SessionRegistry,
    ):
        self._auth_port = auth_port
        self._token_port = token_port
        self._session_registry = session_registry

    def execute(self, *, token: str) -> User:
        token = token.strip()
        claims = self._token_port.verify(token=token)
        session = self._session_registry.find_live(token=token, now=utcnow())
        if session.user_id != claims.user_id:
            raise NotFoundError("Session does not belong to the token subject.")

        user = self._auth_port.get_user_by_id(user_id=session.user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user
