from __future__ import annotations

from auth_center.application.dto.auth import LoginOutput, LoginPasswordInput
from auth_center.application.ports.auth_port import AuthPort
from auth_center.application.ports.password_hasher_port import PasswordHasherPort
from auth_center.application.ports.token_port import TokenPort
from auth_center.application.services.session_registry import SessionRegistry
from auth_center.domain.exceptions import InvalidCredentialsError

from .auth_common import issue_session


def normalize_phone_number(phone_number: str) -> str:
    return "".join(phone_number.split())


class LoginPasswordUseCase:
    def __init__(
        self,
        *,
        auth_port: AuthPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        session_registry: SessionRegistry,
    ):
        self._auth_port = auth_port
        self._password_hasher = password_hasher
        self._token_port = token_port
        self._session_registry = session_registry

    def execute(self, command: LoginPasswordInput) -> LoginOutput:
        phone_number = normalize_phone_number(command.phone_number)
        if not phone_number or not command.password:
            raise InvalidCredentialsError("Invalid credentials.")

        user = self._auth_port.get_user_by_phone_number(phone_number=phone_number)
        if user is None or not user.password_hash:
            raise InvalidCredentialsError("Invalid credentials.")

        if not self._password_hasher.verify(command.password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials.")

        return issue_session(
            user=user,
            auth_port=self._auth_port,
            token_port=self._token_port,
            session_registry=self._session_registry,
            device_info=command.device_info,
        )
