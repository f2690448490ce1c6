from __future__ import annotations

from auth_center.application.dto.auth import SetPhonePasswordInput
from auth_center.application.ports.auth_port import AuthPort
from auth_center.application.ports.password_hasher_port import PasswordHasherPort
from auth_center.domain.exceptions import DuplicateRecordError, NotFoundError, PhoneNumberInUseError

from .auth_common import utcnow
from .login_password import normalize_phone_number


MIN_PASSWORD_LENGTH = 6


class SetPhonePasswordUseCase:
    def __init__(
        self,
        *,
        auth_port: AuthPort,
        password_hasher: PasswordHasherPort,
    ):
        self._auth_port = auth_port
        self._password_hasher = password_hasher

    def execute(self, command: SetPhonePasswordInput) -> None:
        user_id = command.user_id.strip()
        phone_number = normalize_phone_number(command.phone_number)
        if not user_id:
            raise ValueError("user_id is required.")
        if not phone_number:
            raise ValueError("phone_number is required.")
        if len(command.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"password must have at least {MIN_PASSWORD_LENGTH} characters.")

        owner = self._auth_port.get_user_by_phone_number(phone_number=phone_number)
        if owner is not None and owner.id != user_id:
            raise PhoneNumberInUseError("Phone number already in use.")

        password_hash = self._password_hasher.hash(command.password)
        try:
            updated = self._auth_port.update_user_phone_password(
                user_id=user_id,
                phone_number=phone_number,
                password_hash=password_hash,
                updated_at=utcnow(),
            )
        except DuplicateRecordError as exc:
            raise PhoneNumberInUseError("Phone number already in use.") from exc

        if not updated:
            raise NotFoundError("User not found.")
