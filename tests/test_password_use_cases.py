from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from auth_center.application.dto.auth import LoginPasswordInput, SetPhonePasswordInput
from auth_center.application.services.session_registry import SessionRegistry
from auth_center.application.use_cases.login_password import LoginPasswordUseCase
from auth_center.application.use_cases.set_phone_password import SetPhonePasswordUseCase
from auth_center.domain.exceptions import InvalidCredentialsError, NotFoundError, PhoneNumberInUseError
from tests.fakes import FakeAuthPort, FakePasswordHasher, FakeTokenPort


NOW = datetime(2026, 1, 10, tzinfo=timezone.utc)


def _use_cases(auth_port: FakeAuthPort) -> tuple[SetPhonePasswordUseCase, LoginPasswordUseCase]:
    hasher = FakePasswordHasher()
    set_phone_password = SetPhonePasswordUseCase(auth_port=auth_port, password_hasher=hasher)
    login = LoginPasswordUseCase(
        auth_port=auth_port,
        password_hasher=hasher,
        token_port=FakeTokenPort(),
        session_registry=SessionRegistry(auth_port=auth_port, lifetime=timedelta(days=7)),
    )
    return set_phone_password, login


def test_set_phone_password_then_login():
    auth_port = FakeAuthPort()
    user = auth_port.add_user(union_id="union-1", created_at=NOW)
    set_phone_password, login = _use_cases(auth_port)

    set_phone_password.execute(
        SetPhonePasswordInput(user_id=user.id, phone_number="138 0000 0000", password="secret1")
    )
    output = login.execute(LoginPasswordInput(phone_number="13800000000", password="secret1"))

    stored = auth_port.users[user.id]
    assert stored.phone_number == "13800000000"
    assert stored.password_hash == "hashed::secret1"
    assert output.user_id == user.id
    assert output.is_new_user is False
    assert output.token in auth_port.sessions


@pytest.mark.parametrize(
    "phone_number, password",
    [
        ("13800000000", "wrong-pass"),
        ("13900000000", "secret1"),
        ("", "secret1"),
        ("13800000000", ""),
    ],
)
def test_login_failures_are_indistinguishable(phone_number: str, password: str):
    auth_port = FakeAuthPort()
    user = auth_port.add_user(union_id="union-1", created_at=NOW)
    set_phone_password, login = _use_cases(auth_port)
    set_phone_password.execute(
        SetPhonePasswordInput(user_id=user.id, phone_number="13800000000", password="secret1")
    )

    with pytest.raises(InvalidCredentialsError) as exc_info:
        login.execute(LoginPasswordInput(phone_number=phone_number, password=password))

    assert str(exc_info.value) == "Invalid credentials."


def test_login_without_password_set_is_invalid():
    auth_port = FakeAuthPort()
    auth_port.add_user(union_id="union-1", created_at=NOW, phone_number="13800000000")
    _, login = _use_cases(auth_port)

    with pytest.raises(InvalidCredentialsError):
        login.execute(LoginPasswordInput(phone_number="13800000000", password="anything"))


def test_phone_number_owned_by_other_user_conflicts():
    auth_port = FakeAuthPort()
    auth_port.add_user(union_id="union-1", created_at=NOW, phone_number="13800000000")
    other = auth_port.add_user(union_id="union-2", created_at=NOW)
    set_phone_password, _ = _use_cases(auth_port)

    with pytest.raises(PhoneNumberInUseError):
        set_phone_password.execute(
            SetPhonePasswordInput(user_id=other.id, phone_number="13800000000", password="secret1")
        )


def test_same_user_can_reset_password_on_own_number():
    auth_port = FakeAuthPort()
    user = auth_port.add_user(union_id="union-1", created_at=NOW, phone_number="13800000000")
    set_phone_password, _ = _use_cases(auth_port)

    set_phone_password.execute(
        SetPhonePasswordInput(user_id=user.id, phone_number="13800000000", password="another")
    )

    assert auth_port.users[user.id].password_hash == "hashed::another"


def test_unknown_user_is_not_found():
    set_phone_password, _ = _use_cases(FakeAuthPort())

    with pytest.raises(NotFoundError):
        set_phone_password.execute(
            SetPhonePasswordInput(user_id="missing", phone_number="13800000000", password="secret1")
        )


@pytest.mark.parametrize(
    "user_id, phone_number, password",
    [
        ("", "13800000000", "secret1"),
        ("user-1", "   ", "secret1"),
        ("user-1", "13800000000", "12345"),
    ],
)
def test_invalid_input_is_value_error(user_id: str, phone_number: str, password: str):
    set_phone_password, _ = _use_cases(FakeAuthPort())

    with pytest.raises(ValueError):
        set_phone_password.execute(
            SetPhonePasswordInput(user_id=user_id, phone_number=phone_number, password=password)
        )
