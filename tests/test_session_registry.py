from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from auth_center.application.services.session_registry import SessionRegistry
from auth_center.domain.exceptions import NotFoundError
from tests.fakes import FakeAuthPort


NOW = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)


def _registry(auth_port: FakeAuthPort) -> SessionRegistry:
    return SessionRegistry(auth_port=auth_port, lifetime=timedelta(days=7))


def test_create_stores_session_with_lifetime_expiry():
    auth_port = FakeAuthPort()
    registry = _registry(auth_port)

    session_id = registry.create(user_id="user-1", token="tok", now=NOW, device_info={"ip": "1.2.3.4"})

    session = auth_port.sessions["tok"]
    assert session.id == session_id
    assert session.expires_at == NOW + timedelta(days=7)
    assert session.device_info == {"ip": "1.2.3.4"}


def test_find_live_returns_session_before_expiry():
    auth_port = FakeAuthPort()
    registry = _registry(auth_port)
    registry.create(user_id="user-1", token="tok", now=NOW)

    session = registry.find_live(token="tok", now=NOW + timedelta(days=6, hours=23))

    assert session.user_id == "user-1"


def test_find_live_treats_expiry_instant_as_expired():
    auth_port = FakeAuthPort()
    registry = _registry(auth_port)
    registry.create(user_id="user-1", token="tok", now=NOW)

    with pytest.raises(NotFoundError):
        registry.find_live(token="tok", now=NOW + timedelta(days=7))


def test_find_live_missing_token():
    with pytest.raises(NotFoundError):
        _registry(FakeAuthPort()).find_live(token="nope", now=NOW)


def test_revoke_is_idempotent():
    auth_port = FakeAuthPort()
    registry = _registry(auth_port)
    registry.create(user_id="user-1", token="tok", now=NOW)

    registry.revoke(token="tok")
    registry.revoke(token="tok")

    assert auth_port.sessions == {}
    with pytest.raises(NotFoundError):
        registry.find_live(token="tok", now=NOW)
