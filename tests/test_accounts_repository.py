from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine

from auth_center.domain.entities.user import WECHAT_PROVIDER
from auth_center.domain.exceptions import DuplicateRecordError
from auth_center.infrastructure.db.engine import init_schema
from auth_center.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository


NOW = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def repository(tmp_path) -> SqlAccountsRepository:
    sqlite3.register_adapter(datetime, lambda value: value.isoformat(" "))
    engine = create_engine(f"sqlite:///{tmp_path / 'auth.db'}", future=True)
    init_schema(engine)
    yield SqlAccountsRepository(engine)
    engine.dispose()


def _link(repository: SqlAccountsRepository, user_id: str, *, app_id: str = "wx-mp", open_id: str = "open-1"):
    return repository.create_provider_account(
        user_id=user_id,
        provider=WECHAT_PROVIDER,
        app_id=app_id,
        open_id=open_id,
        kind="mp",
        nickname="Alice",
        avatar_url=None,
        created_at=NOW,
    )


def test_create_and_read_user(repository: SqlAccountsRepository):
    created = repository.create_user(union_id="union-1", created_at=NOW)

    by_union = repository.get_user_by_union_id(union_id="union-1")
    by_id = repository.get_user_by_id(user_id=created.id)

    assert by_union == by_id == created
    assert created.created_at == NOW
    assert created.last_login_at is None
    assert repository.get_user_by_union_id(union_id="missing") is None


def test_duplicate_union_id_is_duplicate_record(repository: SqlAccountsRepository):
    repository.create_user(union_id="union-1", created_at=NOW)

    with pytest.raises(DuplicateRecordError):
        repository.create_user(union_id="union-1", created_at=NOW)


def test_account_identity_is_unique_and_profile_updates(repository: SqlAccountsRepository):
    user = repository.create_user(union_id="union-1", created_at=NOW)
    account = _link(repository, user.id)

    with pytest.raises(DuplicateRecordError):
        _link(repository, user.id)

    repository.update_provider_account_profile(account_id=account.id, nickname="Alicia", avatar_url="https://a")
    _link(repository, user.id, app_id="wx-open", open_id="open-2")

    stored = repository.get_provider_account(
        user_id=user.id,
        provider=WECHAT_PROVIDER,
        app_id="wx-mp",
        open_id="open-1",
    )
    assert stored is not None
    assert stored.kind == "mp"
    assert (stored.nickname, stored.avatar_url) == ("Alicia", "https://a")
    assert len(repository.list_provider_accounts(user_id=user.id, provider=WECHAT_PROVIDER)) == 2


def test_session_round_trip_and_delete(repository: SqlAccountsRepository):
    user = repository.create_user(union_id="union-1", created_at=NOW)
    created = repository.create_session(
        user_id=user.id,
        token="tok",
        device_info={"user_agent": "pytest", "ip": "127.0.0.1"},
        expires_at=NOW + timedelta(days=7),
        created_at=NOW,
    )

    stored = repository.get_session_by_token(token="tok")

    assert stored == created
    assert stored.device_info == {"user_agent": "pytest", "ip": "127.0.0.1"}
    assert stored.expires_at == NOW + timedelta(days=7)

    repository.delete_session_by_token(token="tok")
    repository.delete_session_by_token(token="tok")
    assert repository.get_session_by_token(token="tok") is None


def test_phone_password_update_and_counts(repository: SqlAccountsRepository):
    first = repository.create_user(union_id="union-1", created_at=NOW)
    second = repository.create_user(union_id="union-2", created_at=NOW + timedelta(minutes=1))

    assert repository.update_user_phone_password(
        user_id=first.id,
        phone_number="13800000000",
        password_hash="hash",
        updated_at=NOW,
    ) is True
    assert repository.update_user_phone_password(
        user_id="missing",
        phone_number="13900000000",
        password_hash="hash",
        updated_at=NOW,
    ) is False
    with pytest.raises(DuplicateRecordError):
        repository.update_user_phone_password(
            user_id=second.id,
            phone_number="13800000000",
            password_hash="hash",
            updated_at=NOW,
        )

    repository.update_user_last_login(user_id=first.id, last_login_at=NOW + timedelta(hours=1))

    assert repository.get_user_by_phone_number(phone_number="13800000000").id == first.id
    assert repository.get_user_by_id(user_id=first.id).last_login_at == NOW + timedelta(hours=1)
    assert repository.count_users() == 2
    assert repository.count_users_with_password() == 1
    assert [user.id for user in repository.list_users(limit=10, offset=0)] == [second.id, first.id]
    assert [user.id for user in repository.list_users(limit=1, offset=1)] == [first.id]
