from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Mapping

from auth_center.domain.entities.user import ProviderAccount, Session, User


def _as_str(value: Any) -> str:
    return str(value)


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _as_datetime(value: Any) -> datetime:
    # Drivers without a native timestamp type hand back ISO strings.
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _as_optional_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    return _as_datetime(value)


def _as_device_info(value: Any) -> dict | None:
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        return value
    decoded = json.loads(value)
    return decoded if isinstance(decoded, dict) else None


def dump_device_info(device_info: dict | None) -> str | None:
    if device_info is None:
        return None
    return json.dumps(device_info, ensure_ascii=False, sort_keys=True)


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        union_id=row["union_id"],
        phone_number=row.get("phone_number"),
        password_hash=row.get("password_hash"),
        email=row.get("email"),
        last_login_at=_as_optional_datetime(row.get("last_login_at")),
        created_at=_as_datetime(row["created_at"]),
        updated_at=_as_datetime(row["updated_at"]),
    )


def map_row_to_provider_account(row: Mapping[str, Any]) -> ProviderAccount:
    return ProviderAccount(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        provider=row["provider"],
        app_id=row["app_id"],
        open_id=row["open_id"],
        kind=row["type"],
        nickname=_as_optional_str(row.get("nickname")),
        avatar_url=_as_optional_str(row.get("avatar_url")),
        created_at=_as_datetime(row["created_at"]),
    )


def map_row_to_session(row: Mapping[str, Any]) -> Session:
    return Session(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        token=row["token"],
        device_info=_as_device_info(row.get("device_info")),
        expires_at=_as_datetime(row["expires_at"]),
        created_at=_as_datetime(row["created_at"]),
    )
