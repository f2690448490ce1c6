from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal


Surface = Literal["open", "mp"]
AccountKind = Literal["web", "mp", "miniapp", "app"]

WECHAT_PROVIDER = "wechat"

SURFACE_ACCOUNT_KIND: dict[str, AccountKind] = {
    "open": "web",
    "mp": "mp",
}


@dataclass(frozen=True)
class User:
    id: str
    union_id: str
    phone_number: str | None
    password_hash: str | None
    email: str | None
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ProviderAccount:
    id: str
    user_id: str
    provider: str
    app_id: str
    open_id: str
    kind: AccountKind
    nickname: str | None
    avatar_url: str | None
    created_at: datetime


@dataclass(frozen=True)
class Session:
    id: str
    user_id: str
    token: str
    device_info: dict[str, Any] | None
    expires_at: datetime
    created_at: datetime
