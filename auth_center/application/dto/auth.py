from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from auth_center.domain.entities.user import ProviderAccount, Surface, User


@dataclass(frozen=True)
class WechatAccessToken:
    access_token: str
    open_id: str
    union_id: str | None
    expires_in: int | None
    refresh_token: str | None
    scope: str | None


@dataclass(frozen=True)
class WechatProfile:
    open_id: str | None
    nickname: str | None
    avatar_url: str | None
    union_id: str | None


@dataclass(frozen=True)
class ResolvedIdentity:
    user: User
    account: ProviderAccount
    is_new_user: bool


@dataclass(frozen=True)
class IssuedToken:
    token: str
    token_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    token_id: str | None
    issued_at: datetime | None
    expires_at: datetime


@dataclass(frozen=True)
class LoginWechatInput:
    code: str
    surface: Surface
    device_info: dict[str, Any] | None = None


@dataclass(frozen=True)
class LoginPasswordInput:
    phone_number: str
    password: str
    device_info: dict[str, Any] | None = None


@dataclass(frozen=True)
class LoginOutput:
    user_id: str
    union_id: str
    token: str
    expires_at: datetime
    is_new_user: bool


@dataclass(frozen=True)
class LogoutInput:
    token: str


@dataclass(frozen=True)
class BuildAuthorizeUrlInput:
    callback_url: str
    user_agent: str | None
    request_host: str | None


@dataclass(frozen=True)
class AuthorizeUrlOutput:
    url: str
    surface: Surface


@dataclass(frozen=True)
class SetPhonePasswordInput:
    user_id: str
    phone_number: str
    password: str


@dataclass(frozen=True)
class ListUsersInput:
    page: int | None
    page_size: int | None


@dataclass(frozen=True)
class UserStatistics:
    total: int
    with_password: int


@dataclass(frozen=True)
class ListUsersOutput:
    users: list[User]
    total: int
    page: int
    page_size: int
    statistics: UserStatistics
