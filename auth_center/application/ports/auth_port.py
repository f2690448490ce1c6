from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from auth_center.domain.entities.user import AccountKind, ProviderAccount, Session, User


class AuthPort(Protocol):
    """Persistence boundary for users, provider accounts and sessions.

    Creates generate the record id. A unique-constraint violation surfaces as
    ``DuplicateRecordError``; any other persistence failure as ``StoreError``.
    """

    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_union_id(self, *, union_id: str) -> User | None:
        ...

    def get_user_by_phone_number(self, *, phone_number: str) -> User | None:
        ...

    def create_user(self, *, union_id: str, created_at: datetime) -> User:
        ...

    def update_user_last_login(self, *, user_id: str, last_login_at: datetime) -> None:
        ...

    def update_user_phone_password(
        self,
        *,
        user_id: str,
        phone_number: str,
        password_hash: str,
        updated_at: datetime,
    ) -> bool:
        ...

    def list_users(self, *, limit: int, offset: int) -> list[User]:
        ...

    def count_users(self) -> int:
        ...

    def count_users_with_password(self) -> int:
        ...

    def get_provider_account(
        self,
        *,
        user_id: str,
        provider: str,
        app_id: str,
        open_id: str,
    ) -> ProviderAccount | None:
        ...

    def list_provider_accounts(self, *, user_id: str, provider: str) -> list[ProviderAccount]:
        ...

    def create_provider_account(
        self,
        *,
        user_id: str,
        provider: str,
        app_id: str,
        open_id: str,
        kind: AccountKind,
        nickname: str | None,
        avatar_url: str | None,
        created_at: datetime,
    ) -> ProviderAccount:
        ...

    def update_provider_account_profile(
        self,
        *,
        account_id: str,
        nickname: str | None,
        avatar_url: str | None,
    ) -> None:
        ...

    def create_session(
        self,
        *,
        user_id: str,
        token: str,
        device_info: dict[str, Any] | None,
        expires_at: datetime,
        created_at: datetime,
    ) -> Session:
        ...

    def get_session_by_token(self, *, token: str) -> Session | None:
        ...

    def delete_session_by_token(self, *, token: str) -> None:
        ...
