from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth_center.application.ports.auth_port import AuthPort
from auth_center.domain.exceptions import DuplicateRecordError, StoreError
from auth_center.infrastructure.db.mappers.accounts_mapper import (
    dump_device_info,
    map_row_to_provider_account,
    map_row_to_session,
    map_row_to_user,
)


USER_COLUMNS = "id, union_id, phone_number, password_hash, email, last_login_at, created_at, updated_at"
ACCOUNT_COLUMNS = "id, user_id, provider, app_id, open_id, type, nickname, avatar_url, created_at"
SESSION_COLUMNS = "id, user_id, token, device_info, expires_at, created_at"


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except IntegrityError as exc:
        raise DuplicateRecordError(f"{operation}: unique constraint violated.") from exc
    except SQLAlchemyError as exc:
        raise StoreError(f"{operation}: database error.") from exc


class SqlAccountsRepository(AuthPort):
    def __init__(self, engine):
        self._engine = engine

    def _fetch_one(self, operation: str, sql: str, params: dict[str, Any]):
        with _store_errors(operation):
            with self._engine.connect() as conn:
                return conn.execute(text(sql), params).mappings().first()

    def _fetch_all(self, operation: str, sql: str, params: dict[str, Any]):
        with _store_errors(operation):
            with self._engine.connect() as conn:
                return conn.execute(text(sql), params).mappings().all()

    def _write(self, operation: str, sql: str, params: dict[str, Any]):
        with _store_errors(operation):
            with self._engine.begin() as conn:
                result = conn.execute(text(sql), params)
                return result.rowcount

    def _insert_returning(self, operation: str, sql: str, params: dict[str, Any]):
        with _store_errors(operation):
            with self._engine.begin() as conn:
                return conn.execute(text(sql), params).mappings().one()

    def get_user_by_id(self, *, user_id: str):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM users
            WHERE id = :user_id
            LIMIT 1
        """
        row = self._fetch_one("get_user_by_id", sql, {"user_id": user_id})
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_union_id(self, *, union_id: str):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM users
            WHERE union_id = :union_id
            LIMIT 1
        """
        row = self._fetch_one("get_user_by_union_id", sql, {"union_id": union_id})
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_phone_number(self, *, phone_number: str):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM users
            WHERE phone_number = :phone_number
            LIMIT 1
        """
        row = self._fetch_one("get_user_by_phone_number", sql, {"phone_number": phone_number})
        if row is None:
            return None
        return map_row_to_user(row)

    def create_user(self, *, union_id: str, created_at: datetime):
        sql = f"""
            INSERT INTO users (id, union_id, created_at, updated_at)
            VALUES (:id, :union_id, :created_at, :updated_at)
            RETURNING {USER_COLUMNS}
        """
        params = {
            "id": str(uuid4()),
            "union_id": union_id,
            "created_at": created_at,
            "updated_at": created_at,
        }
        row = self._insert_returning("create_user", sql, params)
        return map_row_to_user(row)

    def update_user_last_login(self, *, user_id: str, last_login_at: datetime) -> None:
        sql = """
            UPDATE users
            SET last_login_at = :last_login_at,
                updated_at = :last_login_at
            WHERE id = :user_id
        """
        self._write("update_user_last_login", sql, {"user_id": user_id, "last_login_at": last_login_at})

    def update_user_phone_password(
        self,
        *,
        user_id: str,
        phone_number: str,
        password_hash: str,
        updated_at: datetime,
    ) -> bool:
        sql = """
            UPDATE users
            SET phone_number = :phone_number,
                password_hash = :password_hash,
                updated_at = :updated_at
            WHERE id = :user_id
        """
        rowcount = self._write(
            "update_user_phone_password",
            sql,
            {
                "user_id": user_id,
                "phone_number": phone_number,
                "password_hash": password_hash,
                "updated_at": updated_at,
            },
        )
        return rowcount > 0

    def list_users(self, *, limit: int, offset: int):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM users
            ORDER BY created_at DESC, id
            LIMIT :limit OFFSET :offset
        """
        rows = self._fetch_all("list_users", sql, {"limit": limit, "offset": offset})
        return [map_row_to_user(row) for row in rows]

    def count_users(self) -> int:
        row = self._fetch_one("count_users", "SELECT COUNT(*) AS total FROM users", {})
        return int(row["total"]) if row is not None else 0

    def count_users_with_password(self) -> int:
        sql = """
            SELECT COUNT(*) AS total
            FROM users
            WHERE password_hash IS NOT NULL
              AND password_hash <> ''
        """
        row = self._fetch_one("count_users_with_password", sql, {})
        return int(row["total"]) if row is not None else 0

    def get_provider_account(self, *, user_id: str, provider: str, app_id: str, open_id: str):
        sql = f"""
            SELECT {ACCOUNT_COLUMNS}
            FROM user_accounts
            WHERE user_id = :user_id
              AND provider = :provider
              AND app_id = :app_id
              AND open_id = :open_id
            LIMIT 1
        """
        row = self._fetch_one(
            "get_provider_account",
            sql,
            {
                "user_id": user_id,
                "provider": provider,
                "app_id": app_id,
                "open_id": open_id,
            },
        )
        if row is None:
            return None
        return map_row_to_provider_account(row)

    def list_provider_accounts(self, *, user_id: str, provider: str):
        sql = f"""
            SELECT {ACCOUNT_COLUMNS}
            FROM user_accounts
            WHERE user_id = :user_id
              AND provider = :provider
            ORDER BY created_at
        """
        rows = self._fetch_all("list_provider_accounts", sql, {"user_id": user_id, "provider": provider})
        return [map_row_to_provider_account(row) for row in rows]

    def create_provider_account(
        self,
        *,
        user_id: str,
        provider: str,
        app_id: str,
        open_id: str,
        kind: str,
        nickname: str | None,
        avatar_url: str | None,
        created_at: datetime,
    ):
        sql = f"""
            INSERT INTO user_accounts (
                id, user_id, provider, app_id, open_id, type, nickname, avatar_url, created_at
            ) VALUES (
                :id, :user_id, :provider, :app_id, :open_id, :type, :nickname, :avatar_url, :created_at
            )
            RETURNING {ACCOUNT_COLUMNS}
        """
        params = {
            "id": str(uuid4()),
            "user_id": user_id,
            "provider": provider,
            "app_id": app_id,
            "open_id": open_id,
            "type": kind,
            "nickname": nickname,
            "avatar_url": avatar_url,
            "created_at": created_at,
        }
        row = self._insert_returning("create_provider_account", sql, params)
        return map_row_to_provider_account(row)

    def update_provider_account_profile(
        self,
        *,
        account_id: str,
        nickname: str | None,
        avatar_url: str | None,
    ) -> None:
        sql = """
            UPDATE user_accounts
            SET nickname = :nickname,
                avatar_url = :avatar_url
            WHERE id = :account_id
        """
        self._write(
            "update_provider_account_profile",
            sql,
            {
                "account_id": account_id,
                "nickname": nickname,
                "avatar_url": avatar_url,
            },
        )

    def create_session(
        self,
        *,
        user_id: str,
        token: str,
        device_info: dict | None,
        expires_at: datetime,
        created_at: datetime,
    ):
        sql = f"""
            INSERT INTO sessions (id, user_id, token, device_info, expires_at, created_at)
            VALUES (:id, :user_id, :token, :device_info, :expires_at, :created_at)
            RETURNING {SESSION_COLUMNS}
        """
        params = {
            "id": str(uuid4()),
            "user_id": user_id,
            "token": token,
            "device_info": dump_device_info(device_info),
            "expires_at": expires_at,
            "created_at": created_at,
        }
        row = self._insert_returning("create_session", sql, params)
        return map_row_to_session(row)

    def get_session_by_token(self, *, token: str):
        sql = f"""
            SELECT {SESSION_COLUMNS}
            FROM sessions
            WHERE token = :token
            LIMIT 1
        """
        row = self._fetch_one("get_session_by_token", sql, {"token": token})
        if row is None:
            return None
        return map_row_to_session(row)

    def delete_session_by_token(self, *, token: str) -> None:
        self._write("delete_session_by_token", "DELETE FROM sessions WHERE token = :token", {"token": token})
