from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from auth_center.application.services.admin_gate import AdminGate
from auth_center.application.services.identity_resolver import IdentityResolver
from auth_center.application.services.session_registry import SessionRegistry
from auth_center.application.use_cases.build_authorize_url import BuildAuthorizeUrlUseCase
from auth_center.application.use_cases.list_users import ListUsersUseCase
from auth_center.application.use_cases.login_password import LoginPasswordUseCase
from auth_center.application.use_cases.login_wechat import LoginWechatUseCase, WechatAppCredentials
from auth_center.application.use_cases.logout_session import LogoutSessionUseCase
from auth_center.application.use_cases.set_phone_password import SetPhonePasswordUseCase
from auth_center.application.use_cases.verify_token import VerifyTokenUseCase
from auth_center.domain.entities.user import User
from auth_center.domain.exceptions import ForbiddenError, NotFoundError, StoreError, TokenError
from auth_center.domain.services.callback_url import CallbackUrlValidator
from auth_center.infrastructure.clients.wechat_oauth_client import (
    WechatOauthClient,
    WechatOauthClientSettings,
)
from auth_center.infrastructure.db.engine import get_engine
from auth_center.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from auth_center.infrastructure.security.password_hasher import PasswordHasher
from auth_center.infrastructure.security.token_service import JwtTokenService
from auth_center.shared.config import get_settings


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="AUTH_CENTER_DATABASE_URL is required.")
    return get_engine(settings.postgres_dsn)


def _get_accounts_repository() -> SqlAccountsRepository:
    return SqlAccountsRepository(_get_db_engine())


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def _get_token_service() -> JwtTokenService:
    settings = get_settings()
    if not settings.jwt_secret:
        raise HTTPException(status_code=500, detail="AUTH_CENTER_SECRET is required.")
    return JwtTokenService(
        jwt_secret=settings.jwt_secret,
        lifetime=timedelta(days=settings.token_ttl_days),
    )


@lru_cache(maxsize=1)
def _get_wechat_oauth_client() -> WechatOauthClient:
    settings = get_settings()
    return WechatOauthClient(
        WechatOauthClientSettings(
            api_base=settings.wechat_api_base,
            timeout_seconds=settings.wechat_timeout_seconds,
        )
    )


@lru_cache(maxsize=1)
def get_callback_validator() -> CallbackUrlValidator:
    return CallbackUrlValidator(get_settings().allowed_callback_domains)


def _get_session_registry() -> SessionRegistry:
    return SessionRegistry(
        auth_port=_get_accounts_repository(),
        lifetime=_get_token_service().lifetime,
    )


def get_admin_gate() -> AdminGate:
    return AdminGate(
        auth_port=_get_accounts_repository(),
        admin_open_id=get_settings().admin_wechat_openid,
    )


def get_login_wechat_use_case() -> LoginWechatUseCase:
    settings = get_settings()
    auth_port = _get_accounts_repository()
    return LoginWechatUseCase(
        auth_port=auth_port,
        wechat_oauth_port=_get_wechat_oauth_client(),
        identity_resolver=IdentityResolver(auth_port=auth_port),
        token_port=_get_token_service(),
        session_registry=_get_session_registry(),
        open_credentials=WechatAppCredentials(
            app_id=settings.wechat_open_app_id,
            app_secret=settings.wechat_open_app_secret,
        ),
        mp_credentials=WechatAppCredentials(
            app_id=settings.wechat_mp_app_id,
            app_secret=settings.wechat_mp_app_secret,
        ),
    )


def get_login_password_use_case() -> LoginPasswordUseCase:
    return LoginPasswordUseCase(
        auth_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
        token_port=_get_token_service(),
        session_registry=_get_session_registry(),
    )


def get_verify_token_use_case() -> VerifyTokenUseCase:
    return VerifyTokenUseCase(
        auth_port=_get_accounts_repository(),
        token_port=_get_token_service(),
        session_registry=_get_session_registry(),
    )


def get_logout_session_use_case() -> LogoutSessionUseCase:
    return LogoutSessionUseCase(session_registry=_get_session_registry())


def get_build_authorize_url_use_case() -> BuildAuthorizeUrlUseCase:
    settings = get_settings()
    return BuildAuthorizeUrlUseCase(
        callback_validator=get_callback_validator(),
        open_app_id=settings.wechat_open_app_id,
        mp_app_id=settings.wechat_mp_app_id,
        public_host=settings.public_host,
    )


def get_set_phone_password_use_case() -> SetPhonePasswordUseCase:
    return SetPhonePasswordUseCase(
        auth_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
    )


def get_list_users_use_case() -> ListUsersUseCase:
    return ListUsersUseCase(auth_port=_get_accounts_repository())


def get_bearer_token(authorization: str = Header(...)) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header.")
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing access token.")
    return token


def get_current_user(
    token: str = Depends(get_bearer_token),
    use_case: VerifyTokenUseCase = Depends(get_verify_token_use_case),
) -> User:
    try:
        return use_case.execute(token=token)
    except (TokenError, NotFoundError) as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


def require_admin(
    user: User = Depends(get_current_user),
    admin_gate: AdminGate = Depends(get_admin_gate),
) -> User:
    try:
        is_admin = admin_gate.is_administrator(user)
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    if not is_admin:
        raise HTTPException(
            status_code=403,
            detail=str(ForbiddenError("Administrator permission required.")),
        )
    return user
