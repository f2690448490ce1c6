from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: str = "false") -> bool:
    return (_env(name, default) or "").strip().lower() in {"1", "true", "yes", "on"}


def _csv(name: str) -> tuple[str, ...]:
    value = _env(name, "") or ""
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    postgres_dsn: str
    jwt_secret: str
    token_ttl_days: int
    wechat_open_app_id: str
    wechat_open_app_secret: str
    wechat_mp_app_id: str
    wechat_mp_app_secret: str
    wechat_api_base: str
    wechat_timeout_seconds: float
    admin_wechat_openid: str
    allowed_callback_domains: tuple[str, ...]
    public_host: str
    auto_migrate: bool
    log_level: str
    environment: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        postgres_dsn=_env("AUTH_CENTER_DATABASE_URL", ""),
        jwt_secret=_env("AUTH_CENTER_SECRET", ""),
        token_ttl_days=int(_env("AUTH_CENTER_TOKEN_TTL_DAYS", "7")),
        wechat_open_app_id=_env("WECHAT_APP_ID", ""),
        wechat_open_app_secret=_env("WECHAT_APP_SECRET", ""),
        wechat_mp_app_id=_env("WECHAT_MP_APPID", ""),
        wechat_mp_app_secret=_env("WECHAT_MP_SECRET", ""),
        wechat_api_base=_env("WECHAT_API_BASE", "https://api.weixin.qq.com"),
        wechat_timeout_seconds=float(_env("WECHAT_TIMEOUT_SECONDS", "10")),
        admin_wechat_openid=(_env("ADMIN_WECHAT_OPENID", "") or "").strip(),
        allowed_callback_domains=_csv("ALLOWED_CALLBACK_DOMAINS"),
        public_host=_env("AUTH_CENTER_PUBLIC_HOST", ""),
        auto_migrate=_bool("AUTH_CENTER_AUTO_MIGRATE"),
        log_level=_env("LOG_LEVEL", "INFO"),
        environment=_env("APP_ENV", "development"),
    )
