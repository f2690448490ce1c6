from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from auth_center.application.dto.auth import WechatAccessToken, WechatProfile
from auth_center.application.ports.wechat_oauth_port import WechatOauthPort
from auth_center.domain.exceptions import ProviderRejectedError, ProviderUnavailableError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WechatOauthClientSettings:
    api_base: str
    timeout_seconds: float
    lang: str = "zh_CN"


def _optional_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _optional_int(payload: dict[str, Any], key: str) -> int | None:
    value = payload.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class WechatOauthClient(WechatOauthPort):
    def __init__(self, settings: WechatOauthClientSettings, *, http_client: httpx.Client | None = None):
        self._settings = settings
        self._http_client = http_client

    def exchange_code(self, *, code: str, app_id: str, app_secret: str) -> WechatAccessToken:
        payload = self._get(
            "/sns/oauth2/access_token",
            params={
                "appid": app_id,
                "secret": app_secret,
                "code": code,
                "grant_type": "authorization_code",
            },
        )
        access_token = _optional_str(payload, "access_token")
        open_id = _optional_str(payload, "openid")
        if not access_token or not open_id:
            raise ProviderRejectedError("WeChat access_token response missing access_token/openid.")

        return WechatAccessToken(
            access_token=access_token,
            open_id=open_id,
            union_id=_optional_str(payload, "unionid"),
            expires_in=_optional_int(payload, "expires_in"),
            refresh_token=_optional_str(payload, "refresh_token"),
            scope=_optional_str(payload, "scope"),
        )

    def fetch_profile(self, *, access_token: str, open_id: str) -> WechatProfile:
        payload = self._get(
            "/sns/userinfo",
            params={
                "access_token": access_token,
                "openid": open_id,
                "lang": self._settings.lang,
            },
        )
        return WechatProfile(
            open_id=_optional_str(payload, "openid"),
            nickname=_optional_str(payload, "nickname"),
            avatar_url=_optional_str(payload, "headimgurl"),
            union_id=_optional_str(payload, "unionid"),
        )

    def _get(self, path: str, *, params: dict[str, str]) -> dict[str, Any]:
        url = f"{self._settings.api_base.rstrip('/')}{path}"
        try:
            if self._http_client is not None:
                response = self._http_client.get(url, params=params, timeout=self._settings.timeout_seconds)
            else:
                with httpx.Client(timeout=self._settings.timeout_seconds) as client:
                    response = client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("wechat_oauth_client: request_failed path=%s error=%s", path, exc)
            raise ProviderUnavailableError(f"WeChat API request failed: {path}") from exc
        except ValueError as exc:
            logger.warning("wechat_oauth_client: invalid_json path=%s", path)
            raise ProviderUnavailableError(f"WeChat API returned invalid JSON: {path}") from exc

        if not isinstance(payload, dict):
            raise ProviderUnavailableError(f"WeChat API returned unexpected payload: {path}")

        errcode = _optional_int(payload, "errcode")
        if errcode:
            errmsg = _optional_str(payload, "errmsg")
            logger.warning("wechat_oauth_client: rejected path=%s errcode=%s errmsg=%s", path, errcode, errmsg)
            raise ProviderRejectedError(
                f"WeChat API error {errcode}: {errmsg}",
                errcode=errcode,
                errmsg=errmsg,
            )
        return payload
