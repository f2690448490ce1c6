from __future__ import annotations

from typing import Protocol

from auth_center.application.dto.auth import WechatAccessToken, WechatProfile


class WechatOauthPort(Protocol):
    def exchange_code(self, *, code: str, app_id: str, app_secret: str) -> WechatAccessToken:
        ...

    def fetch_profile(self, *, access_token: str, open_id: str) -> WechatProfile:
        ...
