from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, TypeVar

from auth_center.application.dto.auth import LoginOutput, LoginWechatInput
from auth_center.application.ports.auth_port import AuthPort
from auth_center.application.ports.token_port import TokenPort
from auth_center.application.ports.wechat_oauth_port import WechatOauthPort
from auth_center.application.services.identity_resolver import IdentityResolver
from auth_center.application.services.session_registry import SessionRegistry
from auth_center.domain.exceptions import ProviderConfigurationError, ProviderUnavailableError

from .auth_common import issue_session, utcnow


logger = logging.getLogger(__name__)

TProviderResult = TypeVar("TProviderResult")


@dataclass(frozen=True)
class WechatAppCredentials:
    app_id: str
    app_secret: str


class LoginWechatUseCase:
    def __init__(
        self,
        *,
        auth_port: AuthPort,
        wechat_oauth_port: WechatOauthPort,
        identity_resolver: IdentityResolver,
        token_port: TokenPort,
        session_registry: SessionRegistry,
        open_credentials: WechatAppCredentials,
        mp_credentials: WechatAppCredentials,
    ):
        self._auth_port = auth_port
        self._wechat_oauth_port = wechat_oauth_port
        self._identity_resolver = identity_resolver
        self._token_port = token_port
        self._session_registry = session_registry
        self._credentials = {
            "open": open_credentials,
            "mp": mp_credentials,
        }

    def execute(self, command: LoginWechatInput) -> LoginOutput:
        code = command.code.strip()
        if not code:
            raise ValueError("code is required.")

        credentials = self._credentials.get(command.surface)
        if credentials is None:
            raise ValueError(f"Unsupported login surface: {command.surface}.")
        if not credentials.app_id or not credentials.app_secret:
            raise ProviderConfigurationError(
                f"WeChat credentials for surface '{command.surface}' are not configured."
            )

        access = _call_provider(
            "exchange_code",
            lambda: self._wechat_oauth_port.exchange_code(
                code=code,
                app_id=credentials.app_id,
                app_secret=credentials.app_secret,
            ),
        )
        profile = _call_provider(
            "fetch_profile",
            lambda: self._wechat_oauth_port.fetch_profile(
                access_token=access.access_token,
                open_id=access.open_id,
            ),
        )

        resolved = self._identity_resolver.resolve(
            access=access,
            profile=profile,
            surface=command.surface,
            app_id=credentials.app_id,
            now=utcnow(),
        )

        output = issue_session(
            user=resolved.user,
            auth_port=self._auth_port,
            token_port=self._token_port,
            session_registry=self._session_registry,
            device_info=command.device_info,
            is_new_user=resolved.is_new_user,
        )
        logger.info(
            "login_wechat: succeeded user_id=%s surface=%s new_user=%s",
            output.user_id,
            command.surface,
            output.is_new_user,
        )
        return output


def _call_provider(name: str, fn: Callable[[], TProviderResult]) -> TProviderResult:
    try:
        return fn()
    except ProviderUnavailableError as exc:
        logger.warning("login_wechat: provider_retry call=%s error=%s", name, exc)
    return fn()
