from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from auth_center.application.dto.auth import AuthorizeUrlOutput, BuildAuthorizeUrlInput
from auth_center.domain.entities.user import Surface
from auth_center.domain.exceptions import InvalidCallbackUrlError, ProviderConfigurationError
from auth_center.domain.services.callback_url import CallbackUrlValidator


MP_AUTHORIZE_URL = "https://open.weixin.qq.com/connect/oauth2/authorize"
QR_CONNECT_URL = "https://open.weixin.qq.com/connect/qrconnect"
MP_REDIRECT_PATH = "/v1/auth/wechat/mp-redirect"
OPEN_REDIRECT_PATH = "/v1/auth/wechat/open-platform-redirect"

WECHAT_BROWSER_MARKERS = ("micromessenger", "wxwork", "wechat")


def is_wechat_browser(user_agent: str | None) -> bool:
    if not user_agent:
        return False
    lowered = user_agent.lower()
    return any(marker in lowered for marker in WECHAT_BROWSER_MARKERS)


def strip_port(host: str) -> str:
    host = host.strip()
    if host.startswith("["):
        return host.split("]", 1)[0] + "]"
    return host.split(":", 1)[0]


def append_query(url: str, params: dict[str, str]) -> str:
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(params.items())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


class BuildAuthorizeUrlUseCase:
    """Chooses the WeChat surface from the user agent and builds its authorize URL.

    The in-app browser gets the official-account flow (``snsapi_userinfo``);
    anything else gets the open-platform QR code (``snsapi_login``). The
    validated callback URL travels through the provider as ``state``.
    """

    def __init__(
        self,
        *,
        callback_validator: CallbackUrlValidator,
        open_app_id: str,
        mp_app_id: str,
        public_host: str | None,
    ):
        self._callback_validator = callback_validator
        self._open_app_id = open_app_id
        self._mp_app_id = mp_app_id
        self._public_host = public_host

    def execute(self, command: BuildAuthorizeUrlInput) -> AuthorizeUrlOutput:
        callback_url = command.callback_url or "/"
        if not self._callback_validator.is_allowed(callback_url):
            raise InvalidCallbackUrlError("Callback URL is not in the allowed domain list.")

        host = strip_port(self._public_host or command.request_host or "")
        if not host:
            raise ValueError("Unable to determine the public host.")

        surface: Surface = "mp" if is_wechat_browser(command.user_agent) else "open"
        if surface == "mp":
            app_id, base_url, path, scope = self._mp_app_id, MP_AUTHORIZE_URL, MP_REDIRECT_PATH, "snsapi_userinfo"
        else:
            app_id, base_url, path, scope = self._open_app_id, QR_CONNECT_URL, OPEN_REDIRECT_PATH, "snsapi_login"
        if not app_id:
            raise ProviderConfigurationError(f"WeChat app id for surface '{surface}' is not configured.")

        query = urlencode(
            {
                "appid": app_id,
                "redirect_uri": f"https://{host}{path}",
                "response_type": "code",
                "scope": scope,
                "state": callback_url,
            }
        )
        return AuthorizeUrlOutput(url=f"{base_url}?{query}#wechat_redirect", surface=surface)


def build_callback_redirect(
    *,
    callback_validator: CallbackUrlValidator,
    state: str | None,
    code: str,
    surface: Surface,
) -> str:
    callback_url = state or "/"
    if not callback_validator.is_allowed(callback_url):
        raise InvalidCallbackUrlError("Callback URL is not in the allowed domain list.")
    return append_query(callback_url, {"code": code, "type": surface})
