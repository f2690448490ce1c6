from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query
from fastapi.responses import RedirectResponse

from auth_center.api.deps import (
    get_bearer_token,
    get_build_authorize_url_use_case,
    get_callback_validator,
    get_current_user,
    get_login_password_use_case,
    get_login_wechat_use_case,
    get_logout_session_use_case,
    get_verify_token_use_case,
)
from auth_center.api.schemas.auth import (
    LoginResponse,
    PasswordLoginRequest,
    SuccessResponse,
    UserInfoResponse,
    VerifiedUserData,
    VerifyTokenRequest,
    VerifyTokenResponse,
    WechatLoginRequest,
)
from auth_center.application.dto.auth import (
    BuildAuthorizeUrlInput,
    LoginOutput,
    LoginPasswordInput,
    LoginWechatInput,
    LogoutInput,
)
from auth_center.application.use_cases.build_authorize_url import (
    BuildAuthorizeUrlUseCase,
    build_callback_redirect,
)
from auth_center.application.use_cases.login_password import LoginPasswordUseCase
from auth_center.application.use_cases.login_wechat import LoginWechatUseCase
from auth_center.application.use_cases.logout_session import LogoutSessionUseCase
from auth_center.application.use_cases.verify_token import VerifyTokenUseCase
from auth_center.domain.entities.user import Surface, User
from auth_center.domain.exceptions import (
    InvalidCallbackUrlError,
    InvalidCredentialsError,
    MissingUnifyingIdentityError,
    NotFoundError,
    ProviderConfigurationError,
    ProviderError,
    StoreError,
    TokenError,
)
from auth_center.domain.services.callback_url import CallbackUrlValidator


router = APIRouter()


def _device_info(user_agent: str | None, ip: str | None) -> dict | None:
    info = {key: value for key, value in {"user_agent": user_agent, "ip": ip}.items() if value}
    return info or None


def _login_response(output: LoginOutput) -> LoginResponse:
    return LoginResponse(
        token=output.token,
        user_id=output.user_id,
        expires_at=output.expires_at,
    )


@router.get("/v1/auth/wechat/login")
def wechat_login_redirect(
    callback_url: str = Query(default="/", alias="callbackUrl"),
    user_agent: str | None = Header(default=None),
    x_forwarded_host: str | None = Header(default=None),
    host: str | None = Header(default=None),
    use_case: BuildAuthorizeUrlUseCase = Depends(get_build_authorize_url_use_case),
):
    try:
        output = use_case.execute(
            BuildAuthorizeUrlInput(
                callback_url=callback_url,
                user_agent=user_agent,
                request_host=x_forwarded_host or host,
            )
        )
    except InvalidCallbackUrlError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProviderConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return RedirectResponse(url=output.url, status_code=302)


def _provider_redirect(
    *,
    code: str | None,
    state: str | None,
    surface: Surface,
    validator: CallbackUrlValidator,
) -> RedirectResponse:
    if not code:
        raise HTTPException(status_code=400, detail="Missing authorization code.")
    try:
        url = build_callback_redirect(
            callback_validator=validator,
            state=state,
            code=code,
            surface=surface,
        )
    except InvalidCallbackUrlError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return RedirectResponse(url=url, status_code=302)


@router.get("/v1/auth/wechat/mp-redirect")
def wechat_mp_redirect(
    code: str | None = None,
    state: str | None = None,
    validator: CallbackUrlValidator = Depends(get_callback_validator),
):
    return _provider_redirect(code=code, state=state, surface="mp", validator=validator)


@router.get("/v1/auth/wechat/open-platform-redirect")
def wechat_open_platform_redirect(
    code: str | None = None,
    state: str | None = None,
    validator: CallbackUrlValidator = Depends(get_callback_validator),
):
    return _provider_redirect(code=code, state=state, surface="open", validator=validator)


@router.post("/v1/auth/wechat/open-platform-redirect")
def wechat_open_platform_redirect_post(
    code: str | None = None,
    state: str | None = None,
    body_code: str | None = Body(default=None, alias="code", embed=True),
    validator: CallbackUrlValidator = Depends(get_callback_validator),
):
    return _provider_redirect(code=code or body_code, state=state, surface="open", validator=validator)


@router.post("/v1/auth/wechat/login", response_model=LoginResponse)
def wechat_login(
    req: WechatLoginRequest,
    user_agent: str | None = Header(default=None),
    x_forwarded_for: str | None = Header(default=None),
    use_case: LoginWechatUseCase = Depends(get_login_wechat_use_case),
):
    try:
        output = use_case.execute(
            LoginWechatInput(
                code=req.code,
                surface=req.type,
                device_info=_device_info(user_agent, x_forwarded_for),
            )
        )
    except MissingUnifyingIdentityError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProviderConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ProviderError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return _login_response(output)


@router.post("/v1/auth/password/login", response_model=LoginResponse)
def password_login(
    req: PasswordLoginRequest,
    user_agent: str | None = Header(default=None),
    x_forwarded_for: str | None = Header(default=None),
    use_case: LoginPasswordUseCase = Depends(get_login_password_use_case),
):
    try:
        output = use_case.execute(
            LoginPasswordInput(
                phone_number=req.phone_number,
                password=req.password,
                device_info=_device_info(user_agent, x_forwarded_for),
            )
        )
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return _login_response(output)


@router.post("/v1/auth/verify-token", response_model=VerifyTokenResponse)
def verify_token(
    req: VerifyTokenRequest,
    use_case: VerifyTokenUseCase = Depends(get_verify_token_use_case),
):
    try:
        user = use_case.execute(token=req.token)
    except (TokenError, NotFoundError) as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return VerifyTokenResponse(data=VerifiedUserData(user_id=user.id, union_id=user.union_id))


@router.get("/v1/auth/me", response_model=UserInfoResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return UserInfoResponse(
        user_id=current_user.id,
        union_id=current_user.union_id,
        phone_number=current_user.phone_number,
        email=current_user.email,
        last_login_at=current_user.last_login_at,
    )


@router.post("/v1/auth/signout", response_model=SuccessResponse)
def signout(
    token: str = Depends(get_bearer_token),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
):
    try:
        use_case.execute(LogoutInput(token=token))
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return SuccessResponse()
