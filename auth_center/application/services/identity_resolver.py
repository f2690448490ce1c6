from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from auth_center.application.dto.auth import ResolvedIdentity, WechatAccessToken, WechatProfile
from auth_center.application.ports.auth_port import AuthPort
from auth_center.domain.entities.user import (
    SURFACE_ACCOUNT_KIND,
    WECHAT_PROVIDER,
    ProviderAccount,
    Surface,
    User,
)
from auth_center.domain.exceptions import (
    DuplicateRecordError,
    MissingUnifyingIdentityError,
    StoreError,
)


logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def extract_union_id(
    *,
    access: WechatAccessToken,
    profile: WechatProfile,
    surface: Surface,
) -> str:
    """Pick the unionid from where the surface puts it.

    The official-account flow only returns it from ``sns/userinfo``; the
    open-platform flow returns it with the code exchange. The other location
    is the fallback.
    """
    if surface == "mp":
        candidates = (profile.union_id, access.union_id)
    else:
        candidates = (access.union_id, profile.union_id)

    for candidate in candidates:
        union_id = _clean(candidate)
        if union_id:
            return union_id

    raise MissingUnifyingIdentityError(
        "Provider returned no unionid; the application must be bound to the open platform."
    )


class IdentityResolver:
    def __init__(self, *, auth_port: AuthPort):
        self._auth_port = auth_port

    def resolve(
        self,
        *,
        access: WechatAccessToken,
        profile: WechatProfile,
        surface: Surface,
        app_id: str,
        now: datetime,
    ) -> ResolvedIdentity:
        union_id = extract_union_id(access=access, profile=profile, surface=surface)
        user, is_new_user = self._get_or_create_user(union_id=union_id, now=now)
        account = self._link_account(
            user=user,
            app_id=app_id,
            open_id=access.open_id,
            surface=surface,
            profile=profile,
            now=now,
        )
        return ResolvedIdentity(user=user, account=account, is_new_user=is_new_user)

    def _get_or_create_user(self, *, union_id: str, now: datetime) -> tuple[User, bool]:
        user = self._auth_port.get_user_by_union_id(union_id=union_id)
        if user is not None:
            return user, False

        try:
            user = self._auth_port.create_user(union_id=union_id, created_at=now)
        except DuplicateRecordError:
            logger.info("identity_resolver: user_create_race recovered=reread")
            user = self._auth_port.get_user_by_union_id(union_id=union_id)
            if user is None:
                raise StoreError("User vanished after duplicate insert.")
            return user, False

        logger.info("identity_resolver: user_created user_id=%s", user.id)
        return user, True

    def _link_account(
        self,
        *,
        user: User,
        app_id: str,
        open_id: str,
        surface: Surface,
        profile: WechatProfile,
        now: datetime,
    ) -> ProviderAccount:
        nickname = _clean(profile.nickname)
        avatar_url = _clean(profile.avatar_url)

        account = self._auth_port.get_provider_account(
            user_id=user.id,
            provider=WECHAT_PROVIDER,
            app_id=app_id,
            open_id=open_id,
        )
        if account is None:
            try:
                account = self._auth_port.create_provider_account(
                    user_id=user.id,
                    provider=WECHAT_PROVIDER,
                    app_id=app_id,
                    open_id=open_id,
                    kind=SURFACE_ACCOUNT_KIND[surface],
                    nickname=nickname,
                    avatar_url=avatar_url,
                    created_at=now,
                )
            except DuplicateRecordError:
                logger.info("identity_resolver: account_create_race user_id=%s recovered=reread", user.id)
                account = self._auth_port.get_provider_account(
                    user_id=user.id,
                    provider=WECHAT_PROVIDER,
                    app_id=app_id,
                    open_id=open_id,
                )
                if account is None:
                    raise StoreError("Provider account vanished after duplicate insert.")
            else:
                logger.info(
                    "identity_resolver: account_linked user_id=%s app_id=%s kind=%s",
                    user.id,
                    app_id,
                    account.kind,
                )
                return account

        return self._refresh_profile(account=account, nickname=nickname, avatar_url=avatar_url)

    def _refresh_profile(
        self,
        *,
        account: ProviderAccount,
        nickname: str | None,
        avatar_url: str | None,
    ) -> ProviderAccount:
        # Blank values in a fetch never erase what is stored.
        new_nickname = nickname or account.nickname
        new_avatar_url = avatar_url or account.avatar_url
        if new_nickname == account.nickname and new_avatar_url == account.avatar_url:
            return account

        self._auth_port.update_provider_account_profile(
            account_id=account.id,
            nickname=new_nickname,
            avatar_url=new_avatar_url,
        )
        return replace(account, nickname=new_nickname, avatar_url=new_avatar_url)
