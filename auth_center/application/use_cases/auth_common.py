from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from auth_center.application.dto.auth import LoginOutput
from auth_center.application.ports.auth_port import AuthPort
from auth_center.application.ports.token_port import TokenPort
from auth_center.application.services.session_registry import SessionRegistry
from auth_center.domain.entities.user import User
from auth_center.domain.exceptions import StoreError


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def issue_session(
    *,
    user: User,
    auth_port: AuthPort,
    token_port: TokenPort,
    session_registry: SessionRegistry,
    device_info: dict[str, Any] | None,
    is_new_user: bool = False,
) -> LoginOutput:
    issued = token_port.issue(user_id=user.id, now=utcnow())
    # Every issued token has a session row; a store failure here aborts the login.
    session_registry.create(
        user_id=user.id,
        token=issued.token,
        now=issued.issued_at,
        device_info=device_info,
    )

    try:
        auth_port.update_user_last_login(user_id=user.id, last_login_at=issued.issued_at)
    except StoreError as exc:
        logger.warning("auth_common: last_login_update_failed user_id=%s error=%s", user.id, exc)

    return LoginOutput(
        user_id=user.id,
        union_id=user.union_id,
        token=issued.token,
        expires_at=issued.expires_at,
        is_new_user=is_new_user,
    )
