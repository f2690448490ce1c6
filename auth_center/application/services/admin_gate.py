from __future__ import annotations

import logging

from auth_center.application.ports.auth_port import AuthPort
from auth_center.domain.entities.user import WECHAT_PROVIDER, User


logger = logging.getLogger(__name__)


class AdminGate:
    """Single-administrator check against the configured WeChat openid.

    Fails closed: no configured openid, or no linked WeChat account carrying
    it, means the user is not an administrator.
    """

    def __init__(self, *, auth_port: AuthPort, admin_open_id: str | None):
        self._auth_port = auth_port
        self._admin_open_id = (admin_open_id or "").strip()

    def is_administrator(self, user: User) -> bool:
        if not self._admin_open_id:
            logger.warning("admin_gate: admin_openid_not_configured user_id=%s", user.id)
            return False

        accounts = self._auth_port.list_provider_accounts(user_id=user.id, provider=WECHAT_PROVIDER)
        if any(account.open_id == self._admin_open_id for account in accounts):
            return True

        logger.info("admin_gate: denied user_id=%s linked_accounts=%s", user.id, len(accounts))
        return False
