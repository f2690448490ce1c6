from __future__ import annotations

import logging
from typing import Iterable
from urllib.parse import urlsplit


logger = logging.getLogger(__name__)

ROOT_PATH = "/"
LOOPBACK_HOSTNAME = "localhost"
SECURE_SCHEME = "https"


def normalize_allowed_domains(domains: Iterable[str]) -> tuple[str, ...]:
    return tuple(domain.strip().lower() for domain in domains if domain and domain.strip())


def is_domain_match(hostname: str, allowed_domain: str) -> bool:
    if hostname == allowed_domain:
        return True
    if allowed_domain.startswith("*."):
        base_domain = allowed_domain[2:]
        if not base_domain:
            return False
        return hostname == base_domain or hostname.endswith(f".{base_domain}")
    return False


class CallbackUrlValidator:
    """Guards the OAuth ``state`` round trip against open redirects.

    An allow-list entry is either an exact hostname or ``*.domain``, the
    latter matching ``domain`` itself and any of its subdomains. A matching
    host must still use https unless it is ``localhost``.
    """

    def __init__(self, allowed_domains: Iterable[str]):
        self._allowed_domains = normalize_allowed_domains(allowed_domains)

    @property
    def allowed_domains(self) -> tuple[str, ...]:
        return self._allowed_domains

    def is_allowed(self, callback_url: str) -> bool:
        if callback_url == ROOT_PATH:
            return True

        try:
            parts = urlsplit(callback_url)
            hostname = parts.hostname
        except ValueError:
            logger.info("callback_url: rejected reason=unparseable")
            return False

        if not hostname:
            logger.info("callback_url: rejected reason=missing_hostname")
            return False

        for allowed_domain in self._allowed_domains:
            if not is_domain_match(hostname, allowed_domain):
                continue
            if hostname != LOOPBACK_HOSTNAME and parts.scheme.lower() != SECURE_SCHEME:
                logger.info(
                    "callback_url: rejected reason=insecure_scheme host=%s scheme=%s",
                    hostname,
                    parts.scheme,
                )
                return False
            return True

        logger.info("callback_url: rejected reason=host_not_allowed host=%s", hostname)
        return False
