from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class ProviderError(DomainError):
    """Identity provider call failed."""


class ProviderRejectedError(ProviderError):
    """Provider answered with a non-zero errcode."""

    def __init__(self, message: str, *, errcode: int | None = None, errmsg: str | None = None):
        super().__init__(message)
        self.errcode = errcode
        self.errmsg = errmsg


class ProviderUnavailableError(ProviderError):
    """Provider could not be reached or answered garbage."""


class ProviderConfigurationError(ProviderError):
    """App credentials for the requested surface are not configured."""


class MissingUnifyingIdentityError(DomainError):
    """Provider result carries no unionid in either location."""


class StoreError(DomainError):
    """Persistence failed."""


class DuplicateRecordError(StoreError):
    """A unique constraint rejected the insert."""


class TokenError(DomainError):
    """Access token could not be accepted."""


class SignatureInvalidError(TokenError):
    """Signature or algorithm mismatch."""


class TokenExpiredError(TokenError):
    """Token lifetime is over."""


class MalformedTokenError(TokenError):
    """Token could not be decoded."""


class NotFoundError(DomainError):
    """Session or user absent (or the session expired)."""


class ForbiddenError(DomainError):
    """Administrator capability required."""


class InvalidCallbackUrlError(DomainError):
    """Callback URL is not in the allow-list."""


class InvalidCredentialsError(DomainError):
    """Phone number or password mismatch."""


class PhoneNumberInUseError(DomainError):
    """Phone number already belongs to another user."""
