"""Domain-specific exceptions for provider operations.

These exceptions are safe to import from API layers without pulling in the
HTTP clients or the crypto backend.
"""

from __future__ import annotations


class ProviderError(Exception):
    status_code: int = 500
    default_detail: str = "Provider error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class KeyFormatError(ProviderError):
    default_detail = "Private key is not a valid PEM encoded key."


class KeyTypeError(ProviderError):
    default_detail = "Private key is not an RSA key."


class SigningKeyMissingError(ProviderError):
    default_detail = "Private key not configured."


class SigningError(ProviderError):
    default_detail = "Failed to sign JWT."


class TokenExpiryError(ProviderError):
    status_code = 400
    default_detail = "Token expire time must be in the future."


class NotConfiguredError(ProviderError):
    status_code = 503
    default_detail = "Vonage credentials not configured."


class SessionNotFoundError(ProviderError):
    status_code = 404
    default_detail = "Session not found."


class SessionExpiredError(ProviderError):
    status_code = 410
    default_detail = "Session expired."


class SessionCreationError(ProviderError):
    status_code = 502
    default_detail = "Failed to create video session."


class UnrecognizedFormatError(ProviderError):
    status_code = 400
    default_detail = "Unknown inbound webhook format."


class ProviderAPIError(ProviderError):
    """Non-success response from a Vonage REST API."""

    status_code = 502
    default_detail = "Vonage API error"

    def __init__(self, upstream_status: int, body: str = "", detail: str | None = None) -> None:
        self.upstream_status = upstream_status
        self.body = body
        if detail is None:
            detail = f"vonage: status {upstream_status} - {body}" if body else f"vonage: status {upstream_status}"
        super().__init__(detail)

    def is_not_found(self) -> bool:
        return self.upstream_status == 404

    def is_unauthorized(self) -> bool:
        return self.upstream_status == 401

    def is_forbidden(self) -> bool:
        return self.upstream_status == 403

    def is_rate_limited(self) -> bool:
        return self.upstream_status == 429
