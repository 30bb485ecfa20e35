from __future__ import annotations

import base64
from dataclasses import dataclass
from functools import lru_cache

from cryptography.hazmat.primitives.asymmetric import rsa

from auth.errors import NotConfiguredError
from auth.keys import load_private_key_file, parse_private_key
from auth.tokens import TokenMinter
from config.settings import Settings, get_settings


@dataclass(frozen=True)
class Credentials:
    application_id: str = ""
    private_key: rsa.RSAPrivateKey | None = None
    api_key: str = ""
    api_secret: str = ""
    phone_number: str = ""

    @classmethod
    def from_pem(
        cls,
        *,
        application_id: str = "",
        private_key_pem: str = "",
        api_key: str = "",
        api_secret: str = "",
        phone_number: str = "",
    ) -> Credentials:
        key = parse_private_key(private_key_pem) if private_key_pem else None
        return cls(
            application_id=application_id,
            private_key=key,
            api_key=api_key,
            api_secret=api_secret,
            phone_number=phone_number,
        )

    def has_application(self) -> bool:
        return bool(self.application_id) and self.private_key is not None

    def has_api_key(self) -> bool:
        return bool(self.api_key) and bool(self.api_secret)

    def is_configured(self) -> bool:
        return self.has_application() or self.has_api_key()

    def token_minter(self) -> TokenMinter:
        if not self.has_application():
            raise NotConfiguredError("Vonage application id and private key are not configured")
        return TokenMinter(self.application_id, self.private_key)

    def basic_auth(self) -> str:
        """Return an ``Authorization`` header value for key-pair auth."""

        if not self.has_api_key():
            raise NotConfiguredError("Vonage API key and secret are not configured")
        raw = f"{self.api_key}:{self.api_secret}".encode("utf-8")
        return "Basic " + base64.b64encode(raw).decode("ascii")

    def __repr__(self) -> str:
        # Never render key material or secrets.
        return (
            f"Credentials(application_id={self.application_id!r}, "
            f"private_key={'<set>' if self.private_key else None}, "
            f"api_key={self.api_key!r}, phone_number={self.phone_number!r})"
        )


def credentials_from_settings(settings: Settings) -> Credentials:
    key: rsa.RSAPrivateKey | None = None
    if settings.vonage_private_key:
        key = parse_private_key(settings.vonage_private_key)
    elif settings.vonage_private_key_path:
        key = load_private_key_file(settings.vonage_private_key_path)

    return Credentials(
        application_id=settings.vonage_application_id or "",
        private_key=key,
        api_key=settings.vonage_api_key or "",
        api_secret=settings.vonage_api_secret or "",
        phone_number=settings.vonage_phone_number or "",
    )


@lru_cache(maxsize=1)
def get_credentials() -> Credentials:
    """Return the process-wide credentials built from settings."""

    return credentials_from_settings(get_settings())
