"""JWT generation for Vonage API authentication."""

from __future__ import annotations

import logging
import math
import time
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa

from auth.errors import SigningError, SigningKeyMissingError

LOGGER = logging.getLogger(__name__)

API_TOKEN_TTL = timedelta(minutes=5)
SIGNING_ALGORITHM = "RS256"


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(value, tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class Token:
    signed_value: str
    issued_at: datetime
    expires_at: datetime
    claims: dict[str, Any] = field(default_factory=dict)


class TokenMinter:
    """Signs short-lived application JWTs.

    Tokens are never cached: callers mint one per outbound request. Claims
    passed in ``extra_claims`` are merged over the standard ``iat``/``exp``/
    ``jti``/``application_id`` set, so a caller that sets ``iat`` or ``exp``
    overrides the computed values on purpose.
    """

    def __init__(
        self,
        application_id: str,
        private_key: rsa.RSAPrivateKey | None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._application_id = application_id
        self._private_key = private_key
        self._clock = clock

    @property
    def application_id(self) -> str:
        return self._application_id

    def mint_token(self, ttl: timedelta, extra_claims: Mapping[str, Any] | None = None) -> Token:
        if self._private_key is None:
            raise SigningKeyMissingError()
        if ttl <= timedelta(0):
            raise ValueError("Token ttl must be positive.")

        issued_at = int(self._clock())
        claims: dict[str, Any] = {
            "iat": issued_at,
            # Round up so a sub-second ttl still expires after it was issued.
            "exp": issued_at + math.ceil(ttl.total_seconds()),
            "jti": str(uuid.uuid4()),
            "application_id": self._application_id,
        }
        if extra_claims:
            claims.update(extra_claims)

        try:
            signed = jwt.encode(claims, self._private_key, algorithm=SIGNING_ALGORITHM)
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            LOGGER.error("JWT signing failed for application %s: %s", self._application_id, exc)
            raise SigningError(f"failed to sign JWT: {exc}") from exc

        return Token(
            signed_value=signed,
            issued_at=_as_datetime(claims["iat"]),
            expires_at=_as_datetime(claims["exp"]),
            claims=claims,
        )

    def mint(self, ttl: timedelta, extra_claims: Mapping[str, Any] | None = None) -> str:
        """Return a signed JWT suitable for an ``Authorization: Bearer`` header."""

        return self.mint_token(ttl, extra_claims).signed_value

    def mint_api_token(self) -> str:
        """Return a 5 minute token for REST API calls."""

        return self.mint(API_TOKEN_TTL)
