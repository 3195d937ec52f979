"""HS256 session tokens carrying a user name and client address."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jwt

DEFAULT_USER_NAME = "ckman"
DEFAULT_SIGNING_KEY = "secret"

_ALGORITHM = "HS256"
_STANDARD_CLAIMS = (
    ("audience", "aud"),
    ("expires_at", "exp"),
    ("id", "jti"),
    ("issued_at", "iat"),
    ("issuer", "iss"),
    ("not_before", "nbf"),
    ("subject", "sub"),
)
_INT_CLAIMS = {"expires_at", "issued_at", "not_before"}


class TokenInvalidError(ValueError):
    """Raised when a token cannot be verified."""


@dataclass
class CustomClaims:
    name: str = ""
    client_ip: str = ""
    audience: str = ""
    expires_at: int = 0
    id: str = ""
    issued_at: int = 0
    issuer: str = ""
    not_before: int = 0
    subject: str = ""


def _to_payload(claims: CustomClaims) -> dict[str, Any]:
    payload: dict[str, Any] = {
        wire: getattr(claims, attr) for attr, wire in _STANDARD_CLAIMS if getattr(claims, attr)
    }
    payload["name"] = claims.name
    payload["clientIp"] = claims.client_ip
    return payload


def _from_payload(payload: dict[str, Any]) -> CustomClaims:
    values: dict[str, Any] = {}
    for attr, wire in _STANDARD_CLAIMS:
        if wire not in payload:
            continue
        raw = payload[wire]
        if attr in _INT_CLAIMS:
            values[attr] = int(raw)
        elif isinstance(raw, list):
            values[attr] = ",".join(str(item) for item in raw)
        else:
            values[attr] = str(raw)
    values["name"] = str(payload.get("name", ""))
    values["client_ip"] = str(payload.get("clientIp", ""))
    return CustomClaims(**values)


class JWT:
    """Signs and verifies tokens with a shared HMAC key."""

    def __init__(self, signing_key: str | bytes = DEFAULT_SIGNING_KEY) -> None:
        self.signing_key = signing_key.encode() if isinstance(signing_key, str) else signing_key

    def create_token(self, claims: CustomClaims) -> str:
        return jwt.encode(_to_payload(claims), self.signing_key, algorithm=_ALGORITHM)

    def parse_token(self, token: str) -> CustomClaims:
        """Verify ``token`` and return its claims, or raise :class:`TokenInvalidError`."""
        try:
            payload = jwt.decode(
                token,
                self.signing_key,
                algorithms=[_ALGORITHM],
                options={"verify_aud": False},
            )
            return _from_payload(payload)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise TokenInvalidError(f"token invalid: {exc}") from exc