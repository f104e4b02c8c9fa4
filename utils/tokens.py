"""
Token codec: signs and verifies the three token classes (PyJWT).

- access:  short-lived, proves identity for protected routes
- refresh: long-lived, redeemable once for a new pair
- reset:   one-hour password reset token

Every class has its own secret. Verification is signature + expiry only;
the store is never consulted here.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

import jwt

from utils.security import generate_jti

ACCESS = "access"
REFRESH = "refresh"
RESET = "reset"
TOKEN_CLASSES = (ACCESS, REFRESH, RESET)


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidSignature(TokenError):
    """Bad signature, malformed token, wrong class or missing claims."""


class TokenExpired(TokenError):
    """Signature is fine but the token is past its exp claim."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    token_version: int


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenCodec:
    """Stateless JWT signer/verifier configured by an AuthSettings instance."""

    def __init__(self, settings):
        self.settings = settings
        self._secrets = {
            ACCESS: settings.access_secret,
            REFRESH: settings.refresh_secret,
            RESET: settings.reset_secret,
        }
        self._lifetimes = {
            ACCESS: settings.access_ttl,
            REFRESH: settings.refresh_ttl,
            RESET: settings.reset_ttl,
        }

    def lifetime(self, token_class: str):
        return self._lifetimes[token_class]

    def _encode(self, token_class: str, claims: Dict[str, Any]) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "iss": self.settings.issuer,
            "iat": now,
            "exp": now + self._lifetimes[token_class],
            "type": token_class,
            "jti": generate_jti(),
        }
        return jwt.encode(payload, self._secrets[token_class], algorithm=self.settings.algorithm)

    def _decode(self, token: str, token_class: str) -> Dict[str, Any]:
        if token_class not in TOKEN_CLASSES:
            raise ValueError(f"Unknown token class: {token_class}")
        if not token or not isinstance(token, str):
            raise InvalidSignature("Token is empty")
        try:
            decoded = jwt.decode(
                token,
                self._secrets[token_class],
                algorithms=[self.settings.algorithm],
                issuer=self.settings.issuer,
                options={"require": ["exp", "iat", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidSignature(f"Invalid token: {exc}") from exc

        if decoded.get("type") != token_class:
            raise InvalidSignature("Wrong token type")
        return decoded

    def issue(self, user_id: str, token_version: int) -> TokenPair:
        claims = {"userId": str(user_id), "tokenVersion": int(token_version)}
        return TokenPair(
            access_token=self._encode(ACCESS, claims),
            refresh_token=self._encode(REFRESH, claims),
        )

    def issue_reset(self, user_id: str) -> str:
        return self._encode(RESET, {"userId": str(user_id)})

    def verify(self, token: str, token_class: str = ACCESS) -> TokenClaims:
        """
        Decode and validate a token of the given class.
        Raises InvalidSignature or TokenExpired.
        """
        decoded = self._decode(token, token_class)
        user_id = decoded.get("userId")
        if not user_id:
            raise InvalidSignature("Token has no userId claim")
        token_version = decoded.get("tokenVersion", 0 if token_class == RESET else None)
        if isinstance(token_version, bool) or not isinstance(token_version, int):
            raise InvalidSignature("Token has no usable tokenVersion claim")
        return TokenClaims(user_id=str(user_id), token_version=token_version)
