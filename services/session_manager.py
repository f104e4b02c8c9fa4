"""
Session manager: registration, login, refresh-token rotation, logout,
logout-all and password reset.

Refresh tokens move Active -> Rotated (replaced_by_token set) or
Active -> Revoked, and expire by time. Nothing ever goes back to Active.
A refresh token is redeemable only while its row is unrevoked, unexpired and
its embedded tokenVersion equals the user's current token_version.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from models.base_model import utcnow
from models.credential_store import CredentialStore, MalformedRecord, UserRecord
from services.exceptions import Conflict, Forbidden, InternalError, InvalidRequest, NotFound, Unauthorized
from utils.security import hash_password, verify_password
from utils.tokens import REFRESH, RESET, TokenCodec, TokenError, TokenPair

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid or revoked refresh token"
INVALID_RESET_TOKEN = "Invalid or expired reset token"


@dataclass(frozen=True)
class LoginResult:
    tokens: TokenPair
    user_id: str
    role: str


class SessionManager:

    def __init__(self, store: CredentialStore, codec: TokenCodec, mailer=None):
        self.store = store
        self.codec = codec
        self.mailer = mailer

    def _lookup(self, find, key):
        """Run a store lookup; a corrupt row is a server fault, not a client one."""
        try:
            return find(key)
        except MalformedRecord:
            logger.exception("Corrupt credential row")
            raise InternalError("Stored credentials are unreadable")

    def register(self, email: str, password: str, name: str | None = None) -> UserRecord:
        if not email or not password:
            raise InvalidRequest("Email and password required")
        if self.store.find_user_by_email(email):
            raise Conflict("User already exists.")
        try:
            user = self.store.create_user(email, hash_password(password), name=name)
        except IntegrityError:
            # lost a race against a concurrent registration of the same email
            raise Conflict("User already exists.")
        logger.info("Registered user %s", user.id)
        return user

    def login(self, email: str, password: str) -> LoginResult:
        if not email or not password:
            raise InvalidRequest("Email and password required")
        user = self._lookup(self.store.find_user_by_email, email)
        if not user or not verify_password(password, user.password_hash):
            raise Unauthorized(INVALID_CREDENTIALS)

        tokens = self.codec.issue(user.id, user.token_version)
        self.store.insert_refresh_token(
            user.id, tokens.refresh_token, utcnow() + self.codec.lifetime(REFRESH)
        )
        logger.info("User %s logged in", user.id)
        return LoginResult(tokens=tokens, user_id=user.id, role=user.role)

    def refresh(self, refresh_token: str) -> TokenPair:
        if not refresh_token:
            raise InvalidRequest("Refresh token required")
        try:
            claims = self.codec.verify(refresh_token, REFRESH)
        except TokenError as exc:
            logger.debug("Refresh token rejected: %s", exc)
            raise Forbidden("Invalid refresh token")

        row = self._lookup(self.store.find_refresh_token, refresh_token)
        if row is None or row.user_id != claims.user_id or row.revoked:
            if row is not None and row.replaced_by_token:
                logger.warning("Rotated refresh token presented again for user %s", claims.user_id)
            raise Forbidden(INVALID_REFRESH_TOKEN)
        if row.is_expired():
            raise Forbidden("Refresh token expired")

        current_version = self.store.get_token_version(claims.user_id)
        if current_version is None or current_version != claims.token_version:
            raise Forbidden("Token version mismatch")

        tokens = self.codec.issue(claims.user_id, current_version)
        rotated = self.store.rotate_refresh_token(
            refresh_token,
            tokens.refresh_token,
            claims.user_id,
            utcnow() + self.codec.lifetime(REFRESH),
        )
        if not rotated:
            logger.warning("Concurrent refresh lost the rotation race for user %s", claims.user_id)
            raise Forbidden(INVALID_REFRESH_TOKEN)
        return tokens

    def logout(self, refresh_token: str, user_id: str) -> None:
        """Revoke one refresh token. Unknown or already revoked tokens are fine."""
        if not refresh_token:
            raise InvalidRequest("Refresh token required")
        self.store.revoke_refresh_token(refresh_token, user_id)

    def logout_all(self, user_id: str) -> int:
        revoked = self.store.revoke_all_refresh_tokens(user_id)
        self.store.bump_token_version(user_id)
        logger.info("Logged out user %s everywhere (%d sessions revoked)", user_id, revoked)
        return revoked

    def get_profile(self, user_id: str) -> UserRecord:
        user = self._lookup(self.store.find_user_by_id, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def verify_email(self, user_id: str) -> None:
        if not self.store.mark_email_verified(user_id):
            raise NotFound("User not found")

    def request_password_reset(self, email: str) -> str | None:
        """
        Store a reset token for the account and mail it. Unknown emails are
        a silent no-op so the endpoint cannot be used to probe accounts.
        """
        if not email:
            raise InvalidRequest("Email required")
        user = self.store.find_user_by_email(email)
        if user is None:
            return None
        reset_token = self.codec.issue_reset(user.id)
        self.store.store_reset_token(user.id, reset_token, utcnow() + self.codec.lifetime(RESET))
        if self.mailer is not None:
            self.mailer.send_password_reset(user.email, reset_token)
        return reset_token

    def reset_password(self, reset_token: str, new_password: str) -> None:
        if not reset_token or not new_password:
            raise InvalidRequest("Reset token and new password required")
        try:
            claims = self.codec.verify(reset_token, RESET)
        except TokenError:
            raise InvalidRequest(INVALID_RESET_TOKEN)

        user = self.store.find_user_by_reset_token(reset_token)
        if (
            user is None
            or user.id != claims.user_id
            or user.reset_token_expiry is None
            or user.reset_token_expiry <= utcnow()
        ):
            raise InvalidRequest(INVALID_RESET_TOKEN)

        if not self.store.consume_reset_token(user.id, reset_token, hash_password(new_password)):
            raise InvalidRequest(INVALID_RESET_TOKEN)
        logger.info("Password reset for user %s", user.id)
