"""
Credential store: every read and write of user credentials and refresh-token
rows goes through here.

Rows are handed out as frozen records rather than live ORM objects, so callers
work on a snapshot and the only way to change state is one of the write
methods below. Constructors reject rows with missing or malformed columns.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func

from models.base_model import as_utc, utcnow
from models.refresh_token import RefreshToken
from models.user import User

ROLES = ("admin", "user")


class MalformedRecord(ValueError):
    """A stored row does not have the shape the auth core relies on."""


def _require(row, name):
    value = getattr(row, name, None)
    if value is None:
        raise MalformedRecord(f"{type(row).__name__}.{name} is missing")
    return value


@dataclass(frozen=True)
class UserRecord:
    id: str
    email: str
    password_hash: str
    role: str
    token_version: int
    name: Optional[str] = None
    email_verified: bool = False
    reset_token: Optional[str] = None
    reset_token_expiry: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: User) -> "UserRecord":
        role = _require(row, "role")
        if role not in ROLES:
            raise MalformedRecord(f"User.role {role!r} is not one of {ROLES}")
        token_version = _require(row, "token_version")
        if not isinstance(token_version, int) or token_version < 0:
            raise MalformedRecord("User.token_version must be a non-negative integer")
        return cls(
            id=str(_require(row, "id")),
            email=_require(row, "email"),
            password_hash=_require(row, "password_hash"),
            role=role,
            token_version=token_version,
            name=row.name,
            email_verified=bool(row.email_verified),
            reset_token=row.reset_token,
            reset_token_expiry=as_utc(row.reset_token_expiry),
        )


@dataclass(frozen=True)
class RefreshTokenRecord:
    id: str
    user_id: str
    token: str
    revoked: bool
    expires_at: datetime
    replaced_by_token: Optional[str] = None

    @classmethod
    def from_row(cls, row: RefreshToken) -> "RefreshTokenRecord":
        expires_at = _require(row, "expires_at")
        if not isinstance(expires_at, datetime):
            raise MalformedRecord("RefreshToken.expires_at must be a datetime")
        return cls(
            id=str(_require(row, "id")),
            user_id=str(_require(row, "user_id")),
            token=_require(row, "token"),
            revoked=bool(_require(row, "revoked")),
            expires_at=as_utc(expires_at),
            replaced_by_token=row.replaced_by_token,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or utcnow())


class CredentialStore:
    """Users and refresh tokens over a DBStorage (scoped session per thread)."""

    def __init__(self, storage, email_case_insensitive: bool = False):
        self.storage = storage
        self.email_case_insensitive = email_case_insensitive

    @property
    def session(self):
        return self.storage.get_session()

    def normalize_email(self, email: str) -> str:
        email = email.strip()
        return email.lower() if self.email_case_insensitive else email

    # users

    def find_user_by_email(self, email: str) -> UserRecord | None:
        email = self.normalize_email(email)
        query = self.session.query(User).populate_existing()
        if self.email_case_insensitive:
            query = query.filter(func.lower(User.email) == email)
        else:
            query = query.filter(User.email == email)
        row = query.first()
        return UserRecord.from_row(row) if row else None

    def find_user_by_id(self, user_id: str) -> UserRecord | None:
        row = self.session.get(User, user_id, populate_existing=True)
        return UserRecord.from_row(row) if row else None

    def get_token_version(self, user_id: str) -> int | None:
        version = (
            self.session.query(User.token_version)
            .filter(User.id == user_id)
            .scalar()
        )
        return version

    def create_user(self, email: str, password_hash: str, name: str | None = None,
                    role: str = "user") -> UserRecord:
        user = User(
            email=self.normalize_email(email),
            password_hash=password_hash,
            name=name,
            role=role,
            token_version=0,
            email_verified=False,
        )
        self.storage.new(user)
        self.storage.save()
        return UserRecord.from_row(user)

    def bump_token_version(self, user_id: str) -> int:
        """Increment token_version in SQL and commit; returns affected rows."""
        affected = (
            self.session.query(User)
            .filter(User.id == user_id)
            .update({User.token_version: User.token_version + 1}, synchronize_session=False)
        )
        self.storage.save()
        return affected

    def mark_email_verified(self, user_id: str) -> int:
        affected = (
            self.session.query(User)
            .filter(User.id == user_id)
            .update({User.email_verified: True}, synchronize_session=False)
        )
        self.storage.save()
        return affected

    # password reset

    def store_reset_token(self, user_id: str, token: str, expires_at: datetime) -> None:
        self.session.query(User).filter(User.id == user_id).update(
            {User.reset_token: token, User.reset_token_expiry: expires_at},
            synchronize_session=False,
        )
        self.storage.save()

    def find_user_by_reset_token(self, token: str) -> UserRecord | None:
        row = self.session.query(User).populate_existing().filter(User.reset_token == token).first()
        return UserRecord.from_row(row) if row else None

    def consume_reset_token(self, user_id: str, token: str, password_hash: str) -> bool:
        """Swap the password and clear the reset fields, only if the token is still stored."""
        affected = (
            self.session.query(User)
            .filter(User.id == user_id, User.reset_token == token)
            .update(
                {
                    User.password_hash: password_hash,
                    User.reset_token: None,
                    User.reset_token_expiry: None,
                },
                synchronize_session=False,
            )
        )
        if affected != 1:
            self.storage.rollback()
            return False
        self.storage.save()
        return True

    # refresh tokens

    def insert_refresh_token(self, user_id: str, token: str, expires_at: datetime) -> RefreshTokenRecord:
        row = RefreshToken(user_id=user_id, token=token, revoked=False, expires_at=expires_at)
        self.storage.new(row)
        self.storage.save()
        return RefreshTokenRecord.from_row(row)

    def find_refresh_token(self, token: str) -> RefreshTokenRecord | None:
        row = (
            self.session.query(RefreshToken)
            .populate_existing()
            .filter(RefreshToken.token == token)
            .first()
        )
        return RefreshTokenRecord.from_row(row) if row else None

    def rotate_refresh_token(self, old_token: str, new_token: str, user_id: str,
                             expires_at: datetime) -> bool:
        """
        Revoke old_token in favour of new_token and insert the successor row.

        The revoke is one conditional UPDATE; when it matches no row another
        redemption already won and nothing is written.
        """
        affected = (
            self.session.query(RefreshToken)
            .filter(
                RefreshToken.token == old_token,
                RefreshToken.user_id == user_id,
                RefreshToken.revoked.is_(False),
            )
            .update(
                {RefreshToken.revoked: True, RefreshToken.replaced_by_token: new_token},
                synchronize_session=False,
            )
        )
        if affected != 1:
            self.storage.rollback()
            return False
        self.storage.new(RefreshToken(user_id=user_id, token=new_token, revoked=False, expires_at=expires_at))
        self.storage.save()
        return True

    def revoke_refresh_token(self, token: str, user_id: str) -> int:
        affected = (
            self.session.query(RefreshToken)
            .filter(RefreshToken.token == token, RefreshToken.user_id == user_id)
            .update({RefreshToken.revoked: True}, synchronize_session=False)
        )
        self.storage.save()
        return affected

    def revoke_all_refresh_tokens(self, user_id: str) -> int:
        affected = (
            self.session.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.revoked.is_(False))
            .update({RefreshToken.revoked: True}, synchronize_session=False)
        )
        self.storage.save()
        return affected

    def active_refresh_tokens(self, user_id: str) -> list[RefreshTokenRecord]:
        now = utcnow()
        rows = (
            self.session.query(RefreshToken)
            .populate_existing()
            .filter(RefreshToken.user_id == user_id, RefreshToken.revoked.is_(False))
            .order_by(RefreshToken.created_at)
            .all()
        )
        records = [RefreshTokenRecord.from_row(row) for row in rows]
        return [r for r in records if not r.is_expired(now)]
