"""Tests for the token codec and auth settings."""

from dataclasses import replace
from datetime import timedelta

import jwt
import pytest

from api import create_app
from api.config import AuthSettings, ConfigurationError
from models import storage
from utils.tokens import (
    ACCESS,
    REFRESH,
    RESET,
    InvalidSignature,
    TokenCodec,
    TokenExpired,
)


@pytest.fixture
def settings():
    return AuthSettings(
        access_secret="access-secret-for-tests",
        refresh_secret="refresh-secret-for-tests",
        reset_secret="reset-secret-for-tests",
    )


@pytest.fixture
def token_codec(settings):
    return TokenCodec(settings)


class TestIssueAndVerify:

    def test_pair_carries_user_and_version(self, token_codec):
        pair = token_codec.issue("user-1", 3)

        access = token_codec.verify(pair.access_token, ACCESS)
        refresh = token_codec.verify(pair.refresh_token, REFRESH)

        assert access.user_id == "user-1" and access.token_version == 3
        assert refresh.user_id == "user-1" and refresh.token_version == 3

    def test_pairs_issued_back_to_back_differ(self, token_codec):
        first = token_codec.issue("user-1", 0)
        second = token_codec.issue("user-1", 0)

        assert first.access_token != second.access_token
        assert first.refresh_token != second.refresh_token

    def test_access_token_is_not_a_refresh_token(self, token_codec):
        pair = token_codec.issue("user-1", 0)

        with pytest.raises(InvalidSignature):
            token_codec.verify(pair.access_token, REFRESH)
        with pytest.raises(InvalidSignature):
            token_codec.verify(pair.refresh_token, ACCESS)

    def test_access_secret_cannot_forge_refresh_tokens(self, token_codec, settings):
        forged = jwt.encode(
            {"userId": "user-1", "tokenVersion": 0, "type": REFRESH, "iat": 0, "exp": 4102444800,
             "iss": settings.issuer},
            settings.access_secret,
            algorithm="HS256",
        )
        with pytest.raises(InvalidSignature):
            token_codec.verify(forged, REFRESH)

    def test_tampered_token_is_rejected(self, token_codec):
        token = token_codec.issue("user-1", 0).access_token
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        with pytest.raises(InvalidSignature):
            token_codec.verify(tampered, ACCESS)

    def test_garbage_and_empty_tokens_are_rejected(self, token_codec):
        with pytest.raises(InvalidSignature):
            token_codec.verify("not-a-jwt", ACCESS)
        with pytest.raises(InvalidSignature):
            token_codec.verify("", ACCESS)

    def test_expired_token_raises_expired(self, settings):
        expired_codec = TokenCodec(replace(settings, access_ttl=timedelta(seconds=-30)))
        token = expired_codec.issue("user-1", 0).access_token

        with pytest.raises(TokenExpired):
            expired_codec.verify(token, ACCESS)

    def test_reset_token_uses_its_own_class(self, token_codec):
        reset = token_codec.issue_reset("user-1")

        assert token_codec.verify(reset, RESET).user_id == "user-1"
        with pytest.raises(InvalidSignature):
            token_codec.verify(reset, ACCESS)

    def test_unknown_class_is_a_programming_error(self, token_codec):
        with pytest.raises(ValueError):
            token_codec.verify("x.y.z", "session")


class TestAuthSettings:

    def test_missing_secret_fails(self):
        with pytest.raises(ConfigurationError):
            AuthSettings(access_secret="a", refresh_secret="", reset_secret="c")

    def test_shared_secrets_fail(self):
        with pytest.raises(ConfigurationError):
            AuthSettings(access_secret="same", refresh_secret="same", reset_secret="c")

    def test_settings_are_immutable(self, settings):
        with pytest.raises(Exception):
            settings.access_secret = "changed"

    def test_app_refuses_to_start_without_secrets(self, tmp_path):
        with pytest.raises(ConfigurationError):
            create_app(
                "test",
                {
                    "DATABASE_URL": f"sqlite:///{tmp_path / 'x.db'}",
                    "JWT_REFRESH_SECRET": None,
                },
            )

    @pytest.mark.parametrize(
        "value, expected",
        [("false", False), ("0", False), ("", False), ("true", True), ("Yes", True), (True, True), (False, False)],
    )
    def test_email_case_flag_parses_strings(self, tmp_path, value, expected):
        app = create_app(
            "test",
            {"DATABASE_URL": f"sqlite:///{tmp_path / 'x.db'}", "EMAIL_CASE_INSENSITIVE": value},
        )
        try:
            settings = app.extensions["auth_settings"]
            assert settings.email_case_insensitive is expected
            assert app.extensions["token_codec"].settings is settings
            assert app.extensions["session_manager"].store.email_case_insensitive is expected
        finally:
            storage.dispose()
