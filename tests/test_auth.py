"""
Tests for authentication helpers and configuration.
"""

import uuid
from unittest.mock import patch

import pytest

from config import Config, PostgresConfig, RedisConfig
from services.auth import (
    check_password,
    hash_password,
    parse_user_id,
    validate_credentials,
)


class TestPasswords:

    @pytest.fixture(autouse=True)
    def fast_rounds(self):
        with patch("services.auth.config") as mock_config:
            mock_config.auth.bcrypt_rounds = 4
            yield

    def test_hash_and_check(self):
        hashed = hash_password("secret1")

        assert hashed != "secret1"
        assert check_password("secret1", hashed) is True
        assert check_password("wrong", hashed) is False

    def test_missing_or_malformed_hash(self):
        assert check_password("secret1", None) is False
        assert check_password("secret1", "not-a-bcrypt-hash") is False


class TestValidateCredentials:

    @pytest.mark.parametrize("email,password,expected", [
        ("a@b.co", "secret1", None),
        (None, "secret1", "Email and password are required"),
        ("a@b.co", "", "Email and password are required"),
        ("a b@c.co", "secret1", "Invalid email format"),
        ("a@b", "secret1", "Invalid email format"),
        ("a@b.co", "12345", "Password must be at least 6 characters"),
    ])
    def test_validation(self, email, password, expected):
        assert validate_credentials(email, password) == expected


class TestParseUserId:

    def test_valid(self):
        value = uuid.uuid4()
        assert parse_user_id(str(value)) == value

    @pytest.mark.parametrize("raw", [None, "", "42", "not-a-uuid"])
    def test_invalid(self, raw):
        assert parse_user_id(raw) is None


class TestConfig:

    def test_database_url_normalized(self):
        cfg = PostgresConfig(database_url="postgres://u:p@db:5432/app")
        assert cfg.url == "postgresql://u:p@db:5432/app"

    def test_database_url_from_components(self):
        cfg = PostgresConfig(
            database_url=None, host="db", port=5433, user="u", password="p",
            database="app", ssl_mode="disable",
        )
        assert cfg.url == "postgresql://u:p@db:5433/app?sslmode=disable"

    def test_redis_url(self):
        cfg = RedisConfig(host="cache", port=6380, password="pw", db=2, ssl=True)
        assert cfg.url == "rediss://:pw@cache:6380/2"

    def test_validate_warns_about_missing_keys(self):
        cfg = Config()
        cfg.llm.provider = "gemini"
        cfg.llm.gemini_api_key = None
        cfg.youtube.api_key = None

        warnings = cfg.validate()

        assert any("GOOGLE_GEMINI_API_KEY" in w for w in warnings)
        assert any("YOUTUBE_API_KEY" in w for w in warnings)
