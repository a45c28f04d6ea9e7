"""
Tests for form validation and runtime configuration.
"""

import logging

import pytest

from client.forms import (
    ValidationError, validate_email, validate_login, validate_registration,
    validate_contact_form, validate_settings,
)
from config import AppConfig, configure_logging
from store.models import TradingSettings


class TestValidation:
    @pytest.mark.parametrize("email,message", [
        ("", "Please enter your email address"),
        ("   ", "Please enter your email address"),
        ("not-an-email", "Please enter a valid email address"),
    ])
    def test_bad_email(self, email, message):
        with pytest.raises(ValidationError) as exc:
            validate_email(email)
        assert exc.value.field == "email"
        assert exc.value.message == message

    def test_email_is_trimmed(self):
        assert validate_email("  a@b.co ") == "a@b.co"

    def test_login_accepts_any_non_blank_email(self):
        assert validate_login(" admin@localhost ", "pw") == ("admin@localhost", "pw")
        with pytest.raises(ValidationError, match="Please enter your email address"):
            validate_login("  ", "pw")

    def test_registration_accepts_dotless_email(self):
        assert validate_registration("Ada", "ada@localhost", "secret1", "secret1")[1] == "ada@localhost"

    def test_login_requires_password(self):
        with pytest.raises(ValidationError, match="password"):
            validate_login("a@b.co", "")

    def test_registration_rules(self):
        with pytest.raises(ValidationError) as exc:
            validate_registration("Ada", "ada@example.com", "123", "123")
        assert exc.value.field == "password"
        with pytest.raises(ValidationError) as exc:
            validate_registration("Ada", "ada@example.com", "secret1", "secret2")
        assert exc.value.field == "confirm_password"
        assert validate_registration(" Ada ", "ada@example.com", "secret1", "secret1") == (
            "Ada", "ada@example.com", "secret1",
        )

    def test_contact_form_requires_all_fields(self):
        with pytest.raises(ValidationError, match="Please fill in all fields"):
            validate_contact_form("Ada", "ada@example.com", "", "Hello")
        form = validate_contact_form("Ada", "ada@example.com", "Hi", " Hello ")
        assert form.message == "Hello"

    def test_settings(self):
        assert validate_settings(TradingSettings()) == TradingSettings()
        with pytest.raises(ValidationError):
            validate_settings(TradingSettings(min_confidence=120))
        with pytest.raises(ValidationError):
            validate_settings(TradingSettings(martingale=True, martingale_multiplier=1))

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, ValueError)


class TestConfig:
    def test_defaults(self):
        config = AppConfig.from_env({})
        assert config == AppConfig()

    def test_from_env(self):
        config = AppConfig.from_env({
            "DASHBOARD_STORAGE": "/tmp/session.json",
            "DASHBOARD_LATENCY_SCALE": "0.25",
            "DASHBOARD_CHAT_FAILURE_RATE": "0",
            "DASHBOARD_PREFERS_DARK": "yes",
            "LOG_LEVEL": "debug",
        })
        assert config.storage_path == "/tmp/session.json"
        assert config.latency_scale == 0.25
        assert config.chat_failure_rate == 0.0
        assert config.prefers_dark
        assert config.log_level == "DEBUG"

    def test_configure_logging_sets_level(self):
        previous = logging.getLogger().level
        try:
            root = configure_logging("warning")
            assert root.level == logging.WARNING
            assert root.handlers
        finally:
            logging.getLogger().setLevel(previous)
