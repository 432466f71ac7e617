"""
Unit Tests for Configuration

Tests for settings and configuration management.
"""

import pytest
from pydantic import ValidationError

from gubaye.config import Settings


def test_settings_defaults():
    """Test default settings values."""
    settings = Settings()

    assert settings.ENVIRONMENT in ["local", "staging", "production"]
    assert settings.LOG_LEVEL in ["DEBUG", "INFO", "WARNING", "ERROR"]
    assert isinstance(settings.DATABASE_URL, str)


def test_assignment_rule_defaults():
    settings = Settings(_env_file=None, MAX_JOBS_PER_STUDENT=3, BATCH_MISMATCH_POLICY="block")

    assert settings.MAX_JOBS_PER_STUDENT == 3
    assert settings.blocks_batch_mismatch is True


def test_warn_policy():
    assert Settings(BATCH_MISMATCH_POLICY="warn").blocks_batch_mismatch is False


def test_invalid_policy_rejected():
    with pytest.raises(ValidationError):
        Settings(BATCH_MISMATCH_POLICY="ignore")


def test_job_cap_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(MAX_JOBS_PER_STUDENT=0)


def test_service_url_trailing_slash_stripped():
    settings = Settings(AUTO_ASSIGN_SERVICE_URL="https://assign.example.org/")
    assert settings.AUTO_ASSIGN_SERVICE_URL == "https://assign.example.org"


def test_settings_environment_specific():
    """Test environment-specific behavior."""
    settings_local = Settings(ENVIRONMENT="local")
    assert settings_local.is_local is True
    assert settings_local.is_production is False

    settings_prod = Settings(ENVIRONMENT="production")
    assert settings_prod.is_local is False
    assert settings_prod.is_production is True
