import dataclasses

import pytest

from app.settings import ProxySettings


def test_defaults_without_environment():
    settings = ProxySettings.from_env({})
    assert settings.api_key is None
    assert not settings.api_key_configured
    assert settings.port == 10000
    assert settings.environment == "development"
    assert settings.is_development()
    assert settings.upstream_base_url == "https://api.brawlstars.com/v1"
    assert settings.upstream_timeout == 10.0
    assert settings.user_agent == "BrawlStarsProxy/1.0"
    assert settings.rate_limit == "100/15 minutes"
    assert settings.rate_limit_enabled is True
    assert "http://localhost:3000" in settings.allowed_origins


def test_reads_environment():
    settings = ProxySettings.from_env(
        {
            "BRAWL_STARS_API_KEY": " abc ",
            "PORT": "8080",
            "NODE_ENV": "production",
            "FRONTEND_URL": "https://brawl.example.com",
            "ALLOWED_ORIGINS": "https://a.example.com, https://b.example.com,",
            "BRAWL_STARS_API_URL": "https://proxy.royaleapi.dev/v1/",
            "UPSTREAM_TIMEOUT": "2.5",
            "RATE_LIMIT": "10/minute",
            "RATE_LIMIT_ENABLED": "false",
        }
    )
    assert settings.api_key == "abc"
    assert settings.api_key_configured
    assert settings.port == 8080
    assert settings.is_production()
    assert not settings.is_development()
    assert settings.upstream_base_url == "https://proxy.royaleapi.dev/v1"
    assert settings.upstream_timeout == 2.5
    assert settings.rate_limit == "10/minute"
    assert settings.rate_limit_enabled is False
    assert settings.allowed_origins[-3:] == (
        "https://brawl.example.com",
        "https://a.example.com",
        "https://b.example.com",
    )


def test_blank_api_key_counts_as_missing():
    assert ProxySettings.from_env({"BRAWL_STARS_API_KEY": "   "}).api_key is None


def test_environment_falls_back_to_environment_variable():
    settings = ProxySettings.from_env({"ENVIRONMENT": "staging"})
    assert settings.environment == "staging"


def test_reads_process_environment_by_default(monkeypatch):
    monkeypatch.setenv("BRAWL_STARS_API_KEY", "from-os-environ")
    assert ProxySettings.from_env().api_key == "from-os-environ"


def test_settings_are_immutable():
    settings = ProxySettings()
    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.api_key = "changed"
