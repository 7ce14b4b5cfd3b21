import pytest

from credit800.api import config


def test_get_app_config_success(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "key")
    monkeypatch.setenv("OPENAI_BASE_URL", "https://api.example.com/v1")
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "30")
    cfg = config.get_app_config()
    assert cfg.ai.api_key == "key"
    assert cfg.ai.base_url == "https://api.example.com/v1"
    assert cfg.wkhtmltopdf_path == "wkhtmltopdf"
    assert cfg.smtp.server == "localhost"
    assert cfg.smtp.port == 1025
    assert cfg.store_backend == "memory"
    assert cfg.mail.provider == "click2mail"
    assert cfg.celery_always_eager is True
    assert cfg.rate_limit_per_minute == 30


def test_third_party_credentials_are_optional(monkeypatch):
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    cfg = config.get_app_config()
    assert cfg.ai.api_key == ""
    assert cfg.ai.base_url == "https://api.openai.com/v1"
    assert cfg.stripe.secret_key == ""
    assert cfg.plaid.env == "sandbox"
    assert cfg.smtp.enabled is False


def test_get_app_config_invalid(monkeypatch):
    monkeypatch.setenv("OPENAI_BASE_URL", "http://localhost")
    with pytest.raises(EnvironmentError):
        config.get_app_config()
    monkeypatch.setenv("OPENAI_BASE_URL", "https://api.example.com/v1")
    monkeypatch.setenv("STORE_BACKEND", "sqlite")
    with pytest.raises(EnvironmentError):
        config.get_app_config()
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("MAIL_PROVIDER", "pigeon")
    with pytest.raises(EnvironmentError):
        config.get_app_config()
