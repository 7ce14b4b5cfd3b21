import pytest

from credit800.api import auth as auth_module
from credit800.api.app import create_app
from credit800.api.context import EXTENSION_KEY
from credit800.core.store import MemoryStore

_CLEARED_ENV = (
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "ANTHROPIC_API_KEY",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "STRIPE_PRO_PRICE_ID",
    "PLAID_CLIENT_ID",
    "PLAID_SECRET",
    "LOB_API_KEY",
    "POSTGRID_API_KEY",
    "CLICK2MAIL_USERNAME",
    "CLICK2MAIL_PASSWORD",
    "ADMIN_EMAIL",
    "CORS_ENABLE",
    "RATE_LIMIT_PER_MINUTE",
)


def _fake_verify_id_token(token: str) -> dict:
    if not token.startswith("good-"):
        raise ValueError("invalid token")
    uid = token[len("good-"):]
    return {"uid": uid, "email": f"{uid}@example.com"}


@pytest.fixture(autouse=True)
def _app_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in _CLEARED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("MAIL_PROVIDER", "click2mail")
    monkeypatch.setenv("CELERY_TASK_ALWAYS_EAGER", "1")
    monkeypatch.setenv("EMAIL_ENABLED", "0")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(auth_module, "verify_id_token", _fake_verify_id_token)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def app(store):
    app = create_app(store=store)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def services(app):
    """The app's service registry; tests drop fakes in here."""

    return app.extensions[EXTENSION_KEY]


@pytest.fixture
def client(app):
    return app.test_client()
