import os
import logging
from dataclasses import dataclass

from credit800.core.billing import StripeConfig
from credit800.core.emailing import SmtpConfig
from credit800.core.mail import MailConfig, PROVIDERS
from credit800.core.plaid import PlaidConfig
from credit800.core.services.ai_client import AIConfig

_logger = logging.getLogger("config")
if not _logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
    _logger.addHandler(handler)
_logger.setLevel(logging.INFO)

STORE_BACKENDS = ("firestore", "memory")


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class AppConfig:
    """Application configuration loaded from the environment."""

    ai: AIConfig
    mail: MailConfig
    stripe: StripeConfig
    plaid: PlaidConfig
    smtp: SmtpConfig
    store_backend: str
    firebase_project_id: str | None
    gemini_api_key: str
    anthropic_api_key: str
    wkhtmltopdf_path: str
    upload_dir: str
    celery_broker_url: str
    celery_always_eager: bool
    rate_limit_per_minute: int = 120
    secret_key: str = "change-me"


def get_app_config() -> AppConfig:
    """Load and validate application configuration from environment variables.

    Missing third-party credentials are allowed; the routes that need them
    answer 503 instead of the app refusing to start.
    """

    api_key = os.getenv("OPENAI_API_KEY", "")
    base_url = os.getenv("OPENAI_BASE_URL") or "https://api.openai.com/v1"
    store_backend = os.getenv("STORE_BACKEND", "firestore").strip().lower()
    mail_provider = os.getenv("MAIL_PROVIDER", "click2mail").strip().lower()

    _logger.info("OPENAI_BASE_URL=%s", base_url)
    _logger.info("OPENAI_API_KEY present=%s", bool(api_key))
    _logger.info("GEMINI_API_KEY present=%s", bool(os.getenv("GEMINI_API_KEY")))
    _logger.info("ANTHROPIC_API_KEY present=%s", bool(os.getenv("ANTHROPIC_API_KEY")))
    _logger.info("STRIPE_SECRET_KEY present=%s", bool(os.getenv("STRIPE_SECRET_KEY")))
    _logger.info("PLAID_CLIENT_ID present=%s", bool(os.getenv("PLAID_CLIENT_ID")))
    _logger.info("STORE_BACKEND=%s MAIL_PROVIDER=%s", store_backend, mail_provider)

    if "localhost" in base_url:
        raise EnvironmentError("OPENAI_BASE_URL points to localhost")
    if store_backend not in STORE_BACKENDS:
        raise EnvironmentError(f"STORE_BACKEND must be one of {STORE_BACKENDS}, got {store_backend!r}")
    if mail_provider not in PROVIDERS:
        raise EnvironmentError(f"MAIL_PROVIDER must be one of {PROVIDERS}, got {mail_provider!r}")

    ai_conf = AIConfig(
        api_key=api_key,
        base_url=base_url,
        chat_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
    )
    mail_conf = MailConfig(
        provider=mail_provider,
        lob_api_key=os.getenv("LOB_API_KEY", ""),
        postgrid_api_key=os.getenv("POSTGRID_API_KEY", ""),
        click2mail_username=os.getenv("CLICK2MAIL_USERNAME", ""),
        click2mail_password=os.getenv("CLICK2MAIL_PASSWORD", ""),
        click2mail_staging=_flag("CLICK2MAIL_STAGING"),
    )
    stripe_conf = StripeConfig(
        secret_key=os.getenv("STRIPE_SECRET_KEY", ""),
        webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET", ""),
        pro_price_id=os.getenv("STRIPE_PRO_PRICE_ID", ""),
        app_url=os.getenv("APP_URL", "https://credit-800.com"),
    )
    plaid_conf = PlaidConfig(
        client_id=os.getenv("PLAID_CLIENT_ID", ""),
        secret=os.getenv("PLAID_SECRET", ""),
        env=os.getenv("PLAID_ENV", "sandbox"),
    )
    smtp_conf = SmtpConfig(
        server=os.getenv("SMTP_SERVER", "localhost"),
        port=int(os.getenv("SMTP_PORT", "1025")),
        username=os.getenv("SMTP_USERNAME", "noreply@credit-800.com"),
        password=os.getenv("SMTP_PASSWORD", ""),
        enabled=_flag("EMAIL_ENABLED", "1"),
    )

    return AppConfig(
        ai=ai_conf,
        mail=mail_conf,
        stripe=stripe_conf,
        plaid=plaid_conf,
        smtp=smtp_conf,
        store_backend=store_backend,
        firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        wkhtmltopdf_path=os.getenv("WKHTMLTOPDF_PATH", "wkhtmltopdf"),
        upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
        celery_broker_url=os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0"),
        celery_always_eager=_flag("CELERY_TASK_ALWAYS_EAGER"),
        rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "120")),
        secret_key=os.getenv("SECRET_KEY", "change-me"),
    )
