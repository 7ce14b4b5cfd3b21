"""Per-app service registry.

``create_app`` stores overrides (a ``MemoryStore``, fake carriers, fake AI
clients) under ``app.extensions["credit800"]``; anything not overridden is
built lazily from :class:`AppConfig` on first use.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict

from flask import current_app

from credit800.api.config import AppConfig, get_app_config
from credit800.api.errors import ApiError
from credit800.core.addresses import AddressResolver
from credit800.core.analysis import ReportAnalyzer, build_analyzer
from credit800.core.billing import BillingNotConfigured, StripeService
from credit800.core.emailing import SmtpConfig
from credit800.core.mail import CarrierNotConfigured, MailCarrier, build_carrier
from credit800.core.plaid import PlaidClient, PlaidNotConfigured
from credit800.core.services.claude_client import ClaudeClient, ClaudeConfig
from credit800.core.store import DocumentStore, build_store
from credit800.core.uploads import UploadLimiter

logger = logging.getLogger(__name__)

EXTENSION_KEY = "credit800"

_lock = threading.Lock()


def registry() -> Dict[str, Any]:
    return current_app.extensions.setdefault(EXTENSION_KEY, {})


def _lazy(name: str, factory: Callable[[], Any]) -> Any:
    services = registry()
    if name in services:
        return services[name]
    with _lock:
        if name not in services:
            services[name] = factory()
    return services[name]


def get_config() -> AppConfig:
    return _lazy("config", get_app_config)


def get_store() -> DocumentStore:
    cfg = get_config()
    return _lazy("store", lambda: build_store(cfg.store_backend, project_id=cfg.firebase_project_id))


def get_resolver() -> AddressResolver:
    return _lazy("resolver", lambda: AddressResolver(get_config().ai))


def get_analyzer() -> ReportAnalyzer:
    cfg = get_config()
    return _lazy("analyzer", lambda: build_analyzer(cfg.gemini_api_key, cfg.anthropic_api_key))


def get_limiter() -> UploadLimiter:
    return _lazy("limiter", UploadLimiter)


def get_smtp() -> SmtpConfig:
    return _lazy("smtp", lambda: get_config().smtp)


def get_claude() -> ClaudeClient:
    cfg = get_config()
    if "claude" not in registry() and not cfg.anthropic_api_key:
        raise ApiError(503, "AI service is not configured", "ANTHROPIC_API_KEY is not set")
    return _lazy("claude", lambda: ClaudeClient(ClaudeConfig(api_key=cfg.anthropic_api_key)))


def get_stripe() -> StripeService:
    try:
        return _lazy("stripe", lambda: StripeService(get_config().stripe))
    except BillingNotConfigured as exc:
        raise ApiError(503, "Billing is not configured", str(exc)) from exc


def get_plaid() -> PlaidClient:
    try:
        return _lazy("plaid", lambda: PlaidClient(get_config().plaid))
    except PlaidNotConfigured as exc:
        raise ApiError(503, "Bank linking is not configured", str(exc)) from exc


def default_mail_provider() -> str:
    return get_config().mail.provider


def get_carrier(provider: str | None = None) -> MailCarrier:
    """Return the mail client for ``provider`` (default ``MAIL_PROVIDER``); 503 when unconfigured."""

    provider = provider or default_mail_provider()
    carriers = registry().setdefault("carriers", {})
    if provider in carriers:
        return carriers[provider]
    cfg = get_config()
    try:
        carrier = build_carrier(provider, cfg.mail, wkhtmltopdf_path=cfg.wkhtmltopdf_path)
    except CarrierNotConfigured as exc:
        raise ApiError(503, "Mail service is not configured", str(exc)) from exc
    with _lock:
        return carriers.setdefault(provider, carrier)
