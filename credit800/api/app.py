# ruff: noqa: E402
from dotenv import load_dotenv

load_dotenv()

import logging
import os
import threading
import time
from typing import Any, Mapping

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from credit800.api.billing import billing_bp
from credit800.api.context import EXTENSION_KEY, get_config
from credit800.api.disputes import disputes_bp
from credit800.api.errors import ApiError, error_response
from credit800.api.letters import letters_bp
from credit800.api.mailing import mail_bp
from credit800.api.portfolio import portfolio_bp
from credit800.api.reports import reports_bp
from credit800.api.tasks import app as celery_app
from credit800.api.tools import tools_bp
from credit800.api.tracking import tracking_bp
from credit800.api.users import users_bp
from credit800.core.store import DocumentStore

logger = logging.getLogger(__name__)

THROTTLE_WINDOW = 60

BLUEPRINTS = (
    reports_bp,
    disputes_bp,
    mail_bp,
    letters_bp,
    tracking_bp,
    portfolio_bp,
    billing_bp,
    users_bp,
    tools_bp,
)


def create_app(store: DocumentStore | None = None, services: Mapping[str, Any] | None = None) -> Flask:
    """Build the Flask app; ``store``/``services`` replace the lazily built defaults."""

    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = dict(services or {})
    if store is not None:
        app.extensions[EXTENSION_KEY]["store"] = store
    request_counts: dict[str, list[float]] = {}
    counts_lock = threading.Lock()
    app.request_counts = request_counts

    cors_enable = os.getenv("CORS_ENABLE", "").strip().lower()
    if cors_enable in {"1", "true", "yes", "on"}:
        allowed_origins = ["http://127.0.0.1:5173", "http://localhost:5173"]
        CORS(app, resources={r"/api/*": {"origins": allowed_origins}}, supports_credentials=True)

    for bp in BLUEPRINTS:
        app.register_blueprint(bp)

    @app.before_request
    def _load_config() -> None:
        if getattr(app, "_config_loaded", False):
            return
        cfg = get_config()
        celery_app.conf.update(
            broker_url=cfg.celery_broker_url,
            result_backend=cfg.celery_broker_url,
            task_always_eager=cfg.celery_always_eager,
        )
        app.secret_key = cfg.secret_key
        app.rate_limit_per_minute = cfg.rate_limit_per_minute
        logger.info(
            "APP_CONFIG_LOADED store=%s mail=%s eager=%s",
            cfg.store_backend,
            cfg.mail.provider,
            cfg.celery_always_eager,
        )
        app._config_loaded = True

    @app.before_request
    def _throttle():
        limit: int = getattr(app, "rate_limit_per_minute", 120)
        auth_header = request.headers.get("Authorization", "")
        identifier = auth_header[7:].strip() if auth_header.startswith("Bearer ") else None
        identifier = identifier or request.remote_addr or "global"
        now = time.monotonic()
        with counts_lock:
            for key in [k for k, stamps in request_counts.items() if now - stamps[-1] >= THROTTLE_WINDOW]:
                del request_counts[key]
            recent = [t for t in request_counts.get(identifier, []) if now - t < THROTTLE_WINDOW]
            if len(recent) >= limit:
                request_counts[identifier] = recent
                retry_after = int(THROTTLE_WINDOW - (now - recent[0])) + 1
                return error_response(429, "Too Many Requests", retryAfter=retry_after)
            recent.append(now)
            request_counts[identifier] = recent
        return None

    @app.errorhandler(ApiError)
    def _api_error(exc: ApiError):
        return error_response(exc.status, exc.error, exc.details, **exc.extra)

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return error_response(exc.code or 500, exc.name, exc.description)

    @app.errorhandler(Exception)
    def _unhandled(exc: Exception):
        logger.exception("UNHANDLED_ERROR path=%s", request.path)
        return error_response(500, "Internal server error", str(exc))

    @app.get("/api/health")
    def health():
        return jsonify({"ok": True})

    return app


if __name__ == "__main__":  # pragma: no cover - manual execution
    debug_mode = os.environ.get("FLASK_DEBUG", "0") in ("1", "true", "True")
    create_app().run(host="0.0.0.0", port=5000, debug=debug_mode)
