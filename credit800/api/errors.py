"""JSON error responses shared by every blueprint."""

from __future__ import annotations

from typing import Any

from flask import jsonify
from pydantic import ValidationError


class ApiError(Exception):
    """Raised from a handler to answer ``{"error", "details"}`` with ``status``."""

    def __init__(self, status: int, error: str, details: Any = None, **extra: Any):
        super().__init__(error)
        self.status = status
        self.error = error
        self.details = details
        self.extra = extra


def error_response(status: int, error: str, details: Any = None, **extra: Any):
    body: dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    body.update(extra)
    return jsonify(body), status


def bad_request(error: str, details: Any = None) -> ApiError:
    return ApiError(400, error, details)


def not_found(what: str) -> ApiError:
    return ApiError(404, f"{what} not found")


def forbidden() -> ApiError:
    return ApiError(403, "Forbidden")


def validation_details(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
