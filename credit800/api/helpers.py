from __future__ import annotations

from typing import Any, Dict, Type, TypeVar

from flask import g, request
from pydantic import BaseModel, ValidationError

from credit800.api.auth import AuthUser
from credit800.api.context import get_store
from credit800.api.errors import ApiError, forbidden, not_found, validation_details

M = TypeVar("M", bound=BaseModel)


def user() -> AuthUser:
    return g.user


def parse_body(model: Type[M], *, allow_empty: bool = False) -> M:
    """Validate the JSON body against ``model``; 400 on malformed input."""

    raw = request.get_json(silent=True)
    if raw is None:
        if not allow_empty:
            raise ApiError(400, "Invalid request body", "expected a JSON object")
        raw = {}
    if not isinstance(raw, dict):
        raise ApiError(400, "Invalid request body", "expected a JSON object")
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise ApiError(400, "Invalid request body", validation_details(exc)) from exc


def owned_doc(collection: str, doc_id: str, label: str) -> Dict[str, Any]:
    """Fetch a document owned by the current user: 404 when missing, 403 otherwise."""

    doc = get_store().get(collection, doc_id)
    if doc is None:
        raise not_found(label)
    if doc.get("userId") != user().uid:
        raise forbidden()
    return doc


def require_arg(name: str) -> str:
    value = (request.args.get(name) or "").strip()
    if not value:
        raise ApiError(400, f"{name} query parameter is required")
    return value
