from __future__ import annotations

import logging
import os
import threading
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)

_init_lock = threading.Lock()


def _resolve_project_id(explicit_project_id: Optional[str] = None) -> Optional[str]:
    if explicit_project_id:
        return explicit_project_id
    return os.getenv("FIREBASE_PROJECT_ID") or os.getenv("GOOGLE_CLOUD_PROJECT")


def init_firebase_admin(*, project_id: Optional[str] = None) -> None:
    """Initialize the Firebase Admin SDK exactly once.

    ``FIREBASE_SERVICE_ACCOUNT_PATH`` selects a service-account JSON file;
    otherwise Application Default Credentials are used.
    """

    if firebase_admin._apps:
        return

    with _init_lock:
        if firebase_admin._apps:
            return

        key_path = (os.getenv("FIREBASE_SERVICE_ACCOUNT_PATH") or "").strip()
        try:
            if key_path:
                cred = credentials.Certificate(key_path)
            else:
                cred = credentials.ApplicationDefault()
        except Exception as exc:
            raise RuntimeError(
                "Failed to load Firebase credentials. Set FIREBASE_SERVICE_ACCOUNT_PATH "
                "or configure Application Default Credentials."
            ) from exc

        options = {}
        resolved = _resolve_project_id(project_id)
        if resolved:
            options["projectId"] = resolved
        firebase_admin.initialize_app(cred, options or None)
        logger.info("FIREBASE_ADMIN_READY project=%s", resolved or "<default>")


def get_firestore_client(*, project_id: Optional[str] = None):
    init_firebase_admin(project_id=project_id)
    return firestore.client()
