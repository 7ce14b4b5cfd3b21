"""Document persistence used by every route.

Documents are plain dicts keyed by a string id. Reads return a copy of the
stored fields with the document id under ``"id"``.
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Filter = Tuple[str, str, Any]


class StoreError(RuntimeError):
    """Raised when the backing document store fails."""


class DocumentStore:
    """Interface shared by :class:`FirestoreStore` and :class:`MemoryStore`."""

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        raise NotImplementedError

    def set(
        self, collection: str, doc_id: str, data: Dict[str, Any], *, merge: bool = False
    ) -> None:
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def query_user(self, collection: str, user_id: str, **kwargs: Any) -> List[Dict[str, Any]]:
        return self.query(collection, [("userId", "==", user_id)], **kwargs)


def _new_id() -> str:
    return uuid.uuid4().hex[:20]


def _matches(doc: Dict[str, Any], filters: Iterable[Filter]) -> bool:
    for field, op, value in filters:
        actual = doc.get(field)
        if op == "==":
            ok = actual == value
        elif op == "!=":
            ok = actual != value
        elif op == "in":
            ok = actual in value
        elif op == "array-contains":
            ok = isinstance(actual, list) and value in actual
        elif actual is None:
            ok = False
        elif op == "<":
            ok = actual < value
        elif op == "<=":
            ok = actual <= value
        elif op == ">":
            ok = actual > value
        elif op == ">=":
            ok = actual >= value
        else:
            raise StoreError(f"unsupported filter operator: {op}")
        if not ok:
            return False
    return True


class MemoryStore(DocumentStore):
    """Thread-safe in-process store for tests and local development."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._data[collection].get(doc_id)
            if doc is None:
                return None
            return {"id": doc_id, **copy.deepcopy(doc)}

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = _new_id()
        with self._lock:
            self._data[collection][doc_id] = copy.deepcopy(data)
        return doc_id

    def set(
        self, collection: str, doc_id: str, data: Dict[str, Any], *, merge: bool = False
    ) -> None:
        with self._lock:
            existing = self._data[collection].get(doc_id)
            if merge and existing is not None:
                existing.update(copy.deepcopy(data))
            else:
                self._data[collection][doc_id] = copy.deepcopy(data)

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            existing = self._data[collection].get(doc_id)
            if existing is None:
                raise StoreError(f"{collection}/{doc_id} does not exist")
            existing.update(copy.deepcopy(data))

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._data[collection].pop(doc_id, None)

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [
                {"id": doc_id, **copy.deepcopy(doc)}
                for doc_id, doc in self._data[collection].items()
                if _matches(doc, filters)
            ]
        if order_by:
            present = [r for r in rows if r.get(order_by) is not None]
            missing = [r for r in rows if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            rows = present + missing
        if limit is not None:
            rows = rows[:limit]
        return rows


class FirestoreStore(DocumentStore):
    """Firestore-backed store using the Firebase Admin SDK."""

    def __init__(self, client: Any = None, *, project_id: str | None = None) -> None:
        if client is None:
            from credit800.core.firebase import get_firestore_client

            client = get_firestore_client(project_id=project_id)
        self._client = client

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        snap = self._client.collection(collection).document(doc_id).get()
        if not snap.exists:
            return None
        return {"id": snap.id, **(snap.to_dict() or {})}

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        _, ref = self._client.collection(collection).add(data)
        return ref.id

    def set(
        self, collection: str, doc_id: str, data: Dict[str, Any], *, merge: bool = False
    ) -> None:
        self._client.collection(collection).document(doc_id).set(data, merge=merge)

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._client.collection(collection).document(doc_id).update(data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._client.collection(collection).document(doc_id).delete()

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> List[Dict[str, Any]]:
        from google.cloud.firestore_v1 import Query
        from google.cloud.firestore_v1.base_query import FieldFilter

        query: Any = self._client.collection(collection)
        for field, op, value in filters:
            query = query.where(filter=FieldFilter(field, op, value))
        if order_by:
            direction = Query.DESCENDING if descending else Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if limit is not None:
            query = query.limit(limit)
        return [{"id": snap.id, **(snap.to_dict() or {})} for snap in query.stream()]


def build_store(backend: str, *, project_id: str | None = None) -> DocumentStore:
    """Return the document store named by ``backend``."""

    if backend == "memory":
        logger.info("DOCUMENT_STORE backend=memory")
        return MemoryStore()
    if backend == "firestore":
        logger.info("DOCUMENT_STORE backend=firestore project=%s", project_id or "<default>")
        return FirestoreStore(project_id=project_id)
    raise StoreError(f"unknown store backend: {backend}")
