"""Uploaded report files: local storage, PDF inspection and the upload limiter."""

from __future__ import annotations

import logging
import re
import threading
import time
from collections import defaultdict
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pdfplumber

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 20 * 1024 * 1024
UPLOAD_WINDOW_SECONDS = 24 * 60 * 60
FREE_UPLOADS_PER_WINDOW = 1
PRO_UPLOADS_PER_WINDOW = 3

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]")


def safe_filename(name: str) -> str:
    cleaned = _UNSAFE_FILENAME_RE.sub("_", Path(name or "report.pdf").name)
    return cleaned or "report.pdf"


def store_upload(upload_dir: str | Path, user_id: str, filename: str, data: bytes) -> Path:
    """Write ``data`` under ``upload_dir/<uid>/<ms>-<filename>`` and return the path."""

    folder = Path(upload_dir) / user_id
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / f"{int(time.time() * 1000)}-{safe_filename(filename)}"
    path.write_bytes(data)
    logger.info("UPLOAD_STORED user=%s path=%s bytes=%d", user_id, path, len(data))
    return path


def read_upload(path: str | Path) -> bytes:
    return Path(path).read_bytes()


def inspect_pdf(path: str | Path, *, preview_chars: int = 500) -> Dict[str, object]:
    """Page count and a short text preview; unreadable PDFs report ``pageCount=None``."""

    try:
        with pdfplumber.open(str(path)) as pdf:
            page_count = len(pdf.pages)
            first_text = (pdf.pages[0].extract_text() or "") if pdf.pages else ""
    except Exception as exc:
        logger.warning("PDF_INSPECT_FAILED path=%s error=%s", path, exc)
        return {"pageCount": None, "textPreview": ""}
    return {"pageCount": page_count, "textPreview": first_text[:preview_chars]}


class UploadLimiter:
    """Sliding-window per-user upload limit, tighter for free accounts."""

    def __init__(
        self,
        *,
        free_limit: int = FREE_UPLOADS_PER_WINDOW,
        pro_limit: int = PRO_UPLOADS_PER_WINDOW,
        window: float = UPLOAD_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.free_limit = free_limit
        self.pro_limit = pro_limit
        self.window = window
        self._clock = clock
        self._hits: Dict[str, List[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def allow(self, user_id: str, *, pro: bool) -> bool:
        limit = self.pro_limit if pro else self.free_limit
        now = self._clock()
        with self._lock:
            hits = [t for t in self._hits[user_id] if now - t < self.window]
            if len(hits) >= limit:
                self._hits[user_id] = hits
                logger.info("UPLOAD_RATE_LIMITED user=%s pro=%s", user_id, pro)
                return False
            hits.append(now)
            self._hits[user_id] = hits
            return True

    def retry_after(self, user_id: str) -> Optional[int]:
        with self._lock:
            hits = self._hits.get(user_id)
            if not hits:
                return None
            return max(0, int(self.window - (self._clock() - min(hits))))

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
