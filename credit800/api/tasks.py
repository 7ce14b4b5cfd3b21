import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

from celery import Celery, signals  # noqa: E402

from credit800.api.config import get_app_config  # noqa: E402
from credit800.core.analysis import ReportAnalyzer, build_analyzer, process_report  # noqa: E402
from credit800.core.emailing import SmtpConfig  # noqa: E402
from credit800.core.models import Collections, ReportStatus  # noqa: E402
from credit800.core.store import DocumentStore, build_store  # noqa: E402
from credit800.core.uploads import read_upload  # noqa: E402

logger = logging.getLogger(__name__)

app = Celery("tasks")

_worker_store: Optional[DocumentStore] = None
_worker_analyzer: Optional[ReportAnalyzer] = None
_worker_smtp: Optional[SmtpConfig] = None


@signals.worker_process_init.connect
def configure_worker(**_):
    global _worker_store, _worker_analyzer, _worker_smtp
    cfg = get_app_config()
    app.conf.update(
        broker_url=cfg.celery_broker_url,
        result_backend=cfg.celery_broker_url,
    )
    _worker_store = build_store(cfg.store_backend, project_id=cfg.firebase_project_id)
    _worker_analyzer = build_analyzer(cfg.gemini_api_key, cfg.anthropic_api_key)
    _worker_smtp = cfg.smtp
    logger.info("WORKER_CONFIGURED store=%s", cfg.store_backend)


def run_analysis(
    store: DocumentStore,
    analyzer: ReportAnalyzer,
    report_id: str,
    user_id: str,
    file_path: str,
    bureau: str = "UNKNOWN",
    *,
    smtp: Optional[SmtpConfig] = None,
) -> str:
    """Load the stored upload and analyze it; a missing file marks the report ERROR."""

    path = Path(file_path)
    if not path.is_file():
        logger.error("REPORT_FILE_MISSING report=%s path=%s", report_id, path)
        store.update(
            Collections.CREDIT_REPORTS,
            report_id,
            {"status": ReportStatus.ERROR, "errorMessage": "Uploaded file not found"},
        )
        return ReportStatus.ERROR
    return process_report(store, analyzer, report_id, user_id, read_upload(path), bureau, smtp=smtp)


@app.task(bind=True, name="analyze_report")
def analyze_report_task(self, report_id: str, user_id: str, file_path: str, bureau: str = "UNKNOWN") -> str:
    logger.info("ANALYZE_TASK_START task=%s report=%s", self.request.id, report_id)
    if _worker_store is None or _worker_analyzer is None:
        configure_worker()
    status = run_analysis(
        _worker_store, _worker_analyzer, report_id, user_id, file_path, bureau, smtp=_worker_smtp
    )
    logger.info("ANALYZE_TASK_DONE task=%s report=%s status=%s", self.request.id, report_id, status)
    return status
