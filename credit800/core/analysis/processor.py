"""Background credit report analysis.

``process_report`` is the body of the Celery analysis task: it runs the
analyzer over the uploaded PDF, persists tradelines and the score, marks the
report ANALYZED and builds the action plan. Every failure ends with the
report in ERROR carrying an ``errorMessage`` the UI can show.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from credit800.core.analysis.action_plan import generate_action_plan
from credit800.core.analysis.analyzer import AnalysisError, ReportAnalyzer
from credit800.core.analysis.samples import SAMPLE_SCORE, SAMPLE_SCORE_BUREAU, sample_items
from credit800.core.emailing import SmtpConfig, send_analysis_complete_email
from credit800.core.models import Collections, ReportStatus, utcnow_iso
from credit800.core.notifications import create_notification
from credit800.core.store import DocumentStore

logger = logging.getLogger(__name__)

MAX_PDF_MB = 20
MAX_SAVED_ITEMS = 30


def _existing_items(store: DocumentStore, user_id: str, report_id: str, limit: Optional[int] = None):
    return store.query(
        Collections.REPORT_ITEMS,
        [("userId", "==", user_id), ("creditReportId", "==", report_id)],
        limit=limit,
    )


def _mark_error(store: DocumentStore, report_id: str, message: str) -> None:
    logger.error("REPORT_ANALYSIS_ERROR report=%s error=%s", report_id, message)
    store.update(
        Collections.CREDIT_REPORTS,
        report_id,
        {"status": ReportStatus.ERROR, "errorMessage": message},
    )


def _notify_complete(
    store: DocumentStore,
    smtp: Optional[SmtpConfig],
    user_id: str,
    item_count: int,
    bureau: str,
) -> None:
    create_notification(
        store,
        user_id,
        "analysis_complete",
        "Report analysis complete",
        f"{item_count} items found on your {bureau} report.",
        "/disputes",
    )
    if smtp is None:
        return
    profile = store.get(Collections.USERS, user_id) or {}
    if profile.get("email"):
        send_analysis_complete_email(smtp, profile["email"], profile.get("fullName"), item_count, bureau)


def process_report(
    store: DocumentStore,
    analyzer: ReportAnalyzer,
    report_id: str,
    user_id: str,
    pdf_bytes: bytes,
    bureau: str = "UNKNOWN",
    *,
    smtp: Optional[SmtpConfig] = None,
) -> str:
    """Analyze one uploaded report; returns the final report status."""

    logger.info("REPORT_ANALYSIS_START report=%s user=%s bureau=%s", report_id, user_id, bureau)
    try:
        size_mb = len(pdf_bytes) / (1024 * 1024)
        if size_mb > MAX_PDF_MB:
            _mark_error(store, report_id, f"PDF too large ({size_mb:.1f}MB). Max {MAX_PDF_MB}MB supported.")
            return ReportStatus.ERROR

        try:
            analysis = analyzer.analyze(pdf_bytes, bureau)
        except AnalysisError as exc:
            _mark_error(store, report_id, str(exc))
            return ReportStatus.ERROR

        if _existing_items(store, user_id, report_id, limit=1):
            store.update(
                Collections.CREDIT_REPORTS,
                report_id,
                {"status": ReportStatus.ANALYZED, "analyzedAt": utcnow_iso()},
            )
            logger.info("REPORT_ANALYSIS_DUPLICATE report=%s", report_id)
            return ReportStatus.ANALYZED

        to_save = analysis.items[:MAX_SAVED_ITEMS]
        for item in to_save:
            store.add(
                Collections.REPORT_ITEMS,
                {"userId": user_id, "creditReportId": report_id, **item.to_dict()},
            )

        if analysis.credit_score:
            store.add(
                Collections.CREDIT_SCORES,
                {
                    "userId": user_id,
                    "score": analysis.credit_score,
                    "bureau": bureau,
                    "recordedAt": utcnow_iso(),
                },
            )

        store.update(
            Collections.CREDIT_REPORTS,
            report_id,
            {
                "status": ReportStatus.ANALYZED,
                "analyzedAt": utcnow_iso(),
                "summary": analysis.summary,
                "analysisProvider": analysis.provider,
            },
        )
        generate_action_plan(store, user_id, report_id)
        _notify_complete(store, smtp, user_id, len(to_save), bureau)
        logger.info(
            "REPORT_ANALYSIS_COMPLETE report=%s items=%d saved=%d provider=%s",
            report_id,
            len(analysis.items),
            len(to_save),
            analysis.provider,
        )
        return ReportStatus.ANALYZED
    except Exception as exc:
        logger.exception("REPORT_ANALYSIS_UNHANDLED report=%s", report_id)
        _mark_error(store, report_id, str(exc))
        return ReportStatus.ERROR


def apply_sample_analysis(store: DocumentStore, user_id: str, report_id: str) -> Dict[str, Any]:
    """Populate a report with demo tradelines and a demo score."""

    existing = _existing_items(store, user_id, report_id)
    if existing:
        store.update(
            Collections.CREDIT_REPORTS,
            report_id,
            {"status": ReportStatus.ANALYZED, "analyzedAt": utcnow_iso()},
        )
        return {
            "success": True,
            "itemsCreated": 0,
            "disputableItems": sum(1 for i in existing if i.get("isDisputable")),
            "message": "Report already analyzed. Existing items preserved.",
        }

    items = sample_items(user_id, report_id)
    for item in items:
        store.add(Collections.REPORT_ITEMS, item)
    store.add(
        Collections.CREDIT_SCORES,
        {
            "userId": user_id,
            "score": SAMPLE_SCORE,
            "bureau": SAMPLE_SCORE_BUREAU,
            "recordedAt": utcnow_iso(),
        },
    )
    store.update(
        Collections.CREDIT_REPORTS,
        report_id,
        {"status": ReportStatus.ANALYZED, "analyzedAt": utcnow_iso()},
    )
    return {
        "success": True,
        "itemsCreated": len(items),
        "disputableItems": sum(1 for i in items if i["isDisputable"]),
    }
