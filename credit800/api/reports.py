"""Credit report upload, analysis and comparison endpoints."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from flask import Blueprint, jsonify, request

from credit800.api.auth import require_user
from credit800.api.context import get_analyzer, get_config, get_limiter, get_smtp, get_store
from credit800.api.errors import ApiError, bad_request
from credit800.api.helpers import owned_doc, parse_body, require_arg, user
from credit800.api.schemas import AnalyzeReportRequest, CompareReportsRequest, CreateReportRequest
from credit800.api.tasks import analyze_report_task, app as celery_app, run_analysis
from credit800.core.analysis import apply_sample_analysis
from credit800.core.billing import is_pro
from credit800.core.models import Collections, ReportStatus, utcnow_iso
from credit800.core.reports import compare_reports, reset_user_reports
from credit800.core.uploads import MAX_UPLOAD_BYTES, inspect_pdf, store_upload

logger = logging.getLogger(__name__)

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _is_pdf(filename: str, mimetype: str | None) -> bool:
    return "pdf" in (mimetype or "") or filename.lower().endswith(".pdf")


@reports_bp.post("/upload")
@require_user
def upload_report() -> Any:
    file = request.files.get("file")
    bureau = (request.form.get("bureau") or "UNKNOWN").strip() or "UNKNOWN"
    if file is None or not file.filename:
        raise bad_request("No file provided")
    if not _is_pdf(file.filename, file.mimetype):
        raise bad_request("File must be a PDF")

    data = file.read()
    if not data:
        raise bad_request("Uploaded file is empty")
    if len(data) > MAX_UPLOAD_BYTES:
        raise bad_request("File too large", f"max {MAX_UPLOAD_BYTES // (1024 * 1024)}MB")

    store = get_store()
    uid = user().uid
    limiter = get_limiter()
    if not limiter.allow(uid, pro=is_pro(store, uid)):
        raise ApiError(
            429,
            "Upload limit reached",
            "Free accounts can upload 1 report per day; upgrade to Pro for more.",
            retryAfter=limiter.retry_after(uid),
        )

    path = store_upload(get_config().upload_dir, uid, file.filename, data)
    info = inspect_pdf(path)
    report_id = store.add(
        Collections.CREDIT_REPORTS,
        {
            "userId": uid,
            "fileName": file.filename,
            "filePath": str(path),
            "fileSize": len(data),
            "pageCount": info["pageCount"],
            "uploadedAt": utcnow_iso(),
            "status": ReportStatus.UPLOADED,
            "bureau": bureau,
        },
    )
    logger.info("REPORT_UPLOADED report=%s user=%s bytes=%d", report_id, uid, len(data))
    return jsonify(
        {
            "success": True,
            "reportId": report_id,
            "fileName": file.filename,
            "fileSize": len(data),
            "pageCount": info["pageCount"],
        }
    )


@reports_bp.post("/create")
@require_user
def create_report() -> Any:
    body = parse_body(CreateReportRequest)
    uid = user().uid
    file_path = None
    if body.filePath:
        root = (Path(get_config().upload_dir) / uid).resolve()
        candidate = Path(body.filePath).resolve()
        if root not in candidate.parents:
            raise bad_request("filePath must point to one of your uploads")
        file_path = str(candidate)

    report_id = get_store().add(
        Collections.CREDIT_REPORTS,
        {
            "userId": uid,
            "fileName": body.fileName,
            "fileSize": body.fileSize,
            "filePath": file_path,
            "uploadedAt": utcnow_iso(),
            "status": ReportStatus.UPLOADED,
            "bureau": body.bureau or "UNKNOWN",
        },
    )
    return jsonify({"success": True, "reportId": report_id})


@reports_bp.post("/analyze")
@require_user
def analyze_report() -> Any:
    body = parse_body(AnalyzeReportRequest)
    report = owned_doc(Collections.CREDIT_REPORTS, body.reportId, "Report")
    store = get_store()
    uid = user().uid

    if body.simulateData:
        return jsonify(apply_sample_analysis(store, uid, body.reportId))

    if report.get("status") == ReportStatus.ANALYZING:
        raise ApiError(409, "Analysis already in progress")
    if not report.get("filePath"):
        raise bad_request("Report has no stored file")

    store.update(
        Collections.CREDIT_REPORTS,
        body.reportId,
        {"status": ReportStatus.ANALYZING, "errorMessage": None},
    )
    bureau = report.get("bureau") or "UNKNOWN"
    if celery_app.conf.task_always_eager:
        run_analysis(
            store, get_analyzer(), body.reportId, uid, report["filePath"], bureau, smtp=get_smtp()
        )
    else:
        analyze_report_task.delay(body.reportId, uid, report["filePath"], bureau)
    logger.info("REPORT_ANALYSIS_QUEUED report=%s user=%s", body.reportId, uid)

    current = store.get(Collections.CREDIT_REPORTS, body.reportId) or {}
    return jsonify({"success": True, "reportId": body.reportId, "status": current.get("status")})


@reports_bp.get("/status")
@require_user
def report_status() -> Any:
    report_id = require_arg("reportId")
    report = owned_doc(Collections.CREDIT_REPORTS, report_id, "Report")
    items = get_store().query(
        Collections.REPORT_ITEMS,
        [("userId", "==", user().uid), ("creditReportId", "==", report_id)],
    )
    return jsonify(
        {
            "reportId": report_id,
            "status": report.get("status"),
            "errorMessage": report.get("errorMessage"),
            "summary": report.get("summary"),
            "analyzedAt": report.get("analyzedAt"),
            "itemCount": len(items),
        }
    )


@reports_bp.get("")
@require_user
def list_reports() -> Any:
    reports = get_store().query_user(
        Collections.CREDIT_REPORTS, user().uid, order_by="uploadedAt", descending=True
    )
    return jsonify({"reports": reports})


@reports_bp.get("/items")
@require_user
def list_items() -> Any:
    filters = [("userId", "==", user().uid)]
    report_id = request.args.get("reportId")
    if report_id:
        owned_doc(Collections.CREDIT_REPORTS, report_id, "Report")
        filters.append(("creditReportId", "==", report_id))
    return jsonify({"items": get_store().query(Collections.REPORT_ITEMS, filters)})


@reports_bp.post("/reset")
@require_user
def reset_reports() -> Any:
    return jsonify(reset_user_reports(get_store(), user().uid))


@reports_bp.post("/compare")
@require_user
def compare() -> Any:
    body = parse_body(CompareReportsRequest)
    owned_doc(Collections.CREDIT_REPORTS, body.reportId, "Report")
    if body.previousReportId:
        owned_doc(Collections.CREDIT_REPORTS, body.previousReportId, "Report")
    result = compare_reports(
        get_store(),
        user().uid,
        body.reportId,
        body.previousReportId,
        email=user().email,
        smtp=get_smtp(),
    )
    return jsonify(result)
