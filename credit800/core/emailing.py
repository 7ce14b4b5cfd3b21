from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

logger = logging.getLogger(__name__)

APP_URL = "https://credit-800.com"
FOOTER = "Credit 800 · Not a credit repair organization. Educational tool only."


@dataclass
class SmtpConfig:
    server: str = "localhost"
    port: int = 1025
    username: str = "noreply@credit-800.com"
    password: str = ""
    enabled: bool = True


def send_email(config: SmtpConfig, receiver_email: str, subject: str, body: str) -> bool:
    """Send a plain-text email; returns ``False`` instead of raising on failure."""

    if not config.enabled or not receiver_email:
        logger.info("EMAIL_SKIPPED subject=%r", subject)
        return False

    msg = EmailMessage()
    msg["From"] = f"Credit 800 <{config.username}>"
    msg["To"] = receiver_email
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(config.server, config.port, timeout=10) as smtp:
            if config.password:
                smtp.starttls()
                smtp.login(config.username, config.password)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("EMAIL_SEND_FAILED to=%s subject=%r error=%s", receiver_email, subject, exc)
        return False
    logger.info("EMAIL_SENT to=%s subject=%r", receiver_email, subject)
    return True


def send_analysis_complete_email(
    config: SmtpConfig, to: str, name: str | None, item_count: int, bureau: str
) -> bool:
    plural = "s" if item_count != 1 else ""
    body = (
        f"Hi {name or 'there'},\n\n"
        f"Your {bureau} credit report analysis is ready.\n\n"
        f"{item_count} negative item{plural} identified. Each item includes specific removal "
        "strategies with success rates.\n\n"
        "Log in to review each item and generate your dispute letters:\n"
        f"{APP_URL}/disputes\n\n{FOOTER}\n"
    )
    return send_email(
        config, to, f"Your {bureau} report analysis is ready: {item_count} items found", body
    )


def send_dispute_mailed_email(
    config: SmtpConfig, to: str, name: str | None, creditor_name: str, expected_delivery: str | None
) -> bool:
    body = (
        f"Hi {name or 'there'},\n\n"
        f"Your dispute letter to {creditor_name} has been submitted to USPS and will be "
        f"delivered by {expected_delivery or '5-7 business days'}.\n\n"
        "What happens next?\n"
        "- The recipient has 30 days to respond under FCRA rules\n"
        "- Track your mail status in the Disputes tab\n"
        "- If no response after 30 days, use the Escalate button for Round 2\n\n"
        f"{APP_URL}/disputes\n\n{FOOTER}\n"
    )
    return send_email(config, to, f"Your dispute letter to {creditor_name} has been mailed", body)


def send_welcome_email(config: SmtpConfig, to: str, name: str | None) -> bool:
    body = (
        f"Hi {name or 'there'},\n\n"
        "You're all set! Here's how to get started:\n\n"
        "1. Upload your credit report (PDF from Equifax, Experian, or TransUnion)\n"
        "2. Review the analysis. We'll identify every disputable item\n"
        "3. Generate dispute letters, FCRA-compliant and ready to send\n"
        "4. Mail via USPS directly from the app\n\n"
        f"{APP_URL}/upload\n\n{FOOTER}\n"
    )
    return send_email(config, to, "Welcome to Credit 800: let's fix your credit", body)


def send_credit_changes_email(config: SmtpConfig, to: str, name: str | None, changes: dict) -> bool:
    lines = [f"Hi {name or 'there'},", "", "We compared your latest credit report with the previous one.", ""]
    for item in changes.get("newItems") or []:
        lines.append(f"+ New: {item['creditorName']} ({item['status'] or 'unknown status'}, {item['bureau']})")
    for item in changes.get("removedItems") or []:
        lines.append(f"- Removed: {item['creditorName']} ({item['bureau']})")
    for change in changes.get("statusChanges") or []:
        lines.append(f"* {change['creditorName']}: {change['oldStatus']} -> {change['newStatus']}")
    delta = changes.get("totalBalanceDelta") or 0
    if delta:
        lines.append(f"Total reported balance {'up' if delta > 0 else 'down'} ${abs(delta):,.0f}")
    lines += ["", "Review the changes on your dashboard:", f"{APP_URL}/dashboard", "", FOOTER, ""]
    return send_email(config, to, "Changes detected on your credit report", "\n".join(lines))
