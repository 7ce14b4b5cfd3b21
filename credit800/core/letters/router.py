from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from credit800.core.letters.catalog import LetterTemplate, get_template_by_id

logger = logging.getLogger(__name__)


@dataclass
class TemplateDecision:
    template: LetterTemplate
    router_reason: str


def _text(value: Any) -> str:
    return str(value or "").lower()


def select_template(item: Mapping[str, Any], requested_id: str | None = None) -> TemplateDecision:
    """Pick the dispute letter template for a report item.

    An explicit ``requested_id`` wins when it names a known template. Otherwise
    the choice follows the item's status and account type: collections and
    charge-offs get debt validation, inquiries get inquiry removal, late
    payments on original creditors get a goodwill letter, and everything else
    gets a bureau dispute.
    """

    if requested_id:
        template = get_template_by_id(requested_id)
        if template is not None:
            return TemplateDecision(template, "requested")
        logger.warning("LETTER_ROUTER_UNKNOWN_TEMPLATE id=%s", requested_id)

    status = _text(item.get("status"))
    account_type = _text(item.get("accountType"))

    if "inquiry" in account_type or "inquiry" in status:
        tag, reason = "inquiry-removal", "inquiry"
    elif "collection" in status or "collection" in account_type:
        tag, reason = "debt-validation", "collection"
    elif "charge" in status or "written" in status:
        tag, reason = "debt-validation", "charge_off"
    elif "late" in status or "delinquent" in status or item.get("latePayments"):
        tag, reason = "goodwill-late-payment", "late_payment"
    else:
        tag, reason = "bureau-dispute-inaccurate", "default"

    template = get_template_by_id(tag)
    if template is None:
        raise LookupError(f"letter template {tag!r} is not registered")
    return TemplateDecision(template, reason)


__all__ = ["TemplateDecision", "select_template"]
