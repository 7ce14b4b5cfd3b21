from credit800.core.letters.catalog import (
    LETTER_TEMPLATES,
    TEMPLATE_CATEGORIES,
    LetterParams,
    LetterTemplate,
    get_template_by_id,
    templates_for_category,
)
from credit800.core.letters.cfpb import COMPLAINT_TYPES, generate_complaint_letter, get_complaint_type
from credit800.core.letters.escalation import ESCALATION_TEMPLATES, get_escalation_template
from credit800.core.letters.rendering import (
    format_letter_date,
    format_money,
    letter_to_html,
    render_letter_pdf,
)
from credit800.core.letters.router import TemplateDecision, select_template

__all__ = [
    "COMPLAINT_TYPES",
    "ESCALATION_TEMPLATES",
    "LETTER_TEMPLATES",
    "TEMPLATE_CATEGORIES",
    "LetterParams",
    "LetterTemplate",
    "TemplateDecision",
    "format_letter_date",
    "format_money",
    "generate_complaint_letter",
    "get_complaint_type",
    "get_escalation_template",
    "get_template_by_id",
    "letter_to_html",
    "render_letter_pdf",
    "select_template",
    "templates_for_category",
]
