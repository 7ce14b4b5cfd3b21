"""Rendering utilities for dispute letters."""

from __future__ import annotations

import html
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

import pdfkit
from jinja2 import Environment, FileSystemLoader

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_template_env: Environment | None = None


def ensure_template_env() -> Environment:
    """Return the cached Jinja2 environment for the letter templates."""

    global _template_env
    if _template_env is None:
        _template_env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _template_env


def render_text(template_name: str, **context: Any) -> str:
    template = ensure_template_env().get_template(template_name)
    return template.render(**context).strip() + "\n"


def format_letter_date(value: Optional[date] = None) -> str:
    """Format ``value`` (default today) as e.g. ``March 5, 2025``."""

    value = value or date.today()
    return f"{value:%B} {value.day}, {value.year}"


def format_money(amount: Any) -> str:
    try:
        number = float(amount)
    except (TypeError, ValueError):
        return "Unknown"
    if number.is_integer():
        return f"${int(number):,}"
    return f"${number:,.2f}"


def letter_to_html(text: str, *, font_size: str = "12px", margin: str = "1in") -> str:
    """Wrap plain letter text in a printable HTML page."""

    escaped = html.escape(text, quote=True)
    return f"""<html>
<head>
<meta charset="UTF-8">
<style>
  @page {{ size: letter; margin: {margin}; }}
  body {{ font-family: Arial, Helvetica, sans-serif; font-size: {font_size}; line-height: 1.5; color: #000; margin: 0; padding: 0; }}
</style>
</head>
<body>
<div style="white-space: pre-wrap; font-family: Arial, Helvetica, sans-serif; font-size: {font_size}; line-height: 1.5;">{escaped}</div>
</body>
</html>"""


def render_letter_pdf(text: str, *, wkhtmltopdf_path: str = "wkhtmltopdf") -> bytes:
    """Render plain letter text to PDF bytes via wkhtmltopdf."""

    config = pdfkit.configuration(wkhtmltopdf=wkhtmltopdf_path)
    options = {"quiet": "", "page-size": "Letter", "encoding": "UTF-8"}
    pdf = pdfkit.from_string(letter_to_html(text), False, configuration=config, options=options)
    logger.info("LETTER_PDF_RENDERED bytes=%d", len(pdf))
    return pdf


__all__ = [
    "TEMPLATES_DIR",
    "ensure_template_env",
    "format_letter_date",
    "format_money",
    "letter_to_html",
    "render_letter_pdf",
    "render_text",
]
