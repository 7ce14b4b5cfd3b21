from __future__ import annotations

from functools import partial
from typing import Optional

import httpx

from credit800.core.letters.rendering import render_letter_pdf
from credit800.core.mail.base import (
    CarrierNotConfigured,
    CarrierStatus,
    MailAddress,
    MailCarrier,
    MailCarrierError,
    MailConfig,
    MailReceipt,
)
from credit800.core.mail.click2mail import Click2MailClient
from credit800.core.mail.lob import LobClient
from credit800.core.mail.postgrid import PostGridClient
from credit800.core.mail.status import (
    normalize_lob_status,
    derive_postgrid_status,
    normalize_click2mail_status,
)

PROVIDERS = ("click2mail", "lob", "postgrid")


def build_carrier(
    provider: str,
    config: MailConfig,
    *,
    wkhtmltopdf_path: str = "wkhtmltopdf",
    transport: Optional[httpx.BaseTransport] = None,
) -> MailCarrier:
    """Return a client for ``provider``; raises :class:`CarrierNotConfigured`."""

    if provider == "lob":
        return LobClient(config.lob_api_key, transport=transport)
    if provider == "postgrid":
        return PostGridClient(config.postgrid_api_key, transport=transport)
    if provider == "click2mail":
        return Click2MailClient(
            config.click2mail_username,
            config.click2mail_password,
            staging=config.click2mail_staging,
            pdf_renderer=partial(render_letter_pdf, wkhtmltopdf_path=wkhtmltopdf_path),
            transport=transport,
        )
    raise CarrierNotConfigured(f"unknown mail provider: {provider}")


__all__ = [
    "PROVIDERS",
    "CarrierNotConfigured",
    "CarrierStatus",
    "Click2MailClient",
    "LobClient",
    "MailAddress",
    "MailCarrier",
    "MailCarrierError",
    "MailConfig",
    "MailReceipt",
    "PostGridClient",
    "build_carrier",
    "normalize_lob_status",
    "derive_postgrid_status",
    "normalize_click2mail_status",
]
