from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from credit800.core.addresses import CreditorAddress


class MailCarrierError(RuntimeError):
    """Raised when a print-and-mail provider rejects or fails a request."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CarrierNotConfigured(MailCarrierError):
    """The selected carrier has no credentials configured."""


@dataclass
class MailAddress:
    name: str
    address_line1: str
    city: str
    state: str
    zip: str
    address_line2: str = ""
    organization: str = ""

    @classmethod
    def from_creditor(cls, addr: CreditorAddress) -> "MailAddress":
        return cls(
            name=addr.name,
            organization=addr.name,
            address_line1=addr.address,
            address_line2=addr.department or "",
            city=addr.city,
            state=addr.state,
            zip=addr.zip,
        )

    @classmethod
    def from_profile(cls, profile: Dict[str, Any]) -> "MailAddress":
        return cls(
            name=str(profile.get("fullName") or ""),
            address_line1=str(profile.get("address") or ""),
            address_line2=str(profile.get("address2") or ""),
            city=str(profile.get("city") or ""),
            state=str(profile.get("state") or ""),
            zip=str(profile.get("zip") or ""),
        )

    def split_name(self) -> tuple[str, str]:
        parts = self.name.strip().split()
        if not parts:
            return "", ""
        return parts[0], " ".join(parts[1:])


@dataclass
class MailReceipt:
    provider: str
    job_id: str
    status: str
    document_id: Optional[str] = None
    address_id: Optional[str] = None
    expected_delivery: Optional[str] = None


@dataclass
class CarrierStatus:
    status: str
    raw_status: str
    description: Optional[str] = None
    tracking: Optional[Dict[str, Any]] = None
    expected_delivery: Optional[str] = None
    events: List[Dict[str, Any]] = field(default_factory=list)


class MailCarrier:
    """Common surface of the Lob, PostGrid and Click2Mail clients."""

    name = "base"

    def __init__(
        self,
        *,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        auth: Optional[httpx.Auth | tuple[str, str]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._http = httpx.Client(
            base_url=base_url,
            headers=headers or {},
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def send_letter(
        self,
        *,
        to: MailAddress,
        sender: MailAddress,
        text: str,
        description: str = "Credit dispute letter",
    ) -> MailReceipt:
        raise NotImplementedError

    def get_status(self, job_id: str) -> CarrierStatus:
        raise NotImplementedError

    def _error(self, action: str, resp: httpx.Response) -> MailCarrierError:
        try:
            data = resp.json()
        except ValueError:
            data = None
        message = None
        if isinstance(data, dict):
            err = data.get("error")
            if isinstance(err, dict):
                message = err.get("message")
            message = message or data.get("message")
        message = message or resp.text
        return MailCarrierError(
            f"{self.name} {action} failed ({resp.status_code}): {message}",
            status_code=resp.status_code,
        )


@dataclass
class MailConfig:
    """Credentials and defaults for the print-and-mail providers."""

    provider: str = "click2mail"
    lob_api_key: str = ""
    postgrid_api_key: str = ""
    click2mail_username: str = ""
    click2mail_password: str = ""
    click2mail_staging: bool = False
