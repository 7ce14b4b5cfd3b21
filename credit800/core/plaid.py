from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

PLAID_ENVIRONMENTS = {
    "sandbox": "https://sandbox.plaid.com",
    "development": "https://development.plaid.com",
    "production": "https://production.plaid.com",
}


class PlaidError(RuntimeError):
    def __init__(self, message: str, *, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code


class PlaidNotConfigured(PlaidError):
    pass


@dataclass
class PlaidConfig:
    client_id: str = ""
    secret: str = ""
    env: str = "sandbox"
    client_name: str = "Credit 800"

    @property
    def usable(self) -> bool:
        return bool(self.client_id and self.secret)


class PlaidClient:
    """Thin client for the three Plaid endpoints the portfolio uses."""

    def __init__(self, config: PlaidConfig, *, transport: Optional[httpx.BaseTransport] = None):
        if not config.usable:
            raise PlaidNotConfigured("PLAID_CLIENT_ID and PLAID_SECRET are not configured")
        if config.env not in PLAID_ENVIRONMENTS:
            raise PlaidNotConfigured(f"unknown PLAID_ENV: {config.env}")
        self.config = config
        self._http = httpx.Client(
            base_url=PLAID_ENVIRONMENTS[config.env],
            headers={"PLAID-CLIENT-ID": config.client_id, "PLAID-SECRET": config.secret},
            timeout=30.0,
            transport=transport,
        )

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        resp = self._http.post(path, json=body)
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code >= 400:
            raise PlaidError(
                f"plaid {path} failed ({resp.status_code}): {data.get('error_message') or resp.text}",
                error_code=data.get("error_code"),
            )
        return data

    def create_link_token(self, user_id: str) -> str:
        data = self._post(
            "/link/token/create",
            {
                "user": {"client_user_id": user_id},
                "client_name": self.config.client_name,
                "products": ["assets"],
                "country_codes": ["US"],
                "language": "en",
            },
        )
        return data["link_token"]

    def exchange_public_token(self, public_token: str) -> Dict[str, str]:
        data = self._post("/item/public_token/exchange", {"public_token": public_token})
        logger.info("PLAID_TOKEN_EXCHANGED item=%s", data.get("item_id"))
        return {"access_token": data["access_token"], "item_id": data["item_id"]}

    def get_balances(self, access_token: str) -> List[Dict[str, Any]]:
        data = self._post("/accounts/balance/get", {"access_token": access_token})
        return list(data.get("accounts") or [])
