"""Net-worth portfolio: manual accounts, snapshots and Plaid-linked accounts."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx
from flask import Blueprint, jsonify

from credit800.api.auth import require_user
from credit800.api.context import get_plaid, get_store
from credit800.api.errors import ApiError, bad_request
from credit800.api.helpers import owned_doc, parse_body, user
from credit800.api.schemas import AccountCreate, AccountUpdate, PlaidExchangeRequest, PlaidSyncRequest
from credit800.core.models import Collections, utcnow_iso
from credit800.core.plaid import PlaidError
from credit800.core.portfolio import (
    compute_allocation,
    compute_totals,
    map_plaid_type,
    new_account,
    snapshot_net_worth,
)

logger = logging.getLogger(__name__)

portfolio_bp = Blueprint("portfolio", __name__, url_prefix="/api/portfolio")

SNAPSHOT_HISTORY_DAYS = 90


def _current_balance(balances: Dict[str, Any] | None) -> float:
    return abs(float((balances or {}).get("current") or 0))


@portfolio_bp.get("/accounts")
@require_user
def list_accounts() -> Any:
    accounts = get_store().query_user(Collections.PORTFOLIO_ACCOUNTS, user().uid)
    return jsonify(
        {
            "accounts": accounts,
            "summary": compute_totals(accounts),
            "allocation": compute_allocation(accounts),
        }
    )


@portfolio_bp.post("/accounts")
@require_user
def create_account() -> Any:
    body = parse_body(AccountCreate)
    store = get_store()
    data = new_account(
        user().uid,
        name=body.name,
        institution=body.institution,
        type=body.type,
        balance=body.balance,
        currency=body.currency,
    )
    account_id = store.add(Collections.PORTFOLIO_ACCOUNTS, data)
    snapshot_net_worth(store, user().uid)
    return jsonify({"account": {"id": account_id, **data}})


@portfolio_bp.patch("/accounts/<account_id>")
@require_user
def update_account(account_id: str) -> Any:
    body = parse_body(AccountUpdate)
    account = owned_doc(Collections.PORTFOLIO_ACCOUNTS, account_id, "Account")
    updates: Dict[str, Any] = body.model_dump(exclude_unset=True)
    if "balance" in updates and account.get("source") != "manual":
        raise bad_request("Balance can only be edited on manual accounts")
    updates["updatedAt"] = utcnow_iso()

    store = get_store()
    store.update(Collections.PORTFOLIO_ACCOUNTS, account_id, updates)
    snapshot_net_worth(store, user().uid)
    return jsonify({"success": True})


@portfolio_bp.delete("/accounts/<account_id>")
@require_user
def delete_account(account_id: str) -> Any:
    account = owned_doc(Collections.PORTFOLIO_ACCOUNTS, account_id, "Account")
    store = get_store()
    store.delete(Collections.PORTFOLIO_ACCOUNTS, account_id)

    plaid_item_id = account.get("plaidItemId")
    if plaid_item_id:
        remaining = store.query(
            Collections.PORTFOLIO_ACCOUNTS,
            [("userId", "==", user().uid), ("plaidItemId", "==", plaid_item_id)],
            limit=1,
        )
        if not remaining:
            store.delete(Collections.PLAID_ITEMS, plaid_item_id)
            logger.info("PLAID_ITEM_REMOVED item=%s", plaid_item_id)

    snapshot_net_worth(store, user().uid)
    return jsonify({"success": True})


@portfolio_bp.get("/snapshots")
@require_user
def list_snapshots() -> Any:
    snapshots = get_store().query_user(
        Collections.PORTFOLIO_SNAPSHOTS,
        user().uid,
        order_by="date",
        descending=True,
        limit=SNAPSHOT_HISTORY_DAYS,
    )
    return jsonify({"snapshots": list(reversed(snapshots))})


@portfolio_bp.post("/plaid/create-link-token")
@require_user
def create_link_token() -> Any:
    plaid = get_plaid()
    try:
        return jsonify({"linkToken": plaid.create_link_token(user().uid)})
    except (PlaidError, httpx.HTTPError) as exc:
        logger.error("PLAID_LINK_TOKEN_FAILED user=%s error=%s", user().uid, exc)
        raise ApiError(500, "Failed to create link token", str(exc)) from exc


@portfolio_bp.post("/plaid/exchange-token")
@require_user
def exchange_token() -> Any:
    body = parse_body(PlaidExchangeRequest)
    plaid = get_plaid()
    try:
        exchanged = plaid.exchange_public_token(body.publicToken)
    except (PlaidError, httpx.HTTPError) as exc:
        logger.error("PLAID_EXCHANGE_FAILED user=%s error=%s", user().uid, exc)
        raise ApiError(500, "Failed to exchange token", str(exc)) from exc

    store = get_store()
    now = utcnow_iso()
    item_doc_id = store.add(
        Collections.PLAID_ITEMS,
        {
            "userId": user().uid,
            "accessToken": exchanged["access_token"],
            "itemId": exchanged["item_id"],
            "institutionId": body.institutionId,
            "institutionName": body.institutionName,
            "status": "active",
            "createdAt": now,
            "updatedAt": now,
        },
    )

    created: List[Dict[str, Any]] = []
    for acct in body.accounts:
        data = new_account(
            user().uid,
            name=acct.get("name") or "Account",
            institution=body.institutionName,
            type=map_plaid_type(acct.get("type") or "", acct.get("subtype")),
            balance=_current_balance(acct.get("balances")),
            source="plaid",
            plaidItemId=item_doc_id,
            plaidAccountId=acct.get("id") or acct.get("account_id"),
            lastSyncedAt=now,
        )
        created.append({"id": store.add(Collections.PORTFOLIO_ACCOUNTS, data), **data})

    snapshot_net_worth(store, user().uid)
    logger.info("PLAID_ACCOUNTS_IMPORTED user=%s item=%s count=%d", user().uid, item_doc_id, len(created))
    return jsonify({"accounts": created})


@portfolio_bp.post("/plaid/sync")
@require_user
def sync_balances() -> Any:
    body = parse_body(PlaidSyncRequest, allow_empty=True)
    store = get_store()
    items = store.query_user(Collections.PLAID_ITEMS, user().uid)
    if body.plaidItemId:
        items = [i for i in items if i["id"] == body.plaidItemId]
    if not items:
        return jsonify({"synced": 0, "accounts": []})

    plaid = get_plaid()
    now = utcnow_iso()
    updated: List[Dict[str, Any]] = []
    for item in items:
        try:
            balances = plaid.get_balances(item["accessToken"])
        except (PlaidError, httpx.HTTPError) as exc:
            logger.warning("PLAID_SYNC_ITEM_FAILED item=%s error=%s", item["id"], exc)
            store.update(Collections.PLAID_ITEMS, item["id"], {"status": "error", "updatedAt": now})
            continue

        for plaid_acct in balances:
            rows = store.query(
                Collections.PORTFOLIO_ACCOUNTS,
                [("userId", "==", user().uid), ("plaidAccountId", "==", plaid_acct.get("account_id"))],
            )
            for row in rows:
                balance = _current_balance(plaid_acct.get("balances"))
                store.update(
                    Collections.PORTFOLIO_ACCOUNTS,
                    row["id"],
                    {"balance": balance, "lastSyncedAt": now, "updatedAt": now},
                )
                updated.append({**row, "balance": balance, "lastSyncedAt": now})
        store.update(Collections.PLAID_ITEMS, item["id"], {"status": "active", "updatedAt": now})

    snapshot_net_worth(store, user().uid)
    return jsonify({"synced": len(updated), "accounts": updated})
