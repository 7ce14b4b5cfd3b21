"""Stripe subscriptions: checkout, billing portal, subscription details and webhooks.

Subscription state lives on the user document (``subscriptionStatus``,
``stripeCustomerId``, ``stripeSubscriptionId``, ``currentPeriodEnd``) and is
kept current by the webhook.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import stripe

from credit800.core.models import Collections
from credit800.core.store import DocumentStore

logger = logging.getLogger(__name__)

PRO_PRICE_CENTS = 1999
MRR_CENTS_PER_PRO_USER = 2999
ACTIVE_STATUSES = ("active", "trialing")


class BillingNotConfigured(RuntimeError):
    pass


class WebhookSignatureError(ValueError):
    pass


@dataclass
class StripeConfig:
    secret_key: str = ""
    webhook_secret: str = ""
    pro_price_id: str = ""
    app_url: str = "https://credit-800.com"

    @property
    def usable(self) -> bool:
        return bool(self.secret_key)


def _iso_from_epoch(seconds: Any) -> Optional[str]:
    if not seconds:
        return None
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc).isoformat().replace("+00:00", "Z")


def _period_end(subscription: Any) -> Optional[str]:
    end = subscription.get("current_period_end")
    if end is None:
        items = (subscription.get("items") or {}).get("data") or []
        end = items[0].get("current_period_end") if items else None
    return _iso_from_epoch(end)


def get_user_subscription(store: DocumentStore, user_id: str, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Subscription summary from the user document; ``expired`` once the period has ended."""

    user = store.get(Collections.USERS, user_id)
    if not user:
        return {
            "isPro": False,
            "stripeCustomerId": None,
            "stripeSubscriptionId": None,
            "currentPeriodEnd": None,
            "status": "none",
        }

    status = user.get("subscriptionStatus") or "none"
    is_pro = status in ACTIVE_STATUSES
    period_end = user.get("currentPeriodEnd") or None
    if is_pro and period_end:
        now = now or datetime.now(timezone.utc)
        try:
            ends_at = datetime.fromisoformat(period_end.replace("Z", "+00:00"))
        except ValueError:
            ends_at = None
        if ends_at is not None and ends_at.tzinfo is None:
            ends_at = ends_at.replace(tzinfo=timezone.utc)
        ended = ends_at is not None and ends_at < now
        if ended:
            is_pro, status = False, "expired"

    return {
        "isPro": is_pro,
        "stripeCustomerId": user.get("stripeCustomerId") or None,
        "stripeSubscriptionId": user.get("stripeSubscriptionId") or None,
        "currentPeriodEnd": period_end,
        "status": status,
    }


def is_pro(store: DocumentStore, user_id: str) -> bool:
    return get_user_subscription(store, user_id)["isPro"]


class StripeService:
    def __init__(self, config: StripeConfig, client: Any = None) -> None:
        if not config.usable:
            raise BillingNotConfigured("STRIPE_SECRET_KEY is not configured")
        self.config = config
        self._client = client or stripe.StripeClient(config.secret_key)

    def create_checkout_session(self, store: DocumentStore, user_id: str, email: Optional[str]) -> str:
        if not self.config.pro_price_id:
            raise BillingNotConfigured("STRIPE_PRO_PRICE_ID is not configured")

        user = store.get(Collections.USERS, user_id) or {}
        customer_id = user.get("stripeCustomerId")
        if not customer_id:
            params: Dict[str, Any] = {"metadata": {"firebaseUid": user_id}}
            if email:
                params["email"] = email
            customer = self._client.customers.create(params=params)
            customer_id = customer.id
            store.set(Collections.USERS, user_id, {"stripeCustomerId": customer_id}, merge=True)
            logger.info("STRIPE_CUSTOMER_CREATED user=%s customer=%s", user_id, customer_id)

        session = self._client.checkout.sessions.create(
            params={
                "customer": customer_id,
                "mode": "subscription",
                "payment_method_types": ["card"],
                "customer_update": {"name": "auto", "address": "auto"},
                "line_items": [{"price": self.config.pro_price_id, "quantity": 1}],
                "success_url": f"{self.config.app_url}/dashboard?upgraded=true",
                "cancel_url": f"{self.config.app_url}/pricing",
                "metadata": {"firebaseUid": user_id},
            }
        )
        return session.url

    def create_portal_session(self, customer_id: str) -> str:
        session = self._client.billing_portal.sessions.create(
            params={"customer": customer_id, "return_url": f"{self.config.app_url}/dashboard"}
        )
        return session.url

    def subscription_details(self, store: DocumentStore, user_id: str) -> Dict[str, Any]:
        user = store.get(Collections.USERS, user_id) or {}
        customer_id = user.get("stripeCustomerId")
        subscription_id = user.get("stripeSubscriptionId")
        if not customer_id or not subscription_id:
            status = user.get("subscriptionStatus")
            return {
                "plan": "pro" if status in ACTIVE_STATUSES else "free",
                "status": status or "none",
                "subscription": None,
            }

        sub = self._client.subscriptions.retrieve(
            subscription_id, params={"expand": ["default_payment_method", "latest_invoice"]}
        )
        items = (sub.get("items") or {}).get("data") or []
        price = items[0].get("price") if items else None
        payment_method = sub.get("default_payment_method")
        card = payment_method.get("card") if payment_method else None
        invoice = sub.get("latest_invoice")
        return {
            "plan": "pro" if sub.get("status") in ACTIVE_STATUSES else "free",
            "status": sub.get("status"),
            "currentPeriodEnd": _period_end(sub),
            "cancelAtPeriodEnd": bool(sub.get("cancel_at_period_end")),
            "amount": (price.get("unit_amount") if price else None) or PRO_PRICE_CENTS,
            "currency": (price.get("currency") if price else None) or "usd",
            "paymentMethod": (
                {
                    "brand": card.get("brand"),
                    "last4": card.get("last4"),
                    "expMonth": card.get("exp_month"),
                    "expYear": card.get("exp_year"),
                }
                if card
                else None
            ),
            "lastInvoiceAmount": invoice.get("amount_paid") if invoice else None,
            "lastInvoiceDate": _iso_from_epoch(invoice.get("created")) if invoice else None,
        }

    def construct_event(self, payload: bytes, signature: str) -> Any:
        try:
            return stripe.Webhook.construct_event(payload, signature, self.config.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise WebhookSignatureError(str(exc)) from exc

    def _uid_for_customer(self, customer_id: str) -> Optional[str]:
        customer = self._client.customers.retrieve(customer_id)
        metadata = customer.get("metadata") or {}
        return metadata.get("firebaseUid")

    def handle_event(self, store: DocumentStore, event: Any) -> Optional[str]:
        """Apply one webhook event to the user document; returns the uid touched."""

        event_type = event["type"]
        obj = event["data"]["object"]
        uid: Optional[str] = None

        if event_type == "checkout.session.completed":
            uid = (obj.get("metadata") or {}).get("firebaseUid")
            if uid and obj.get("subscription"):
                sub = self._client.subscriptions.retrieve(obj["subscription"])
                store.set(
                    Collections.USERS,
                    uid,
                    {
                        "stripeSubscriptionId": sub.get("id"),
                        "subscriptionStatus": sub.get("status"),
                        "currentPeriodEnd": _period_end(sub),
                    },
                    merge=True,
                )
        elif event_type == "customer.subscription.updated":
            uid = self._uid_for_customer(obj["customer"])
            if uid:
                store.set(
                    Collections.USERS,
                    uid,
                    {"subscriptionStatus": obj.get("status"), "currentPeriodEnd": _period_end(obj)},
                    merge=True,
                )
        elif event_type == "customer.subscription.deleted":
            uid = self._uid_for_customer(obj["customer"])
            if uid:
                store.set(
                    Collections.USERS,
                    uid,
                    {"subscriptionStatus": "canceled", "stripeSubscriptionId": None},
                    merge=True,
                )
        elif event_type == "invoice.payment_failed":
            uid = self._uid_for_customer(obj["customer"])
            if uid:
                store.set(Collections.USERS, uid, {"subscriptionStatus": "past_due"}, merge=True)
        else:
            logger.debug("STRIPE_EVENT_IGNORED type=%s", event_type)
            return None

        logger.info("STRIPE_EVENT_APPLIED type=%s user=%s", event_type, uid)
        return uid
