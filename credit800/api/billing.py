"""Stripe checkout, billing portal, subscription details and webhook."""

from __future__ import annotations

import logging
from typing import Any

import stripe
from flask import Blueprint, jsonify, request

from credit800.api.auth import require_user
from credit800.api.context import get_store, get_stripe
from credit800.api.errors import ApiError, bad_request
from credit800.api.helpers import user
from credit800.core.billing import BillingNotConfigured, WebhookSignatureError, get_user_subscription
from credit800.core.models import Collections

logger = logging.getLogger(__name__)

billing_bp = Blueprint("billing", __name__, url_prefix="/api/stripe")


@billing_bp.post("/checkout")
@require_user
def checkout() -> Any:
    service = get_stripe()
    try:
        url = service.create_checkout_session(get_store(), user().uid, user().email)
    except BillingNotConfigured as exc:
        raise ApiError(503, "Billing is not configured", str(exc)) from exc
    except stripe.StripeError as exc:
        logger.error("STRIPE_CHECKOUT_FAILED user=%s error=%s", user().uid, exc)
        raise ApiError(500, "Failed to create checkout session", str(exc)) from exc
    return jsonify({"url": url})


@billing_bp.post("/portal")
@require_user
def portal() -> Any:
    service = get_stripe()
    profile = get_store().get(Collections.USERS, user().uid) or {}
    customer_id = profile.get("stripeCustomerId")
    if not customer_id:
        raise bad_request("No billing account found")
    try:
        url = service.create_portal_session(customer_id)
    except stripe.StripeError as exc:
        logger.error("STRIPE_PORTAL_FAILED user=%s error=%s", user().uid, exc)
        raise ApiError(500, "Failed to create portal session", str(exc)) from exc
    return jsonify({"url": url})


@billing_bp.get("/subscription")
@require_user
def subscription() -> Any:
    store = get_store()
    summary = get_user_subscription(store, user().uid)
    if not summary["stripeSubscriptionId"]:
        return jsonify(
            {
                "plan": "pro" if summary["isPro"] else "free",
                "status": summary["status"],
                "subscription": None,
            }
        )
    service = get_stripe()
    try:
        return jsonify(service.subscription_details(store, user().uid))
    except stripe.StripeError as exc:
        logger.error("STRIPE_SUBSCRIPTION_FAILED user=%s error=%s", user().uid, exc)
        raise ApiError(500, "Failed to load subscription", str(exc)) from exc


@billing_bp.post("/webhook")
def webhook() -> Any:
    service = get_stripe()
    signature = request.headers.get("Stripe-Signature")
    if not signature:
        raise bad_request("Missing Stripe-Signature header")
    try:
        event = service.construct_event(request.get_data(), signature)
    except WebhookSignatureError as exc:
        logger.warning("STRIPE_WEBHOOK_REJECTED error=%s", exc)
        raise bad_request("Invalid signature", str(exc)) from exc

    try:
        service.handle_event(get_store(), event)
    except stripe.StripeError as exc:
        logger.error("STRIPE_WEBHOOK_FAILED type=%s error=%s", event["type"], exc)
        raise ApiError(500, "Webhook handler failed", str(exc)) from exc
    return jsonify({"received": True})
