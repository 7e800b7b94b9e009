# core/subscription_helpers.py

"""
Helper functions for organization subscriptions and their payment trail.
"""

from typing import Optional, Dict, Any
from datetime import date

from core import db
from core.config import settings
from core.logging_config import logger
from core.utils import utc_now_iso
from models.enums import BillingPeriod, PaymentMethod, PaymentStatus, SubscriptionStatus
from models.subscription import PaymentResult


def create_or_update_organization_subscription(
    organization_id: str,
    plan_id: str,
    billing_period: BillingPeriod,
    price: float,
    status: SubscriptionStatus,
    period_start: date,
    period_end: date,
    stripe_subscription_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    One subscription row per organization: updated in place when it
    exists, inserted otherwise.
    """
    now = utc_now_iso()
    subscription_data = {
        "organization_id": organization_id,
        "plan_id": plan_id,
        "billing_period": BillingPeriod(billing_period).value,
        "price": price,
        "currency": settings.DEFAULT_CURRENCY,
        "status": SubscriptionStatus(status).value,
        "start_date": period_start.isoformat(),
        "current_period_start": period_start.isoformat(),
        "current_period_end": period_end.isoformat(),
        "updated_at": now,
    }
    if stripe_subscription_id:
        subscription_data["stripe_subscription_id"] = stripe_subscription_id

    existing = db.select_one("subscriptions", columns="id", eq={"organization_id": organization_id})

    if existing:
        subscription = db.update_one("subscriptions", subscription_data, eq={"id": existing["id"]})
    else:
        subscription = db.insert_one("subscriptions", {**subscription_data, "created_at": now})

    logger.info(
        f"Subscription for organization {organization_id} set to plan {plan_id} "
        f"({billing_period}, status={subscription_data['status']})"
    )
    return subscription


def record_subscription_payment(
    subscription: Dict[str, Any],
    method: PaymentMethod,
    amount: float,
    result: PaymentResult,
) -> Dict[str, Any]:
    return db.insert_one("subscription_payments", {
        "subscription_id": subscription["id"],
        "organization_id": subscription["organization_id"],
        "amount": amount,
        "currency": subscription.get("currency") or settings.DEFAULT_CURRENCY,
        "payment_method": PaymentMethod(method).value,
        "billing_period_start": subscription.get("current_period_start"),
        "billing_period_end": subscription.get("current_period_end"),
        "status": result.status.value,
        "transaction_id": result.transaction_id,
        "gateway_response": result.gateway_response,
        "paid_at": utc_now_iso() if result.status == PaymentStatus.completed else None,
    })
