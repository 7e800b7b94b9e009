# routers/organization.py

from fastapi import APIRouter, Depends, HTTPException

from dependencies.auth import get_current_user, CurrentUser
from core.logging_config import logger
from core.payments import compute_period_end, compute_price, process_payment, should_skip_payment
from core.permission_helpers import require_organization, requires_permission
from core.plan_features import get_plan_by_name
from core.plan_security import get_organization_plan_name, get_organization_subscription
from core.subscription_helpers import (
    create_or_update_organization_subscription,
    record_subscription_payment,
)
from core.utils import utc_now
from models.enums import PaymentStatus, SubscriptionStatus
from models.subscription import PaymentRequest, SubscriptionRead


router = APIRouter(
    prefix="/api/organization",
    tags=["Organization"],
)


# -------------------------------------------------------------
# GET current subscription
# -------------------------------------------------------------
@router.get("/subscription")
def get_subscription(current_user: CurrentUser = Depends(requires_permission("Organization", "read"))):
    organization_id = require_organization(current_user)
    subscription = get_organization_subscription(organization_id)

    return {
        "planName": get_organization_plan_name(organization_id, current_user.is_super_admin),
        "subscription": SubscriptionRead.model_validate(subscription).to_api() if subscription else None,
    }


# -------------------------------------------------------------
# POST pay for a plan
# -------------------------------------------------------------
@router.post("/payment")
def post_payment(payload: PaymentRequest, current_user: CurrentUser = Depends(get_current_user)):
    """
    Subscribe the caller's organization to ``planName``.

    In development with SKIP_PAYMENT_IN_DEV the provider is not called and
    the subscription is activated directly.
    """
    if not current_user.organization_id:
        raise HTTPException(400, "User has no organization")
    organization_id = current_user.organization_id

    plan = get_plan_by_name(payload.plan_name)
    if not plan:
        raise HTTPException(404, f"Plan '{payload.plan_name}' not found")

    price = compute_price(plan, payload.billing_period)
    start = utc_now().date()
    period_end = compute_period_end(start, payload.billing_period)

    if should_skip_payment():
        logger.info(f"Skipping payment for organization {organization_id} (development mode)")
        create_or_update_organization_subscription(
            organization_id, plan["id"], payload.billing_period, price,
            SubscriptionStatus.active, start, period_end,
        )
        return {
            "success": True,
            "message": "Payment skipped in development mode",
            "subscription": {"status": SubscriptionStatus.active.value, "transactionId": None},
        }

    result = process_payment(
        payload.payment_method,
        plan["name"],
        payload.billing_period,
        organization_id,
        payload.payment_data,
    )
    if not result.success:
        logger.warning(f"Payment failed for organization {organization_id}: {result.message}")
        raise HTTPException(400, result.message or "Payment failed")

    status = SubscriptionStatus.active if result.status == PaymentStatus.completed else SubscriptionStatus.trialing
    subscription = create_or_update_organization_subscription(
        organization_id, plan["id"], payload.billing_period, price, status, start, period_end,
        stripe_subscription_id=result.transaction_id if payload.payment_method == "stripe" else None,
    )
    record_subscription_payment(subscription, payload.payment_method, price, result)

    return {
        "success": True,
        "message": result.message or "Payment processed successfully",
        "subscription": {"status": status.value, "transactionId": result.transaction_id},
    }
