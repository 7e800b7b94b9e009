# core/payments.py

"""
Subscription pricing and payment processors.

Processors are stubs: each returns a completed PaymentResult with a
provider-prefixed transaction id. Swapping one for a real integration only
requires keeping the PaymentResult contract.
"""

import calendar
import time
from datetime import date
from typing import Callable, Dict, Optional

from core.config import settings
from core.logging_config import get_logger
from models.enums import BillingPeriod, PaymentMethod, PaymentStatus
from models.subscription import PaymentResult

logger = get_logger("payments")


# ============================================================
# Pricing
# ============================================================

def compute_price(plan: dict, billing_period: BillingPeriod) -> float:
    """Yearly falls back to 12 months at the yearly discount."""
    monthly = plan.get("price_monthly")

    if billing_period == BillingPeriod.yearly:
        if plan.get("price_yearly"):
            return float(plan["price_yearly"])
        if monthly:
            return float(monthly) * 12 * settings.YEARLY_DISCOUNT_FACTOR
        return 0.0

    return float(monthly or 0)


def add_months(start: date, months: int) -> date:
    """Calendar month addition, clamped to the last day of the month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def compute_period_end(start: date, billing_period: BillingPeriod) -> date:
    return add_months(start, 12 if billing_period == BillingPeriod.yearly else 1)


def should_skip_payment() -> bool:
    return settings.SKIP_PAYMENT_IN_DEV and settings.ENV == "development"


# ============================================================
# Processors
# ============================================================

def _stub_processor(prefix: str, provider: str) -> Callable[..., PaymentResult]:
    def process(plan_name: str, billing_period: BillingPeriod, organization_id: str,
                payment_data: Optional[dict] = None) -> PaymentResult:
        logger.info(
            f"Processing {provider} payment: org={organization_id} plan={plan_name} period={billing_period}"
        )
        return PaymentResult(
            success=True,
            status=PaymentStatus.completed,
            message=f"{provider} payment processed successfully",
            transaction_id=f"{prefix}_{int(time.time() * 1000)}",
            gateway_response={"provider": provider, "stub": True},
        )

    return process


PROCESSORS: Dict[PaymentMethod, Callable[..., PaymentResult]] = {
    PaymentMethod.stripe: _stub_processor("stripe", "Stripe"),
    PaymentMethod.paypal: _stub_processor("paypal", "PayPal"),
    PaymentMethod.wave: _stub_processor("wave", "Wave"),
    PaymentMethod.orange_money: _stub_processor("orange", "Orange Money"),
}


def process_payment(method: PaymentMethod, plan_name: str, billing_period: BillingPeriod,
                    organization_id: str, payment_data: Optional[dict] = None) -> PaymentResult:
    processor = PROCESSORS.get(PaymentMethod(method))
    if processor is None:
        return PaymentResult(success=False, status=PaymentStatus.failed, message=f"Unsupported payment method: {method}")
    return processor(plan_name, billing_period, organization_id, payment_data)
