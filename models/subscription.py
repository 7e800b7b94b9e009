# models/subscription.py

from typing import Any, Dict, Optional
from datetime import date, datetime
from pydantic import Field

from models.base import CamelModel
from models.enums import BillingPeriod, PaymentMethod, PaymentStatus, SubscriptionStatus


class SubscriptionRead(CamelModel):
    """Organization subscription row."""
    id: str
    organization_id: str
    plan_id: Optional[str] = None
    billing_period: BillingPeriod = BillingPeriod.monthly
    price: Optional[float] = None
    currency: str = "XOF"
    status: SubscriptionStatus
    start_date: Optional[date] = None
    current_period_start: Optional[date] = None
    current_period_end: Optional[date] = None
    stripe_subscription_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentRequest(CamelModel):
    """POST /api/organization/payment"""
    plan_name: str = Field(..., min_length=1)
    billing_period: BillingPeriod
    payment_method: PaymentMethod
    payment_data: Optional[Dict[str, Any]] = None


class PaymentResult(CamelModel):
    """What a payment processor returns."""
    success: bool
    status: PaymentStatus
    message: str
    transaction_id: Optional[str] = None
    gateway_response: Optional[Dict[str, Any]] = None
