# models/plan.py

from typing import Any, Dict, Optional
from uuid import UUID
from pydantic import Field

from models.base import CamelModel
from models.enums import PriceType


FEATURE_NAME_PATTERN = r"^[a-z][a-z0-9_]*$"


# ===============================================================
# PLAN
# ===============================================================

class PlanRead(CamelModel):
    id: str
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    price_monthly: Optional[float] = None
    price_yearly: Optional[float] = None
    price_type: Optional[PriceType] = PriceType.fixed
    lots_limit: Optional[int] = None
    users_limit: Optional[int] = None
    extranet_tenants_limit: Optional[int] = None
    is_active: bool = True
    sort_order: Optional[int] = 0


class PlanUpdate(CamelModel):
    """PATCH body - all fields optional; null limits mean unlimited."""
    display_name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price_monthly: Optional[float] = Field(None, ge=0)
    price_yearly: Optional[float] = Field(None, ge=0)
    price_type: Optional[PriceType] = None
    lots_limit: Optional[int] = Field(None, ge=0)
    users_limit: Optional[int] = Field(None, ge=0)
    extranet_tenants_limit: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


# ===============================================================
# FEATURE
# ===============================================================

class FeatureRead(CamelModel):
    id: str
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True


class FeatureCreate(CamelModel):
    name: str = Field(..., pattern=FEATURE_NAME_PATTERN, description="Lowercase key, e.g. properties_management")
    display_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: str = Field("general", min_length=1)


# ===============================================================
# PLAN FEATURE
# ===============================================================

class PlanFeatureToggle(CamelModel):
    """POST /api/admin/plan-features"""
    plan_id: UUID
    feature_key: str = Field(..., min_length=1, description="Feature name or feature UUID")
    is_enabled: bool = True
    limits: Optional[Dict[str, Any]] = None


class PlanFeatureEntry(CamelModel):
    """One entry of the PUT /api/admin/plan-features ``features`` array."""
    feature_key: str = Field(..., min_length=1)
    is_enabled: bool


class PlanFeatureCell(CamelModel):
    """One (plan, feature) cell of the admin matrix."""
    feature_id: str
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    is_enabled: bool = False
    limits: Optional[Dict[str, Any]] = None
    plan_feature_id: Optional[str] = None
