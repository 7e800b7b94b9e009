# core/plan_security.py

"""
Plan-level gating: which features a plan enables and which plan an
organization is on.
"""

from typing import Dict, Iterable, List, Optional, Set

from core import db
from core.cache import cache_get, cache_key, cache_set
from core.config import settings
from core.logging_config import logger
from core.plan_features import PLAN_FEATURES, PLAN_FEATURES_CACHE_PREFIX, get_plan_by_name
from models.enums import SubscriptionStatus


def get_plan_enabled_features(plan_name: str) -> Set[str]:
    """Names of the features enabled for ``plan_name`` (cached)."""
    key = cache_key(PLAN_FEATURES_CACHE_PREFIX, plan_name, "enabled")
    hit = cache_get(key)
    if hit is not None:
        return hit

    plan = get_plan_by_name(plan_name)
    if not plan:
        logger.warning(f"Plan not found: {plan_name}")
        return set()

    rows = db.select(PLAN_FEATURES, columns="feature_id", eq={"plan_id": plan["id"], "is_enabled": True})
    feature_ids = [r["feature_id"] for r in rows]

    names: Set[str] = set()
    if feature_ids:
        features = db.select("features", columns="id, name", in_={"id": feature_ids}, eq={"is_active": True})
        names = {f["name"] for f in features}

    cache_set(key, names, settings.PLAN_FEATURES_CACHE_TTL)
    return names


def check_plan_feature(plan_name: str, feature_key: str) -> bool:
    return feature_key in get_plan_enabled_features(plan_name)


def check_plan_features(plan_name: str, feature_keys: Iterable[str]) -> Dict[str, bool]:
    enabled = get_plan_enabled_features(plan_name)
    return {key: key in enabled for key in feature_keys}


# ============================================================
# Organization plan
# ============================================================

def get_organization_subscription(organization_id: str) -> Optional[dict]:
    """
    The subscription that decides an organization's plan:
    active first, then trialing, then the most recent one.
    """
    subscriptions = db.select(
        "subscriptions",
        eq={"organization_id": organization_id},
        order_by="created_at",
        ascending=False,
    )
    if not subscriptions:
        return None

    for status in (SubscriptionStatus.active, SubscriptionStatus.trialing):
        for sub in subscriptions:
            if sub.get("status") == status.value:
                return sub

    return subscriptions[0]


def get_organization_plan_name(organization_id: Optional[str], is_super_admin: bool = False) -> str:
    if is_super_admin:
        return settings.SUPER_ADMIN_PLAN_NAME
    if not organization_id:
        return settings.DEFAULT_PLAN_NAME

    subscription = get_organization_subscription(organization_id)
    if subscription and subscription.get("plan_id"):
        plan = db.select_one("plans", columns="id, name", eq={"id": subscription["plan_id"]})
        if plan:
            return plan["name"]

    return settings.DEFAULT_PLAN_NAME


# ============================================================
# Per-user plan features
# ============================================================

def get_user_plan_features(organization_id: Optional[str], is_super_admin: bool = False) -> Dict:
    """
    The caller's plan with every feature it knows about:
    ``{plan, features: [{id, name, displayName, ..., isEnabled, limits}]}``.
    """
    plan_name = get_organization_plan_name(organization_id, is_super_admin)
    plan = get_plan_by_name(plan_name)
    if not plan:
        return {"plan": None, "features": []}

    rows = db.select(PLAN_FEATURES, eq={"plan_id": plan["id"]})
    if not rows:
        return {"plan": _plan_summary(plan), "features": []}

    features = db.select("features", in_={"id": [r["feature_id"] for r in rows]}, eq={"is_active": True})
    by_id = {f["id"]: f for f in features}

    items: List[dict] = []
    for row in rows:
        feature = by_id.get(row["feature_id"])
        if not feature:
            continue
        items.append({
            "id": feature["id"],
            "name": feature["name"],
            "displayName": feature.get("display_name"),
            "description": feature.get("description"),
            "category": feature.get("category"),
            "isEnabled": bool(row.get("is_enabled")),
            "limits": row.get("limits"),
        })

    items.sort(key=lambda f: ((f["category"] or ""), f["name"]))
    return {"plan": _plan_summary(plan), "features": items}


def _plan_summary(plan: dict) -> dict:
    return {
        "id": plan["id"],
        "name": plan["name"],
        "displayName": plan.get("display_name"),
        "lotsLimit": plan.get("lots_limit"),
        "usersLimit": plan.get("users_limit"),
        "extranetTenantsLimit": plan.get("extranet_tenants_limit"),
    }
