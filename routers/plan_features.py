# routers/plan_features.py

from fastapi import APIRouter, Body, Depends, HTTPException

from dependencies.auth import require_super_admin, CurrentUser
from core.feature_refs import FeatureRef, resolve_feature
from core.logging_config import logger
from core.plan_features import (
    build_plan_feature_matrix,
    bulk_update_plan_features,
    get_plan,
    set_plan_feature,
)
from core.utils import is_uuid
from models.plan import PlanFeatureToggle


router = APIRouter(
    prefix="/api/admin/plan-features",
    tags=["Admin: Plan Features"],
)


# -------------------------------------------------------------
# GET matrix of plans × features
# -------------------------------------------------------------
@router.get("")
def get_plan_features(current_user: CurrentUser = Depends(require_super_admin)):
    return build_plan_feature_matrix()


# -------------------------------------------------------------
# POST toggle one feature for one plan
# -------------------------------------------------------------
@router.post("")
def post_plan_feature(payload: PlanFeatureToggle, current_user: CurrentUser = Depends(require_super_admin)):
    """
    ``featureKey`` may be the feature name or its id; both resolve to
    the same (plan_id, feature_id) row.
    """
    plan = get_plan(str(payload.plan_id))
    if not plan:
        raise HTTPException(404, "Plan not found")

    feature = resolve_feature(FeatureRef.parse(payload.feature_key))
    if not feature:
        raise HTTPException(404, "Feature not found")

    row, action = set_plan_feature(plan, feature, payload.is_enabled, limits=payload.limits)

    return {
        "success": True,
        "message": f"Feature {feature['name']} {'enabled' if payload.is_enabled else 'disabled'} for plan {plan['name']}",
        "planFeatureId": row.get("id"),
        "isEnabled": bool(row.get("is_enabled")),
        "changed": action is not None,
    }


# -------------------------------------------------------------
# PUT bulk update for one plan
# -------------------------------------------------------------
@router.put("")
def put_plan_features(payload: dict = Body(...), current_user: CurrentUser = Depends(require_super_admin)):
    """
    ``{planId, features: [{featureKey, isEnabled}]}``.
    Unknown, invalid and unchanged entries are listed under ``skipped``.
    """
    plan_id = payload.get("planId")
    features = payload.get("features")

    if not plan_id or not isinstance(features, list):
        raise HTTPException(400, "planId and features array are required")
    if not is_uuid(str(plan_id)):
        raise HTTPException(400, "Invalid planId format")

    plan = get_plan(plan_id)
    if not plan:
        raise HTTPException(404, "Plan not found")

    results, skipped = bulk_update_plan_features(plan, features)
    logger.info(f"Plan {plan['name']}: {len(results)} feature(s) written, {len(skipped)} skipped")

    return {
        "success": True,
        "message": f"Updated {len(results)} plan features",
        "results": results,
        "skipped": skipped,
    }
