# routers/admin.py

from fastapi import APIRouter, Depends, HTTPException

from dependencies.auth import require_super_admin, CurrentUser
from core import db
from core.logging_config import logger
from core.plan_features import invalidate_plan_cache
from core.utils import utc_now_iso
from models.plan import FeatureCreate, FeatureRead, PlanRead, PlanUpdate


router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
)


# ============================================================
# FEATURES
# ============================================================
@router.get("/features", summary="List every feature")
def list_features(current_user: CurrentUser = Depends(require_super_admin)):
    rows = db.select("features", order_by="category")
    features = [FeatureRead.model_validate(r).to_api() for r in rows]
    return {"features": features, "total": len(features)}


@router.post("/features", status_code=201, summary="Create a feature")
def create_feature(payload: FeatureCreate, current_user: CurrentUser = Depends(require_super_admin)):
    if db.select_one("features", columns="id", eq={"name": payload.name}):
        raise HTTPException(409, f"Feature '{payload.name}' already exists")

    now = utc_now_iso()
    row = db.insert_one("features", {
        **payload.model_dump(),
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    })
    logger.info(f"Feature created: {payload.name} by {current_user.email}")

    return {
        "success": True,
        "message": "Feature created successfully",
        "feature": FeatureRead.model_validate(row).to_api(),
    }


# ============================================================
# PLANS
# ============================================================
@router.get("/plans", summary="List every plan")
def list_plans(current_user: CurrentUser = Depends(require_super_admin)):
    rows = db.select("plans", order_by="sort_order")
    return [PlanRead.model_validate(r).to_api() for r in rows]


@router.patch("/plans/{plan_id}", summary="Update a plan")
def update_plan(plan_id: str, payload: PlanUpdate, current_user: CurrentUser = Depends(require_super_admin)):
    plan = db.select_one("plans", eq={"id": plan_id})
    if not plan:
        raise HTTPException(404, "Plan not found")

    changes = payload.model_dump(exclude_unset=True, mode="json")
    if not changes:
        raise HTTPException(400, "No fields to update")

    changes["updated_at"] = utc_now_iso()
    updated = db.update_one("plans", changes, eq={"id": plan_id})

    # deactivating a plan changes gating lookups; names are immutable here
    invalidate_plan_cache(plan)
    logger.info(f"Plan {plan['name']} updated by {current_user.email}: {sorted(changes)}")
    return PlanRead.model_validate(updated or {**plan, **changes}).to_api()
