# core/plan_features.py

"""
Plan × feature administration. Rows of ``plan_features`` are keyed by
(plan_id, feature_id) only.
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from core import db
from core.cache import cache_delete_prefix, cache_key
from core.feature_refs import FeatureRef, resolve_feature
from core.logging_config import logger
from core.utils import utc_now_iso
from core.write_log import WriteLog, run_bulk
from models.plan import PlanFeatureCell, PlanFeatureEntry, PlanRead


PLAN_FEATURES = "plan_features"
PLAN_FEATURES_CACHE_PREFIX = "plan_features"


def get_plan(plan_id: str) -> Optional[dict]:
    return db.select_one("plans", eq={"id": str(plan_id)})


def get_plan_by_name(name: str) -> Optional[dict]:
    return db.select_one("plans", eq={"name": name})


def invalidate_plan_cache(plan: dict):
    cache_delete_prefix(cache_key(PLAN_FEATURES_CACHE_PREFIX, plan.get("name"), ""))


# ============================================================
# Matrix (GET)
# ============================================================

def build_plan_feature_matrix() -> Dict[str, Any]:
    """
    Every active plan × every active feature. Pairs without a stored row
    are reported disabled.
    """
    plans = db.select("plans", eq={"is_active": True}, order_by="sort_order")
    features = db.select("features", eq={"is_active": True}, order_by="category")

    stored: Dict[Tuple[str, str], dict] = {}
    if plans:
        rows = db.select(PLAN_FEATURES, in_={"plan_id": [p["id"] for p in plans]})
        stored = {(r["plan_id"], r["feature_id"]): r for r in rows}

    matrix = []
    for plan in plans:
        cells = []
        by_category = defaultdict(list)

        for feature in features:
            row = stored.get((plan["id"], feature["id"]))
            cell = PlanFeatureCell(
                feature_id=feature["id"],
                name=feature["name"],
                display_name=feature.get("display_name"),
                description=feature.get("description"),
                category=feature.get("category"),
                is_enabled=bool(row and row.get("is_enabled")),
                limits=row.get("limits") if row else None,
                plan_feature_id=row.get("id") if row else None,
            ).to_api()
            cells.append(cell)
            by_category[feature.get("category") or "general"].append(cell)

        matrix.append({
            "plan": PlanRead.model_validate(plan).to_api(),
            "features": cells,
            "featuresByCategory": dict(by_category),
        })

    return {"plans": matrix, "totalPlans": len(plans), "totalFeatures": len(features)}


# ============================================================
# Single upsert (POST)
# ============================================================

def set_plan_feature(
    plan: dict,
    feature: dict,
    is_enabled: bool,
    limits: Optional[dict] = None,
    write_log: Optional[WriteLog] = None,
) -> Tuple[dict, Optional[str]]:
    """
    Upsert one (plan, feature) row.
    Returns (row, "created" | "updated" | None when nothing changed).
    """
    key = {"plan_id": plan["id"], "feature_id": feature["id"]}
    existing = db.select_one(PLAN_FEATURES, eq=key)

    if existing:
        unchanged = bool(existing.get("is_enabled")) == is_enabled and (
            limits is None or existing.get("limits") == limits
        )
        if unchanged:
            return existing, None

        changes = {"is_enabled": is_enabled, "updated_at": utc_now_iso()}
        if limits is not None:
            changes["limits"] = limits
        row = db.update_one(PLAN_FEATURES, changes, eq={"id": existing["id"]}) or {**existing, **changes}
        if write_log is not None:
            write_log.record_update(PLAN_FEATURES, {"id": existing["id"]}, existing, ["is_enabled", "limits"])
        action = "updated"
    else:
        row = db.insert_one(PLAN_FEATURES, {**key, "is_enabled": is_enabled, "limits": limits})
        if write_log is not None:
            write_log.record_insert(PLAN_FEATURES, key)
        action = "created"

    invalidate_plan_cache(plan)
    logger.info(f"Plan feature {action}: plan={plan.get('name')} feature={feature['name']} enabled={is_enabled}")
    return row, action


# ============================================================
# Bulk update (PUT)
# ============================================================

def bulk_update_plan_features(plan: dict, raw_entries: List[Any]) -> Tuple[List[dict], List[dict]]:
    """
    Apply ``[{featureKey, isEnabled}]`` to one plan.

    Returns (results, skipped). ``results`` only lists rows actually
    written, so replaying the same payload returns no results. ``skipped``
    says why every other entry was ignored: invalid, unknown_feature or
    unchanged.
    """
    skipped: List[dict] = []
    resolved: List[Tuple[PlanFeatureEntry, dict]] = []

    for raw in raw_entries:
        try:
            entry = PlanFeatureEntry.model_validate(raw)
        except ValidationError:
            key = raw.get("featureKey") if isinstance(raw, dict) else None
            skipped.append({"featureKey": key, "reason": "invalid"})
            continue

        feature = resolve_feature(FeatureRef.parse(entry.feature_key))
        if feature is None:
            logger.warning(f"Feature not found, skipping: {entry.feature_key}")
            skipped.append({"featureKey": entry.feature_key, "reason": "unknown_feature"})
            continue

        resolved.append((entry, feature))

    def apply(item, log: WriteLog):
        entry, feature = item
        row, action = set_plan_feature(plan, feature, entry.is_enabled, write_log=log)
        if action is None:
            skipped.append({"featureKey": entry.feature_key, "reason": "unchanged"})
            return None
        return {
            "featureKey": entry.feature_key,
            "action": action,
            "isEnabled": entry.is_enabled,
            "planFeatureId": row.get("id"),
        }

    results = run_bulk(f"plan-features:{plan['id']}", resolved, apply)
    return results, skipped
