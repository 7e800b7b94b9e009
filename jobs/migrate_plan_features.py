# jobs/migrate_plan_features.py

"""
One-time migration of legacy plan_features rows keyed by feature name
(``feature_name`` or ``feature_key``) to the ``feature_id`` key.

    python -m jobs.migrate_plan_features --dry-run
    python -m jobs.migrate_plan_features

Rows whose key matches no feature are reported and left untouched. When a
legacy row and a feature_id row describe the same (plan, feature) pair,
they are merged: enabled if either was enabled, stored limits preferred.
Once no legacy rows remain the old columns can be dropped.
"""

import argparse
from typing import Dict, List, Optional

from core import db
from core.feature_refs import FeatureRef
from core.logging_config import get_logger

logger = get_logger("migrate_plan_features")

LEGACY_COLUMNS = ("feature_name", "feature_key")


def legacy_key(row: dict) -> Optional[str]:
    for column in LEGACY_COLUMNS:
        if row.get(column):
            return row[column]
    return None


def build_feature_index() -> Dict[str, Dict[str, str]]:
    features = db.select("features", columns="id, name")
    return {
        "id": {f["id"].lower(): f["id"] for f in features},
        "name": {f["name"]: f["id"] for f in features},
    }


def plan_migration(rows: List[dict], index: Dict[str, Dict[str, str]]) -> Dict[str, list]:
    """
    Decide what to do with every legacy row, without writing anything.
    Returns {"assign": [...], "merge": [...], "unresolved": [...]}.

    Merges are folded into the target as they are planned, so each
    "into" entry carries the final state of its (plan, feature) pair.
    """
    keyed = {(r["plan_id"], r["feature_id"]): dict(r) for r in rows if r.get("feature_id")}
    plan = {"assign": [], "merge": [], "unresolved": []}

    for row in rows:
        if row.get("feature_id"):
            continue
        key = legacy_key(row)
        if not key:
            continue

        ref = FeatureRef.parse(key)
        feature_id = index[ref.kind].get(ref.value)
        if feature_id is None:
            plan["unresolved"].append({"id": row["id"], "planId": row["plan_id"], "key": key})
            continue

        target = keyed.get((row["plan_id"], feature_id))
        if target is None:
            plan["assign"].append({"row": row, "feature_id": feature_id})
            # later duplicates of the same pair merge into this row
            keyed[(row["plan_id"], feature_id)] = {**row, "feature_id": feature_id}
            continue

        target["is_enabled"] = bool(target.get("is_enabled")) or bool(row.get("is_enabled"))
        if target.get("limits") is None:
            target["limits"] = row.get("limits")
        plan["merge"].append({"row": row, "into": target})

    return plan


def apply_migration(plan: Dict[str, list]):
    for item in plan["assign"]:
        db.update("plan_features", {"feature_id": item["feature_id"]}, eq={"id": item["row"]["id"]})

    merged_into = {}
    for item in plan["merge"]:
        db.delete("plan_features", eq={"id": item["row"]["id"]})
        merged_into[item["into"]["id"]] = item["into"]

    for target_id, target in merged_into.items():
        merged = {"is_enabled": bool(target.get("is_enabled")), "limits": target.get("limits")}
        db.update("plan_features", merged, eq={"id": target_id})


def run(dry_run: bool = False) -> Dict[str, list]:
    rows = db.select("plan_features")
    plan = plan_migration(rows, build_feature_index())

    logger.info(
        f"plan_features migration: {len(plan['assign'])} to assign, "
        f"{len(plan['merge'])} to merge, {len(plan['unresolved'])} unresolved"
    )
    for item in plan["unresolved"]:
        logger.warning(f"Unresolved plan_features row {item['id']} (plan {item['planId']}): '{item['key']}'")

    if dry_run:
        logger.info("Dry run: no rows written")
    else:
        apply_migration(plan)
        logger.info("plan_features migration complete")

    return plan


def main(argv=None):
    parser = argparse.ArgumentParser(description="Move plan_features to the feature_id key")
    parser.add_argument("--dry-run", action="store_true", help="Report without writing")
    args = parser.parse_args(argv)
    run(dry_run=args.dry_run)


if __name__ == "__main__":
    main()
