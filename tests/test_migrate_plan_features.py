# tests/test_migrate_plan_features.py

"""
Tests for the one-time move of plan_features to the feature_id key.
"""

import pytest

from jobs.migrate_plan_features import main, plan_migration, run


@pytest.fixture
def legacy(store):
    plan, = store.seed("plans", {"name": "pro"})
    reports, sms = store.seed("features", {"name": "reports"}, {"name": "sms_reminders"})
    rows = store.seed(
        "plan_features",
        # plain legacy row
        {"plan_id": plan["id"], "feature_id": None, "feature_name": "reports", "is_enabled": True},
        # legacy row duplicating a feature_id row
        {"plan_id": plan["id"], "feature_id": None, "feature_key": "sms_reminders", "is_enabled": True,
         "limits": {"max": 50}},
        {"plan_id": plan["id"], "feature_id": sms["id"], "is_enabled": False, "limits": None},
        # key that matches nothing
        {"plan_id": plan["id"], "feature_id": None, "feature_name": "fax", "is_enabled": True},
    )
    return {"plan": plan, "reports": reports, "sms": sms, "rows": rows}


def test_plan_classifies_rows(legacy):
    index = {
        "id": {legacy["reports"]["id"]: legacy["reports"]["id"], legacy["sms"]["id"]: legacy["sms"]["id"]},
        "name": {"reports": legacy["reports"]["id"], "sms_reminders": legacy["sms"]["id"]},
    }

    plan = plan_migration(legacy["rows"], index)

    assert [a["row"]["feature_name"] for a in plan["assign"]] == ["reports"]
    assert plan["merge"][0]["into"]["id"] == legacy["rows"][2]["id"]
    assert [u["key"] for u in plan["unresolved"]] == ["fax"]


def test_dry_run_writes_nothing(store, legacy):
    before = [dict(r) for r in store.rows("plan_features")]
    run(dry_run=True)
    assert store.rows("plan_features") == before


def test_run_migrates_and_merges(store, legacy):
    run()

    rows = store.rows("plan_features")
    assert len(rows) == 3

    reports_row, = store.find("plan_features", feature_id=legacy["reports"]["id"])
    assert reports_row["is_enabled"] is True

    sms_row, = store.find("plan_features", feature_id=legacy["sms"]["id"])
    assert sms_row["is_enabled"] is True
    assert sms_row["limits"] == {"max": 50}

    fax_row, = store.find("plan_features", feature_name="fax")
    assert fax_row["feature_id"] is None


def test_duplicate_legacy_rows_collapse(store, legacy):
    store.seed("plan_features", {
        "plan_id": legacy["plan"]["id"], "feature_id": None, "feature_name": "reports", "is_enabled": False,
    })

    main([])

    assert len(store.find("plan_features", feature_id=legacy["reports"]["id"])) == 1
    assert store.find("plan_features", feature_id=legacy["reports"]["id"])[0]["is_enabled"] is True


def test_second_run_is_a_no_op(store, legacy):
    run()
    plan = run()
    assert plan["assign"] == [] and plan["merge"] == []


def test_three_duplicates_keep_enabled_and_limits(store):
    plan, = store.seed("plans", {"name": "starter"})
    reports, = store.seed("features", {"name": "reports"})
    store.seed(
        "plan_features",
        {"plan_id": plan["id"], "feature_id": None, "feature_name": "reports", "is_enabled": False},
        {"plan_id": plan["id"], "feature_id": None, "feature_name": "reports", "is_enabled": True,
         "limits": {"max": 10}},
        {"plan_id": plan["id"], "feature_id": None, "feature_key": "reports", "is_enabled": False},
    )

    result = run()

    assert len(result["merge"]) == 2
    merged, = store.find("plan_features", feature_id=reports["id"])
    assert merged["is_enabled"] is True
    assert merged["limits"] == {"max": 10}
