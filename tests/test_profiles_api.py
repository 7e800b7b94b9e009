# tests/test_profiles_api.py

"""
Tests for /api/profiles: organization scoping, deletion guards and the
object permission bulk update.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import ORG_A, ORG_B
from dependencies.auth import CurrentUser


@pytest.fixture
def org_a_profile(store):
    profile, = store.seed("profiles", {"organization_id": ORG_A, "name": "Agent A", "is_system_profile": False})
    return profile


@pytest.fixture
def org_b_profile(store):
    profile, = store.seed("profiles", {"organization_id": ORG_B, "name": "Agent B", "is_system_profile": False})
    return profile


# -----------------------------------------------------
# Listing / reading
# -----------------------------------------------------
def test_list_returns_global_and_own_organization(client: TestClient, store, as_user, org_a_manager, org_b_profile):
    store.seed("profiles", {"organization_id": None, "name": "Global Administrator", "is_global": True})
    as_user(org_a_manager)

    response = client.get("/api/profiles")

    assert response.status_code == 200
    names = [p["name"] for p in response.json()]
    assert "Gestionnaire" in names
    assert "Global Administrator" in names
    assert "Agent B" not in names


def test_get_profile_of_other_organization_is_forbidden(client: TestClient, as_user, org_a_manager, org_b_profile):
    as_user(org_a_manager)

    response = client.get(f"/api/profiles/{org_b_profile['id']}")

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden: Profile belongs to another organization"}


def test_unknown_profile_is_404_before_ownership(client: TestClient, as_user, org_a_manager):
    as_user(org_a_manager)
    response = client.get("/api/profiles/33333333-3333-4333-8333-333333333333")
    assert response.status_code == 404


def test_profile_detail_includes_permissions(client: TestClient, as_user, org_a_manager, manager_profile):
    as_user(org_a_manager)

    response = client.get(f"/api/profiles/{manager_profile['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Gestionnaire"
    assert body["objectPermissions"][0]["objectType"] == "Profile"
    assert body["objectPermissions"][0]["canEdit"] is True
    assert body["fieldPermissions"] == []


def test_member_without_profile_rights_can_read_own_organization(
    client: TestClient, as_user, org_b_user, org_b_profile
):
    as_user(org_b_user)

    detail = client.get(f"/api/profiles/{org_b_profile['id']}")
    permissions = client.get(f"/api/profiles/{org_b_profile['id']}/object-permissions")
    summary = client.get(f"/api/profiles/{org_b_profile['id']}/access-summary")
    missing = client.get("/api/profiles/33333333-3333-4333-8333-333333333333")

    assert detail.status_code == 200
    assert detail.json()["name"] == "Agent B"
    assert permissions.status_code == 200
    assert summary.status_code == 200
    assert missing.status_code == 404


def test_member_without_profile_rights_cannot_modify(client: TestClient, as_user, org_b_user, org_b_profile):
    as_user(org_b_user)

    response = client.patch(f"/api/profiles/{org_b_profile['id']}", json={"description": "x"})

    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden: Insufficient permissions to manage profiles"


def test_global_admin_bypasses_organization_scope(client: TestClient, store, as_user, org_b_profile):
    admin_profile, = store.seed("profiles", {
        "organization_id": None, "name": "Global Administrator", "is_global": True, "is_system_profile": True,
    })
    global_admin = as_user(CurrentUser(
        id="global-admin-id",
        auth_user_id="global-admin-auth",
        email="ops@example.com",
        organization_id=ORG_A,
        profile_id=admin_profile["id"],
    ))
    assert global_admin.is_super_admin is False

    read = client.get(f"/api/profiles/{org_b_profile['id']}")
    write = client.patch(f"/api/profiles/{org_b_profile['id']}", json={"description": "Revu"})
    seeded = client.post("/api/profiles/defaults", json={"organizationId": ORG_B})

    assert read.status_code == 200
    assert write.status_code == 200
    assert store.find("profiles", id=org_b_profile["id"])[0]["description"] == "Revu"
    assert seeded.status_code == 200


def test_super_admin_reads_any_organization(client: TestClient, as_user, super_admin, org_b_profile):
    as_user(super_admin)
    response = client.get(f"/api/profiles/{org_b_profile['id']}")
    assert response.status_code == 200


# -----------------------------------------------------
# Create / delete
# -----------------------------------------------------
def test_create_profile_in_callers_organization(client: TestClient, store, as_user, org_a_manager):
    as_user(org_a_manager)

    response = client.post("/api/profiles", json={"name": "Stagiaire", "organizationId": ORG_B})

    assert response.status_code == 201
    assert response.json()["organizationId"] == ORG_A
    assert store.find("profiles", name="Stagiaire")[0]["organization_id"] == ORG_A


def test_duplicate_profile_name_is_conflict(client: TestClient, as_user, org_a_manager):
    as_user(org_a_manager)

    response = client.post("/api/profiles", json={"name": "Gestionnaire"})

    assert response.status_code == 409
    assert "error" in response.json()


def test_system_profile_cannot_be_deleted_even_by_super_admin(client: TestClient, store, as_user, super_admin):
    profile, = store.seed("profiles", {"organization_id": ORG_A, "name": "Lecteur", "is_system_profile": True})
    as_user(super_admin)

    response = client.delete(f"/api/profiles/{profile['id']}")

    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete system profile"}
    assert store.find("profiles", id=profile["id"])


def test_profile_with_users_cannot_be_deleted(client: TestClient, store, as_user, org_a_manager, org_a_profile):
    store.seed("users", {"organization_id": ORG_A, "profile_id": org_a_profile["id"]})
    as_user(org_a_manager)

    response = client.delete(f"/api/profiles/{org_a_profile['id']}")

    assert response.status_code == 400
    assert "users are assigned" in response.json()["error"]


def test_delete_profile_removes_permissions(client: TestClient, store, as_user, org_a_manager, org_a_profile):
    store.seed("profile_object_permissions", {"profile_id": org_a_profile["id"], "object_type": "Lease"})
    as_user(org_a_manager)

    response = client.delete(f"/api/profiles/{org_a_profile['id']}")

    assert response.status_code == 200
    assert not store.find("profiles", id=org_a_profile["id"])
    assert not store.find("profile_object_permissions", profile_id=org_a_profile["id"])


# -----------------------------------------------------
# Object permissions
# -----------------------------------------------------
def test_post_object_permission_stores_canonical_level(client: TestClient, store, as_user, org_a_manager, org_a_profile):
    as_user(org_a_manager)

    response = client.post(
        f"/api/profiles/{org_a_profile['id']}/object-permissions",
        json={"objectType": "Lease", "accessLevel": "All", "canDelete": False},
    )

    assert response.status_code == 200
    permission = response.json()["permission"]
    assert permission["accessLevel"] == "ReadWrite"
    assert permission["canDelete"] is False
    assert permission["canViewAll"] is True

    row, = store.find("profile_object_permissions", profile_id=org_a_profile["id"], object_type="Lease")
    assert row["access_level"] == "ReadWrite"


def test_put_object_permissions_requires_array(client: TestClient, as_user, org_a_manager, org_a_profile):
    as_user(org_a_manager)

    response = client.put(
        f"/api/profiles/{org_a_profile['id']}/object-permissions",
        json={"permissions": {"objectType": "Lease"}},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Permissions must be an array"}


def test_put_object_permissions_validates_before_writing(client: TestClient, store, as_user, org_a_manager, org_a_profile):
    as_user(org_a_manager)

    response = client.put(
        f"/api/profiles/{org_a_profile['id']}/object-permissions",
        json={"permissions": [{"objectType": "Lease", "accessLevel": "All"}, {"accessLevel": "Bogus"}]},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"
    assert not store.find("profile_object_permissions", profile_id=org_a_profile["id"])


def test_put_object_permissions_upserts(client: TestClient, store, as_user, org_a_manager, org_a_profile):
    store.seed("profile_object_permissions", {
        "profile_id": org_a_profile["id"], "object_type": "Tenant", "access_level": "All",
        "can_create": True, "can_read": True, "can_edit": True, "can_delete": True, "can_view_all": True,
    })
    as_user(org_a_manager)

    response = client.put(
        f"/api/profiles/{org_a_profile['id']}/object-permissions",
        json={"permissions": [
            {"objectType": "Tenant", "accessLevel": "Read"},
            {"objectType": "Lease", "canRead": True, "canEdit": True},
        ]},
    )

    assert response.status_code == 200
    levels = {p["objectType"]: p["accessLevel"] for p in response.json()["permissions"]}
    assert levels == {"Tenant": "Read", "Lease": "ReadWrite"}

    tenant, = store.find("profile_object_permissions", profile_id=org_a_profile["id"], object_type="Tenant")
    assert tenant["can_delete"] is False


def test_put_object_permissions_rolls_back_on_failure(client: TestClient, store, as_user, org_a_manager, org_a_profile):
    store.seed("profile_object_permissions", {
        "profile_id": org_a_profile["id"], "object_type": "Tenant", "access_level": "Read",
        "can_create": False, "can_read": True, "can_edit": False, "can_delete": False, "can_view_all": False,
    })
    as_user(org_a_manager)
    # Tenant is updated, Lease inserted, then the Payment insert fails
    store.fail_on("profile_object_permissions", "insert", after=1)

    response = client.put(
        f"/api/profiles/{org_a_profile['id']}/object-permissions",
        json={"permissions": [
            {"objectType": "Tenant", "accessLevel": "All"},
            {"objectType": "Lease", "accessLevel": "Read"},
            {"objectType": "Payment", "accessLevel": "Read"},
        ]},
    )

    assert response.status_code == 500
    details = response.json()["details"]
    assert details["failedIndex"] == 2
    assert details["rolledBack"] == 2
    assert details["consistent"] is True

    rows = store.find("profile_object_permissions", profile_id=org_a_profile["id"])
    assert [r["object_type"] for r in rows] == ["Tenant"]
    assert rows[0]["access_level"] == "Read"
    assert rows[0]["can_delete"] is False


def test_access_summary(client: TestClient, as_user, org_a_manager, manager_profile):
    as_user(org_a_manager)

    response = client.get(f"/api/profiles/{manager_profile['id']}/access-summary")

    assert response.status_code == 200
    assert response.json()["overallAccessLevel"] == "ReadWrite"
    assert response.json()["objectAccessLevels"] == {"Profile": "ReadWrite"}


# -----------------------------------------------------
# Assignment / defaults
# -----------------------------------------------------
def test_assign_profile_to_user_of_other_organization_is_forbidden(
    client: TestClient, store, as_user, org_a_manager, org_a_profile
):
    user, = store.seed("users", {"organization_id": ORG_B})
    as_user(org_a_manager)

    response = client.post(f"/api/profiles/{org_a_profile['id']}/assign", json={"userId": user["id"]})

    assert response.status_code == 403


def test_assign_profile(client: TestClient, store, as_user, org_a_manager, org_a_profile):
    user, = store.seed("users", {"organization_id": ORG_A})
    as_user(org_a_manager)

    response = client.post(f"/api/profiles/{org_a_profile['id']}/assign", json={"userId": user["id"]})

    assert response.status_code == 200
    assert store.find("users", id=user["id"])[0]["profile_id"] == org_a_profile["id"]


def test_seed_default_profiles_is_idempotent(client: TestClient, store, as_user, super_admin):
    as_user(super_admin)

    first = client.post("/api/profiles/defaults", json={"organizationId": ORG_B})
    second = client.post("/api/profiles/defaults", json={"organizationId": ORG_B})

    assert first.status_code == 200
    assert [p["created"] for p in first.json()["profiles"]] == [True] * 4
    assert [p["created"] for p in second.json()["profiles"]] == [False] * 4

    profiles = store.find("profiles", organization_id=ORG_B, is_system_profile=True)
    assert sorted(p["name"] for p in profiles) == ["Agent", "Comptable", "Lecteur", "Propriétaire"]

    lecteur = next(p for p in profiles if p["name"] == "Lecteur")
    property_perm, = store.find("profile_object_permissions", profile_id=lecteur["id"], object_type="Property")
    assert property_perm["access_level"] == "Read"
    assert property_perm["can_view_all"] is True


def test_seed_default_profiles_requires_bypass(client: TestClient, as_user, org_a_manager):
    as_user(org_a_manager)
    response = client.post("/api/profiles/defaults", json={"organizationId": ORG_A})
    assert response.status_code == 403


# -----------------------------------------------------
# Button permissions
# -----------------------------------------------------
def test_button_permissions_require_super_admin(client: TestClient, as_user, org_a_manager, manager_profile):
    as_user(org_a_manager)
    response = client.get(f"/api/profiles/{manager_profile['id']}/button-permissions")
    assert response.status_code == 403


def test_button_permissions_reject_bad_profile_id(client: TestClient, store, as_user, super_admin):
    as_user(super_admin)
    assert client.get("/api/profiles/not-a-uuid/button-permissions").status_code == 400
    assert client.get(
        "/api/profiles/33333333-3333-4333-8333-333333333333/button-permissions"
    ).status_code == 404


def test_button_permissions_override_and_skip_unknown(client: TestClient, store, as_user, super_admin):
    profile, = store.seed("profiles", {
        "id": "44444444-4444-4444-8444-444444444444", "organization_id": ORG_A, "name": "Boutons",
    })
    store.seed("profile_object_permissions", {
        "profile_id": profile["id"], "object_type": "Property", "access_level": "Read", "can_read": True,
    })
    button, = store.seed("buttons", {"key": "property.delete"})
    as_user(super_admin)

    response = client.put(
        f"/api/profiles/{profile['id']}/button-permissions",
        json={"buttonPermissions": [
            {"buttonKey": "property.delete", "isEnabled": True, "customLabel": "Archiver"},
            {"buttonKey": "nope.nothing"},
        ]},
    )

    assert response.status_code == 200
    assert response.json()["updated"] == [{"buttonKey": "property.delete", "action": "created"}]
    assert response.json()["skippedButtonKeys"] == ["nope.nothing"]

    listing = client.get(f"/api/profiles/{profile['id']}/button-permissions", params={"objectType": "Property"})
    buttons = {b["buttonKey"]: b for b in listing.json()["buttonPermissions"]}

    assert buttons["property.delete"]["isEnabled"] is True
    assert buttons["property.delete"]["label"] == "Archiver"
    assert buttons["property.delete"]["isOverride"] is True
    assert buttons["property.delete"]["buttonId"] == button["id"]
    assert buttons["property.view"]["isEnabled"] is True
    assert buttons["property.edit"]["isEnabled"] is False


def test_button_permissions_roll_back_on_failure(client: TestClient, store, as_user, super_admin, org_a_profile):
    edit, delete = store.seed("buttons", {"key": "property.edit"}, {"key": "property.delete"})
    store.seed("profile_buttons", {
        "profile_id": org_a_profile["id"], "button_id": edit["id"], "is_enabled": False, "is_visible": True,
    })
    store.fail_on("profile_buttons", "insert")
    as_user(super_admin)

    response = client.put(
        f"/api/profiles/{org_a_profile['id']}/button-permissions",
        json={"buttonPermissions": [
            {"buttonKey": "property.edit", "isEnabled": True},
            {"buttonKey": "property.delete", "isVisible": False},
        ]},
    )

    assert response.status_code == 500
    details = response.json()["details"]
    assert details["failedIndex"] == 1
    assert details["rolledBack"] == 1
    assert details["consistent"] is True

    restored, = store.find("profile_buttons", profile_id=org_a_profile["id"])
    assert restored["button_id"] == edit["id"]
    assert restored["is_enabled"] is False


# -----------------------------------------------------
# Field permissions
# -----------------------------------------------------
def test_field_permission_level_follows_explicit_flags(
    client: TestClient, store, as_user, org_a_manager, org_a_profile
):
    as_user(org_a_manager)
    url = f"/api/profiles/{org_a_profile['id']}/field-permissions"

    created = client.post(url, json={
        "objectType": "Tenant", "fieldName": "iban", "accessLevel": "ReadWrite", "canEdit": False,
        "isSensitive": True,
    })
    updated = client.post(url, json={"objectType": "Tenant", "fieldName": "iban", "canRead": True, "canEdit": True})

    assert created.status_code == 200
    assert created.json()["permission"]["accessLevel"] == "Read"
    assert created.json()["permission"]["canRead"] is True
    assert updated.json()["permission"]["accessLevel"] == "ReadWrite"

    row, = store.find("profile_field_permissions", profile_id=org_a_profile["id"])
    assert row["access_level"] == "ReadWrite"
    assert row["can_read"] is True and row["can_edit"] is True

    listing = client.get(url)
    assert listing.status_code == 200
    assert [(p["fieldName"], p["accessLevel"]) for p in listing.json()] == [("iban", "ReadWrite")]


def test_field_permissions_are_scoped_to_organization(
    client: TestClient, store, as_user, org_a_manager, org_b_profile
):
    as_user(org_a_manager)
    url = f"/api/profiles/{org_b_profile['id']}/field-permissions"

    read = client.get(url)
    write = client.post(url, json={"objectType": "Tenant", "fieldName": "iban", "accessLevel": "Read"})

    assert read.status_code == 403
    assert write.status_code == 403
    assert store.find("profile_field_permissions") == []


def test_field_permission_rejects_unknown_level(client: TestClient, as_user, org_a_manager, org_a_profile):
    as_user(org_a_manager)

    response = client.post(
        f"/api/profiles/{org_a_profile['id']}/field-permissions",
        json={"objectType": "Tenant", "fieldName": "iban", "accessLevel": "All"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"
