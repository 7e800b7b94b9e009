# routers/profiles.py

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import ValidationError

from dependencies.auth import get_current_user, require_super_admin, CurrentUser
from core import db
from core.logging_config import logger
from core.button_permissions import list_button_permissions, update_button_permissions
from core.permission_helpers import (
    has_admin_bypass,
    load_profile_for_caller,
    require_organization,
    require_profile_manager,
)
from core.profile_access import analyze_profile_access_level
from core.profiles import (
    ProfileDeleteBlocked,
    assign_profile_to_user,
    attach_organization_names,
    create_default_profiles_for_organization,
    create_profile,
    delete_profile,
    get_field_permissions,
    get_object_permissions,
    list_profiles,
    load_permission_snapshot,
    replace_object_permissions,
    update_profile,
    upsert_field_permission,
    upsert_object_permission,
)
from core.utils import is_uuid
from models.button import ButtonPermissionIn
from models.profile import (
    DefaultProfilesRequest,
    FieldPermissionIn,
    ObjectPermissionIn,
    ProfileAssign,
    ProfileCreate,
    ProfileRead,
    ProfileUpdate,
)


router = APIRouter(
    prefix="/api/profiles",
    tags=["Profiles"],
)


def profile_out(row: dict) -> dict:
    return ProfileRead.model_validate(row).to_api()


def validation_error(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"error": "Validation error", "details": exc.errors(include_url=False, include_context=False)},
    )


# -------------------------------------------------------------
# LIST profiles
# -------------------------------------------------------------
@router.get("")
def get_profiles(
    get_all: bool = Query(False, alias="getAll"),
    organization_id: Optional[str] = Query(None, alias="organizationId"),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Global profiles plus the caller's organization profiles.
    Super-admins may list everything (getAll) or another organization.
    """
    if current_user.is_super_admin:
        if get_all:
            profiles = list_profiles(None, get_all=True)
        else:
            profiles = list_profiles(organization_id or current_user.organization_id)
        return [profile_out(p) for p in attach_organization_names(profiles)]

    organization_id = require_organization(current_user)
    return [profile_out(p) for p in list_profiles(organization_id)]


# -------------------------------------------------------------
# CREATE profile
# -------------------------------------------------------------
@router.post("", status_code=201)
def post_profile(payload: ProfileCreate, current_user: CurrentUser = Depends(get_current_user)):
    bypass = require_profile_manager(current_user)

    if bypass and payload.organization_id:
        organization_id = payload.organization_id
    else:
        organization_id = require_organization(current_user)

    profile = create_profile(organization_id, payload.name, payload.description)
    return profile_out(profile)


# -------------------------------------------------------------
# SEED default profiles for an organization
# -------------------------------------------------------------
@router.post("/defaults")
def seed_default_profiles(payload: DefaultProfilesRequest, current_user: CurrentUser = Depends(get_current_user)):
    if not has_admin_bypass(current_user):
        raise HTTPException(403, "Forbidden: Super admin access required")

    if not db.select_one("organizations", columns="id", eq={"id": payload.organization_id}):
        raise HTTPException(404, "Organization not found")

    seeded = create_default_profiles_for_organization(payload.organization_id)
    return {"success": True, "profiles": seeded}


# -------------------------------------------------------------
# GET profile (+ permissions)
# -------------------------------------------------------------
@router.get("/{profile_id}")
def get_profile_detail(profile_id: str, current_user: CurrentUser = Depends(get_current_user)):
    bypass = has_admin_bypass(current_user)
    profile = load_profile_for_caller(profile_id, current_user, bypass)

    return {
        **profile_out(profile),
        "objectPermissions": [p.to_api() for p in get_object_permissions(profile_id)],
        "fieldPermissions": [p.to_api() for p in get_field_permissions(profile_id)],
    }


# -------------------------------------------------------------
# UPDATE profile
# -------------------------------------------------------------
@router.patch("/{profile_id}")
def patch_profile(profile_id: str, payload: ProfileUpdate, current_user: CurrentUser = Depends(get_current_user)):
    bypass = require_profile_manager(current_user)
    load_profile_for_caller(profile_id, current_user, bypass)

    updated = update_profile(profile_id, payload)
    if not updated:
        raise HTTPException(404, "Profile not found")
    return profile_out(updated)


# -------------------------------------------------------------
# DELETE profile
# -------------------------------------------------------------
@router.delete("/{profile_id}")
def remove_profile(profile_id: str, current_user: CurrentUser = Depends(get_current_user)):
    bypass = require_profile_manager(current_user)
    profile = load_profile_for_caller(profile_id, current_user, bypass)

    try:
        delete_profile(profile)
    except ProfileDeleteBlocked as e:
        raise HTTPException(400, str(e))

    return {"success": True}


# -------------------------------------------------------------
# ASSIGN profile to a user
# -------------------------------------------------------------
@router.post("/{profile_id}/assign")
def assign_profile(profile_id: str, payload: ProfileAssign, current_user: CurrentUser = Depends(get_current_user)):
    bypass = require_profile_manager(current_user)
    load_profile_for_caller(profile_id, current_user, bypass)

    target = db.select_one("users", columns="id, organization_id", eq={"id": payload.user_id})
    if not target:
        raise HTTPException(404, "User not found")
    if not bypass and target.get("organization_id") != current_user.organization_id:
        raise HTTPException(403, "Forbidden: User belongs to another organization")

    assign_profile_to_user(payload.user_id, profile_id)
    return {"success": True, "userId": payload.user_id, "profileId": profile_id}


# -------------------------------------------------------------
# ACCESS SUMMARY
# -------------------------------------------------------------
@router.get("/{profile_id}/access-summary")
def get_access_summary(profile_id: str, current_user: CurrentUser = Depends(get_current_user)):
    bypass = has_admin_bypass(current_user)
    profile = load_profile_for_caller(profile_id, current_user, bypass)
    return analyze_profile_access_level(profile, load_permission_snapshot(profile_id))


# =============================================================
# OBJECT PERMISSIONS
# =============================================================
@router.get("/{profile_id}/object-permissions")
def get_profile_object_permissions(profile_id: str, current_user: CurrentUser = Depends(get_current_user)):
    bypass = has_admin_bypass(current_user)
    load_profile_for_caller(profile_id, current_user, bypass)
    return [p.to_api() for p in get_object_permissions(profile_id)]


@router.post("/{profile_id}/object-permissions")
def post_profile_object_permission(
    profile_id: str,
    payload: ObjectPermissionIn,
    current_user: CurrentUser = Depends(get_current_user),
):
    bypass = require_profile_manager(current_user)
    load_profile_for_caller(profile_id, current_user, bypass)

    permission = upsert_object_permission(profile_id, payload)
    return {"success": True, "permission": permission.to_api()}


@router.put("/{profile_id}/object-permissions")
def put_profile_object_permissions(
    profile_id: str,
    payload: dict = Body(...),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Bulk upsert ``{permissions: [...]}``. All entries are validated before
    the first write; a failing write undoes the previous ones.
    """
    bypass = require_profile_manager(current_user)
    load_profile_for_caller(profile_id, current_user, bypass)

    raw = payload.get("permissions")
    if not isinstance(raw, list):
        raise HTTPException(400, "Permissions must be an array")

    try:
        permissions = [ObjectPermissionIn.model_validate(p) for p in raw]
    except ValidationError as e:
        raise validation_error(e)

    written = replace_object_permissions(profile_id, permissions)
    logger.info(f"Updated {len(written)} object permissions for profile {profile_id}")
    return {"success": True, "permissions": [p.to_api() for p in written]}


# =============================================================
# FIELD PERMISSIONS
# =============================================================
@router.get("/{profile_id}/field-permissions")
def get_profile_field_permissions(profile_id: str, current_user: CurrentUser = Depends(get_current_user)):
    bypass = has_admin_bypass(current_user)
    load_profile_for_caller(profile_id, current_user, bypass)
    return [p.to_api() for p in get_field_permissions(profile_id)]


@router.post("/{profile_id}/field-permissions")
def post_profile_field_permission(
    profile_id: str,
    payload: FieldPermissionIn,
    current_user: CurrentUser = Depends(get_current_user),
):
    bypass = require_profile_manager(current_user)
    load_profile_for_caller(profile_id, current_user, bypass)

    permission = upsert_field_permission(profile_id, payload)
    return {"success": True, "permission": permission.to_api()}


# =============================================================
# BUTTON PERMISSIONS (super-admin only)
# =============================================================
def require_button_profile(profile_id: str) -> dict:
    if not is_uuid(profile_id):
        raise HTTPException(400, "Invalid profile ID format")
    profile = db.select_one("profiles", columns="id, name", eq={"id": profile_id})
    if not profile:
        raise HTTPException(404, "Profile not found")
    return profile


@router.get("/{profile_id}/button-permissions")
def get_profile_button_permissions(
    profile_id: str,
    object_type: Optional[str] = Query(None, alias="objectType"),
    current_user: CurrentUser = Depends(require_super_admin),
):
    require_button_profile(profile_id)

    buttons, snapshot = list_button_permissions(profile_id, object_type)
    return {
        "buttonPermissions": [b.to_api() for b in buttons],
        "objectPermissions": [p.to_api() for p in snapshot.values()],
    }


@router.put("/{profile_id}/button-permissions")
def put_profile_button_permissions(
    profile_id: str,
    payload: dict = Body(...),
    current_user: CurrentUser = Depends(require_super_admin),
):
    require_button_profile(profile_id)

    raw = payload.get("buttonPermissions")
    if not isinstance(raw, list):
        raise HTTPException(400, "Button permissions must be an array")

    try:
        entries = [ButtonPermissionIn.model_validate(b) for b in raw]
    except ValidationError as e:
        raise validation_error(e)

    written, unknown = update_button_permissions(profile_id, entries)
    return {
        "success": True,
        "message": "Button permissions updated successfully",
        "updated": written,
        "skippedButtonKeys": unknown,
    }
