# core/permission_helpers.py

"""
Request-level authorization shared by the routers.

Order of checks for profile administration (writes):
    1. super-admin or Global Administrator → bypass
    2. caller must have a profile granting edit on Profile/Organization/User
    3. target profile must exist (404)
    4. target profile must belong to the caller's organization (403);
       global profiles are reserved to the bypass roles

Reads skip step 2: any member of the owning organization may view a
profile and its permissions.
"""

from fastapi import Depends, HTTPException

from core.config import settings
from core.logging_config import logger
from core.permission_engine import can_edit_any, check_permission
from core.profiles import get_profile, load_permission_snapshot
from dependencies.auth import CurrentUser, get_current_user
from models.enums import ObjectType


PROFILE_ADMIN_OBJECTS = [ObjectType.profile, ObjectType.organization, ObjectType.user]


# -----------------------------------------------------
# Admin bypass
# -----------------------------------------------------
def is_global_admin(user: CurrentUser) -> bool:
    """The caller's profile is the platform-wide "Global Administrator" profile."""
    if not user.profile_id:
        return False
    profile = get_profile(user.profile_id)
    return bool(
        profile
        and profile.get("name") == settings.GLOBAL_ADMIN_PROFILE_NAME
        and profile.get("organization_id") is None
    )


def has_admin_bypass(user: CurrentUser) -> bool:
    return user.is_super_admin or is_global_admin(user)


# -----------------------------------------------------
# Profile administration
# -----------------------------------------------------
def require_profile_manager(user: CurrentUser) -> bool:
    """
    Raise 403 unless the caller may manage profiles.
    Returns True when the caller bypasses organization scoping.
    """
    if has_admin_bypass(user):
        return True

    if not user.profile_id:
        raise HTTPException(status_code=403, detail="User has no profile assigned")

    snapshot = load_permission_snapshot(user.profile_id)
    if not can_edit_any(snapshot, PROFILE_ADMIN_OBJECTS):
        logger.warning(f"User {user.id} denied profile management")
        raise HTTPException(status_code=403, detail="Forbidden: Insufficient permissions to manage profiles")

    return False


def require_organization(user: CurrentUser) -> str:
    if not user.organization_id:
        raise HTTPException(status_code=404, detail="Organization not found")
    return user.organization_id


def load_profile_for_caller(profile_id: str, user: CurrentUser, bypass: bool) -> dict:
    """Existence is checked before ownership: 404 first, then 403."""
    profile = get_profile(profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    if bypass:
        return profile

    organization_id = require_organization(user)
    if profile.get("organization_id") != organization_id:
        logger.warning(f"User {user.id} denied access to profile {profile_id} of another organization")
        raise HTTPException(status_code=403, detail="Forbidden: Profile belongs to another organization")

    return profile


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_permission(object_type: str, action: str):
    """
    Usage:
        @router.get("/", dependencies=[Depends(requires_permission("Property", "read"))])
    """

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        if current_user.is_super_admin:
            return current_user

        snapshot = load_permission_snapshot(current_user.profile_id)
        if not check_permission(snapshot, object_type, action):
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: '{action}' on '{object_type}' required",
            )
        return current_user

    return dependency
