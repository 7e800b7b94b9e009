# core/profile_access.py

"""
Summaries of what a profile can do, for admin screens and for
"at least ReadWrite on X" style checks.
"""

from typing import Dict, List

from core.access_levels import ACCESS_LEVEL_ORDER, access_level_rank
from core.permission_engine import PermissionSnapshot
from models.enums import AccessLevel


def has_access_level_or_higher(level, minimum) -> bool:
    """None < Read < ReadWrite < All"""
    return access_level_rank(level) >= access_level_rank(minimum)


def most_permissive_level(levels: List[AccessLevel]) -> AccessLevel:
    if not levels:
        return AccessLevel.none
    return ACCESS_LEVEL_ORDER[max(access_level_rank(level) for level in levels)]


def has_minimum_access_level(snapshot: PermissionSnapshot, object_type: str, minimum) -> bool:
    perm = snapshot.get(str(object_type))
    if perm is None:
        return False
    return has_access_level_or_higher(perm.access_level, minimum)


def analyze_profile_access_level(profile: dict, snapshot: PermissionSnapshot) -> Dict:
    perms = list(snapshot.values())
    object_levels = {p.object_type: AccessLevel(p.access_level).value for p in perms}

    return {
        "profileId": profile["id"],
        "profileName": profile.get("name"),
        "overallAccessLevel": most_permissive_level([p.access_level for p in perms]).value,
        "objectAccessLevels": object_levels,
        "canCreateAny": any(p.can_create for p in perms),
        "canEditAny": any(p.can_edit for p in perms),
        "canDeleteAny": any(p.can_delete for p in perms),
        "canViewAllAny": any(p.can_view_all for p in perms),
        "totalObjects": len(perms),
        "accessibleObjects": sum(
            1 for p in perms if p.can_read or p.access_level != AccessLevel.none
        ),
        "permissions": [p.to_api() for p in perms],
    }
