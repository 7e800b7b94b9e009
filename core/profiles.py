# core/profiles.py

"""
Store-backed profile operations: profiles, their object and field
permissions, user assignment and default profile seeding.
"""

from typing import Dict, List, Optional

from core import db
from core.access_levels import normalize_field_permission, normalize_object_permission
from core.logging_config import logger
from core.permission_engine import (
    FieldSnapshot,
    PermissionSnapshot,
    build_field_snapshot,
    build_snapshot,
)
from core.utils import utc_now_iso
from core.write_log import WriteLog, run_bulk
from models.profile import (
    FieldPermission,
    FieldPermissionIn,
    ObjectPermission,
    ObjectPermissionIn,
    ProfileUpdate,
)


PROFILES = "profiles"
OBJECT_PERMISSIONS = "profile_object_permissions"
FIELD_PERMISSIONS = "profile_field_permissions"

OBJECT_FLAG_COLUMNS = ["access_level", "can_create", "can_read", "can_edit", "can_delete", "can_view_all"]
FIELD_FLAG_COLUMNS = ["access_level", "can_read", "can_edit", "is_sensitive"]


class ProfileDeleteBlocked(Exception):
    """Raised when a profile may not be deleted (system profile, users assigned)."""


# ============================================================
# Profiles
# ============================================================

def get_profile(profile_id: str) -> Optional[dict]:
    return db.select_one(PROFILES, eq={"id": profile_id})


def list_profiles(organization_id: Optional[str], get_all: bool = False) -> List[dict]:
    """
    Global profiles plus the organization's own, ordered by name.
    ``get_all`` (super-admins) returns every profile of every organization.
    """
    if get_all:
        return db.select(PROFILES, order_by="name")

    profiles = db.select(PROFILES, eq={"organization_id": None}, order_by="name")
    if organization_id:
        profiles += db.select(PROFILES, eq={"organization_id": organization_id}, order_by="name")

    return sorted(profiles, key=lambda p: (p.get("name") or "").lower())


def attach_organization_names(profiles: List[dict]) -> List[dict]:
    """Adds ``organization_name`` (None for global profiles)."""
    org_ids = sorted({p["organization_id"] for p in profiles if p.get("organization_id")})
    names: Dict[str, str] = {}
    if org_ids:
        for org in db.select("organizations", columns="id, name", in_={"id": org_ids}):
            names[org["id"]] = org.get("name")

    return [{**p, "organization_name": names.get(p.get("organization_id"))} for p in profiles]


def create_profile(organization_id: Optional[str], name: str, description: Optional[str] = None) -> dict:
    now = utc_now_iso()
    profile = db.insert_one(PROFILES, {
        "organization_id": organization_id,
        "name": name,
        "description": description,
        "is_system_profile": False,
        "is_global": False,
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    })
    logger.info(f"Created profile {profile['id']} ({name}) for organization {organization_id}")
    return profile


def update_profile(profile_id: str, updates: ProfileUpdate) -> Optional[dict]:
    data = updates.model_dump(exclude_unset=True)
    data["updated_at"] = utc_now_iso()
    return db.update_one(PROFILES, data, eq={"id": profile_id})


def delete_profile(profile: dict):
    """
    System profiles can never be deleted, whoever asks.
    Profiles still assigned to users are kept too.
    """
    if profile.get("is_system_profile"):
        raise ProfileDeleteBlocked("Cannot delete system profile")

    if db.count("users", eq={"profile_id": profile["id"]}) > 0:
        raise ProfileDeleteBlocked("Cannot delete profile: users are assigned to it")

    db.delete(OBJECT_PERMISSIONS, eq={"profile_id": profile["id"]})
    db.delete(FIELD_PERMISSIONS, eq={"profile_id": profile["id"]})
    db.delete("profile_buttons", eq={"profile_id": profile["id"]})
    db.delete(PROFILES, eq={"id": profile["id"]})
    logger.info(f"Deleted profile {profile['id']} ({profile.get('name')})")


# ============================================================
# Object permissions
# ============================================================

def get_object_permissions(profile_id: str) -> List[ObjectPermission]:
    rows = db.select(OBJECT_PERMISSIONS, eq={"profile_id": profile_id}, order_by="object_type")
    return [ObjectPermission.model_validate(r) for r in rows]


def load_permission_snapshot(profile_id: Optional[str]) -> PermissionSnapshot:
    """Snapshot for the pure engine; a missing profile yields an empty (deny-all) snapshot."""
    if not profile_id:
        return {}
    return build_snapshot(get_object_permissions(profile_id))


def upsert_object_permission(profile_id: str, perm: ObjectPermissionIn,
                             write_log: Optional[WriteLog] = None) -> ObjectPermission:
    """Insert or update the (profile, object_type) row with a canonical access level."""
    values = normalize_object_permission(
        perm.access_level,
        can_create=perm.can_create,
        can_read=perm.can_read,
        can_edit=perm.can_edit,
        can_delete=perm.can_delete,
        can_view_all=perm.can_view_all,
    )
    key = {"profile_id": profile_id, "object_type": perm.object_type}
    existing = db.select_one(OBJECT_PERMISSIONS, eq=key)

    if existing:
        row = db.update_one(OBJECT_PERMISSIONS, {**values, "updated_at": utc_now_iso()}, eq={"id": existing["id"]})
        if write_log is not None:
            write_log.record_update(OBJECT_PERMISSIONS, {"id": existing["id"]}, existing, OBJECT_FLAG_COLUMNS)
    else:
        row = db.insert_one(OBJECT_PERMISSIONS, {**key, **values})
        if write_log is not None:
            write_log.record_insert(OBJECT_PERMISSIONS, key)

    return ObjectPermission.model_validate(row or {**key, **values})


def replace_object_permissions(profile_id: str, perms: List[ObjectPermissionIn]) -> List[ObjectPermission]:
    """Bulk upsert; a failure undoes the entries already written."""
    return run_bulk(
        f"object-permissions:{profile_id}",
        perms,
        lambda perm, log: upsert_object_permission(profile_id, perm, write_log=log),
    )


# ============================================================
# Field permissions
# ============================================================

def get_field_permissions(profile_id: str) -> List[FieldPermission]:
    rows = db.select(FIELD_PERMISSIONS, eq={"profile_id": profile_id}, order_by="object_type")
    return [FieldPermission.model_validate(r) for r in rows]


def load_field_snapshot(profile_id: Optional[str]) -> FieldSnapshot:
    if not profile_id:
        return {}
    return build_field_snapshot(get_field_permissions(profile_id))


def upsert_field_permission(profile_id: str, perm: FieldPermissionIn,
                            write_log: Optional[WriteLog] = None) -> FieldPermission:
    values = normalize_field_permission(perm.access_level, can_read=perm.can_read, can_edit=perm.can_edit)
    values["is_sensitive"] = perm.is_sensitive

    key = {"profile_id": profile_id, "object_type": perm.object_type, "field_name": perm.field_name}
    existing = db.select_one(FIELD_PERMISSIONS, eq=key)

    if existing:
        row = db.update_one(FIELD_PERMISSIONS, {**values, "updated_at": utc_now_iso()}, eq={"id": existing["id"]})
        if write_log is not None:
            write_log.record_update(FIELD_PERMISSIONS, {"id": existing["id"]}, existing, FIELD_FLAG_COLUMNS)
    else:
        row = db.insert_one(FIELD_PERMISSIONS, {**key, **values})
        if write_log is not None:
            write_log.record_insert(FIELD_PERMISSIONS, key)

    return FieldPermission.model_validate(row or {**key, **values})


# ============================================================
# Users
# ============================================================

def get_user_profile(user_id: str) -> Optional[dict]:
    user = db.select_one("users", columns="id, profile_id", eq={"id": user_id})
    if not user or not user.get("profile_id"):
        return None
    return get_profile(user["profile_id"])


def assign_profile_to_user(user_id: str, profile_id: str) -> Optional[dict]:
    user = db.update_one("users", {"profile_id": profile_id, "updated_at": utc_now_iso()}, eq={"id": user_id})
    logger.info(f"Assigned profile {profile_id} to user {user_id}")
    return user


# ============================================================
# Default profiles
# ============================================================

def _flags(create, read, edit, delete, view_all) -> dict:
    return {
        "can_create": create,
        "can_read": read,
        "can_edit": edit,
        "can_delete": delete,
        "can_view_all": view_all,
    }


FULL = _flags(True, True, True, True, True)
READ_ALL = _flags(False, True, False, False, True)
READ_OWN = _flags(False, True, False, False, False)
NO_ACCESS = _flags(False, False, False, False, False)
OPERATE = _flags(True, True, True, False, True)

DEFAULT_PROFILES = [
    {
        "name": "Propriétaire",
        "description": "Profil propriétaire avec accès complet",
        "permissions": {
            "Property": FULL, "Unit": FULL, "Tenant": FULL, "Lease": FULL,
            "Payment": FULL, "Task": FULL, "Message": FULL, "JournalEntry": FULL,
            "User": READ_OWN, "Organization": READ_OWN, "Profile": READ_OWN,
        },
    },
    {
        "name": "Comptable",
        "description": "Profil comptable avec accès aux données financières",
        "permissions": {
            "Property": READ_ALL, "Unit": READ_ALL, "Tenant": READ_ALL, "Lease": READ_ALL,
            "Payment": FULL, "Task": OPERATE,
            "Message": _flags(True, True, False, False, True),
            "JournalEntry": FULL,
            "User": NO_ACCESS, "Organization": READ_OWN, "Profile": NO_ACCESS,
        },
    },
    {
        "name": "Agent",
        "description": "Profil agent avec accès opérationnel",
        "permissions": {
            "Property": OPERATE, "Unit": OPERATE, "Tenant": OPERATE, "Lease": OPERATE,
            "Payment": OPERATE, "Task": OPERATE, "Message": FULL, "JournalEntry": READ_ALL,
            "User": NO_ACCESS, "Organization": READ_OWN, "Profile": NO_ACCESS,
        },
    },
    {
        "name": "Lecteur",
        "description": "Profil lecteur avec accès en lecture seule",
        "permissions": {
            "Property": READ_ALL, "Unit": READ_ALL, "Tenant": READ_ALL, "Lease": READ_ALL,
            "Payment": READ_ALL, "Task": READ_ALL, "Message": READ_ALL, "JournalEntry": READ_ALL,
            "User": NO_ACCESS, "Organization": READ_OWN, "Profile": NO_ACCESS,
        },
    },
]


def _seed_profile(organization_id: str, definition: dict, log: WriteLog) -> dict:
    existing = db.select_one(PROFILES, eq={"organization_id": organization_id, "name": definition["name"]})

    if existing:
        profile = existing
        logger.info(f"Profile {definition['name']} already exists, updating permissions")
    else:
        now = utc_now_iso()
        profile = db.insert_one(PROFILES, {
            "organization_id": organization_id,
            "name": definition["name"],
            "description": definition["description"],
            "is_system_profile": True,
            "is_global": False,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        })
        log.record_insert(PROFILES, {"id": profile["id"]})

    for object_type, flags in definition["permissions"].items():
        upsert_object_permission(
            profile["id"],
            ObjectPermissionIn(object_type=object_type, **flags),
            write_log=log,
        )

    return {"id": profile["id"], "name": profile["name"], "created": existing is None}


def create_default_profiles_for_organization(organization_id: str) -> List[dict]:
    """Create or refresh the four system profiles of an organization."""
    seeded = run_bulk(
        f"default-profiles:{organization_id}",
        DEFAULT_PROFILES,
        lambda definition, log: _seed_profile(organization_id, definition, log),
    )
    logger.info(f"Created/updated default profiles for organization {organization_id}")
    return seeded
