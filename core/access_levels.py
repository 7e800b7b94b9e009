# core/access_levels.py

"""
Access level <-> capability flag conversion.

Object flags are ordered (create, read, edit, delete, view_all).
Field flags are ordered (read, edit).

derive_access_level() is the only place an access level is computed from
flags. Every write path (single upsert, bulk PUT, default profile seeding)
goes through normalize_object_permission(), which calls it.
"""

from typing import Dict, NamedTuple, Optional

from models.enums import AccessLevel, FieldAccessLevel


class ObjectFlags(NamedTuple):
    can_create: bool = False
    can_read: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_view_all: bool = False


class FieldFlags(NamedTuple):
    can_read: bool = False
    can_edit: bool = False


ACCESS_LEVEL_FLAGS: Dict[AccessLevel, ObjectFlags] = {
    AccessLevel.none: ObjectFlags(False, False, False, False, False),
    AccessLevel.read: ObjectFlags(False, True, False, False, False),
    AccessLevel.read_write: ObjectFlags(True, True, True, False, False),
    AccessLevel.all: ObjectFlags(True, True, True, True, True),
}

FIELD_ACCESS_LEVEL_FLAGS: Dict[FieldAccessLevel, FieldFlags] = {
    FieldAccessLevel.none: FieldFlags(False, False),
    FieldAccessLevel.read: FieldFlags(True, False),
    FieldAccessLevel.read_write: FieldFlags(True, True),
}

ACCESS_LEVEL_ORDER = [AccessLevel.none, AccessLevel.read, AccessLevel.read_write, AccessLevel.all]


# ============================================================
# Derivation
# ============================================================

def derive_access_level(flags: ObjectFlags) -> AccessLevel:
    """
    None      no create/read/edit/delete
    All       all five flags
    Read      read without create/edit/delete (view_all ignored)
    ReadWrite anything else, including non-canonical "custom" sets
    """
    if not (flags.can_create or flags.can_read or flags.can_edit or flags.can_delete):
        return AccessLevel.none
    if all(flags):
        return AccessLevel.all
    if flags.can_read and not (flags.can_create or flags.can_edit or flags.can_delete):
        return AccessLevel.read
    return AccessLevel.read_write


def is_custom_access(flags: ObjectFlags) -> bool:
    """True when flags are not exactly the table row of their derived level."""
    return ACCESS_LEVEL_FLAGS[derive_access_level(flags)] != flags


def derive_field_access_level(flags: FieldFlags) -> FieldAccessLevel:
    if flags.can_edit:
        return FieldAccessLevel.read_write
    if flags.can_read:
        return FieldAccessLevel.read
    return FieldAccessLevel.none


def access_level_rank(level) -> int:
    return ACCESS_LEVEL_ORDER.index(AccessLevel(level))


# ============================================================
# Normalization (write paths)
# ============================================================

def _merge_flags(base: tuple, explicit: dict, cls):
    values = base._asdict()
    for name in cls._fields:
        if explicit.get(name) is not None:
            values[name] = bool(explicit[name])
    return cls(**values)


def normalize_object_permission(
    access_level: Optional[str] = None,
    *,
    can_create: Optional[bool] = None,
    can_read: Optional[bool] = None,
    can_edit: Optional[bool] = None,
    can_delete: Optional[bool] = None,
    can_view_all: Optional[bool] = None,
) -> dict:
    """
    Resolve an incoming permission into the row values to store.

    Flags not given explicitly come from the table row of ``access_level``
    (or all False without one). The stored level is then re-derived from
    the final flags, so level and flags can never disagree.
    """
    base = ACCESS_LEVEL_FLAGS[AccessLevel(access_level)] if access_level else ObjectFlags()
    flags = _merge_flags(
        base,
        {
            "can_create": can_create,
            "can_read": can_read,
            "can_edit": can_edit,
            "can_delete": can_delete,
            "can_view_all": can_view_all,
        },
        ObjectFlags,
    )
    return {"access_level": derive_access_level(flags).value, **flags._asdict()}


def normalize_field_permission(
    access_level: Optional[str] = None,
    *,
    can_read: Optional[bool] = None,
    can_edit: Optional[bool] = None,
) -> dict:
    base = FIELD_ACCESS_LEVEL_FLAGS[FieldAccessLevel(access_level)] if access_level else FieldFlags()
    flags = _merge_flags(base, {"can_read": can_read, "can_edit": can_edit}, FieldFlags)
    return {"access_level": derive_field_access_level(flags).value, **flags._asdict()}


def flags_from_row(row: dict) -> ObjectFlags:
    return ObjectFlags(
        can_create=bool(row.get("can_create")),
        can_read=bool(row.get("can_read")),
        can_edit=bool(row.get("can_edit")),
        can_delete=bool(row.get("can_delete")),
        can_view_all=bool(row.get("can_view_all")),
    )
