# core/permission_engine.py

"""
Pure authorization policy functions.

Nothing here touches the store: callers load a snapshot once
(core/profiles.py → load_permission_snapshot) and evaluate any number of
checks against it. A missing row always denies.
"""

from typing import Dict, Iterable, Optional, Tuple, Union

from core.button_definitions import get_permission_field_for_action
from models.button import ButtonDefinition, ButtonPermission
from models.enums import Action
from models.profile import FieldPermission, ObjectPermission


PermissionSnapshot = Dict[str, ObjectPermission]
FieldSnapshot = Dict[Tuple[str, str], FieldPermission]


# ============================================================
# Snapshots
# ============================================================

def build_snapshot(rows: Iterable[Union[dict, ObjectPermission]]) -> PermissionSnapshot:
    """Index object permission rows (store dicts or models) by object type."""
    snapshot: PermissionSnapshot = {}
    for row in rows:
        perm = row if isinstance(row, ObjectPermission) else ObjectPermission.model_validate(row)
        snapshot[perm.object_type] = perm
    return snapshot


def build_field_snapshot(rows: Iterable[Union[dict, FieldPermission]]) -> FieldSnapshot:
    snapshot: FieldSnapshot = {}
    for row in rows:
        perm = row if isinstance(row, FieldPermission) else FieldPermission.model_validate(row)
        snapshot[(perm.object_type, perm.field_name)] = perm
    return snapshot


# ============================================================
# Object checks
# ============================================================

def _object_allows(perm: ObjectPermission, action: Action) -> bool:
    if action == Action.create:
        return perm.can_create
    if action == Action.read:
        return perm.can_read
    if action == Action.edit:
        return perm.can_edit
    if action == Action.delete:
        return perm.can_delete
    if action == Action.view_all:
        # Seeing other users' records still requires read
        return perm.can_view_all and perm.can_read
    return False


def check_permission(snapshot: PermissionSnapshot, object_type: str, action: str) -> bool:
    """
    Is ``action`` allowed on ``object_type`` for the profile the snapshot
    was taken from? Unknown object types and unknown actions deny.
    """
    perm = snapshot.get(str(object_type))
    if perm is None:
        return False

    try:
        action = Action(action)
    except ValueError:
        return False

    return _object_allows(perm, action)


def can_edit_any(snapshot: PermissionSnapshot, object_types: Iterable[str]) -> bool:
    return any(check_permission(snapshot, t, Action.edit) for t in object_types)


# ============================================================
# Field checks
# ============================================================

def check_field_permission(
    field_snapshot: FieldSnapshot,
    object_type: str,
    field_name: str,
    action: str,
) -> bool:
    """Field checks only know read and edit. No row, no access."""
    perm = field_snapshot.get((str(object_type), field_name))
    if perm is None:
        return False
    if action == Action.read:
        return perm.can_read
    if action == Action.edit:
        return perm.can_edit
    return False


def filter_fields_by_permissions(
    record: dict,
    object_type: str,
    field_snapshot: FieldSnapshot,
    object_snapshot: Optional[PermissionSnapshot] = None,
) -> dict:
    """
    Drop the fields of ``record`` the profile cannot read.
    A field without its own row follows the object-level read flag.
    """
    object_readable = check_permission(object_snapshot or {}, object_type, Action.read)

    filtered = {}
    for key, value in record.items():
        if (str(object_type), key) in field_snapshot:
            allowed = check_field_permission(field_snapshot, object_type, key, Action.read)
        else:
            allowed = object_readable
        if allowed:
            filtered[key] = value
    return filtered


# ============================================================
# Buttons
# ============================================================

def resolve_button_permission(
    button: ButtonDefinition,
    snapshot: PermissionSnapshot,
    override: Optional[dict] = None,
    button_id: Optional[str] = None,
) -> ButtonPermission:
    """
    A stored profile_buttons override wins; otherwise the button follows
    the object permission flag mapped from its action.
    """
    perm = snapshot.get(button.object_type)
    field = get_permission_field_for_action(button.action)
    should_enable = bool(getattr(perm, field)) if perm is not None else False

    override = override or {}
    stored_enabled = override.get("is_enabled")
    stored_visible = override.get("is_visible")
    custom_label = override.get("custom_label")
    custom_icon = override.get("custom_icon")

    is_enabled = should_enable if stored_enabled is None else bool(stored_enabled)
    is_visible = should_enable if stored_visible is None else bool(stored_visible)

    is_override = bool(override) and (
        is_enabled != should_enable
        or is_visible != should_enable
        or custom_label is not None
        or custom_icon is not None
    )

    return ButtonPermission(
        button_key=button.key,
        button_id=button_id,
        name=button.name,
        label=custom_label or button.label,
        object_type=button.object_type,
        action=button.action,
        icon=custom_icon or button.icon,
        is_enabled=is_enabled,
        is_visible=is_visible,
        custom_label=custom_label,
        custom_icon=custom_icon,
        is_override=is_override,
    )
