# core/button_permissions.py

from typing import Dict, List, Optional, Tuple

from core import db
from core.button_definitions import BUTTON_DEFINITIONS, get_buttons_for_object_type
from core.logging_config import logger
from core.permission_engine import PermissionSnapshot, resolve_button_permission
from core.profiles import load_permission_snapshot
from core.utils import utc_now_iso
from core.write_log import WriteLog, run_bulk
from models.button import ButtonPermission, ButtonPermissionIn


BUTTONS = "buttons"
PROFILE_BUTTONS = "profile_buttons"
OVERRIDE_COLUMNS = ["is_enabled", "is_visible", "custom_label", "custom_icon"]


def load_button_ids(keys: Optional[List[str]] = None) -> Dict[str, str]:
    """key -> buttons.id for the stored buttons (optionally only ``keys``)."""
    in_ = {"key": keys} if keys else None
    rows = db.select(BUTTONS, columns="id, key", in_=in_)
    return {r["key"]: r["id"] for r in rows}


def load_overrides(profile_id: str) -> Dict[str, dict]:
    """button_id -> profile_buttons row"""
    rows = db.select(PROFILE_BUTTONS, eq={"profile_id": profile_id})
    return {r["button_id"]: r for r in rows}


def list_button_permissions(
    profile_id: str,
    object_type: Optional[str] = None,
) -> Tuple[List[ButtonPermission], PermissionSnapshot]:
    definitions = get_buttons_for_object_type(object_type) if object_type else BUTTON_DEFINITIONS

    snapshot = load_permission_snapshot(profile_id)
    button_ids = load_button_ids()
    overrides = load_overrides(profile_id)

    resolved = []
    for button in definitions:
        button_id = button_ids.get(button.key)
        override = overrides.get(button_id) if button_id else None
        resolved.append(resolve_button_permission(button, snapshot, override, button_id))

    return resolved, snapshot


def _upsert_override(profile_id: str, button_id: str, entry: ButtonPermissionIn, log: WriteLog) -> dict:
    key = {"profile_id": profile_id, "button_id": button_id}
    existing = db.select_one(PROFILE_BUTTONS, eq=key)

    if existing:
        changes = entry.model_dump(include=set(OVERRIDE_COLUMNS), exclude_unset=True)
        changes["updated_at"] = utc_now_iso()
        db.update(PROFILE_BUTTONS, changes, eq=key)
        log.record_update(PROFILE_BUTTONS, key, existing, OVERRIDE_COLUMNS)
        action = "updated"
    else:
        db.insert_one(PROFILE_BUTTONS, {
            **key,
            "is_enabled": True if entry.is_enabled is None else entry.is_enabled,
            "is_visible": True if entry.is_visible is None else entry.is_visible,
            "custom_label": entry.custom_label,
            "custom_icon": entry.custom_icon,
        })
        log.record_insert(PROFILE_BUTTONS, key)
        action = "created"

    return {"buttonKey": entry.button_key, "action": action}


def update_button_permissions(profile_id: str, entries: List[ButtonPermissionIn]) -> Tuple[List[dict], List[str]]:
    """
    Upsert overrides for every known button key.
    Returns (written, unknown_keys); unknown keys are skipped.
    """
    button_ids = load_button_ids([e.button_key for e in entries])

    unknown = [e.button_key for e in entries if e.button_key not in button_ids]
    for key in unknown:
        logger.warning(f"Button not found, skipping: {key}")

    known = [e for e in entries if e.button_key in button_ids]
    written = run_bulk(
        f"button-permissions:{profile_id}",
        known,
        lambda entry, log: _upsert_override(profile_id, button_ids[entry.button_key], entry, log),
    )
    return written, unknown
