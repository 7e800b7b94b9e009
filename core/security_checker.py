# core/security_checker.py

"""
Layered security check:

    1. plan     the organization's plan enables the feature
    2. profile  the profile allows the action on the object type
    3. object   the record belongs to the caller's organization
                (delete also requires being its creator when known)
    4. field    the profile allows read/edit on the field

The first layer that denies ends the check.
"""

from dataclasses import dataclass
from typing import Optional

from core import db
from core.permission_engine import (
    FieldSnapshot,
    PermissionSnapshot,
    check_field_permission,
    check_permission,
)
from core.plan_security import check_plan_feature
from models.enums import Action, SecurityLevel
from models.security import SecurityCheckResult


@dataclass
class SecurityContext:
    user_id: str
    organization_id: Optional[str]
    plan_name: str
    snapshot: PermissionSnapshot
    field_snapshot: FieldSnapshot


# Object type → (table, parent object type, parent column)
OBJECT_TABLES = {
    "Property": ("properties", None, None),
    "Unit": ("units", "Property", "property_id"),
    "Tenant": ("tenants", None, None),
    "Lease": ("leases", "Unit", "unit_id"),
    "Payment": ("payments", "Lease", "lease_id"),
    "Task": ("tasks", None, None),
    "User": ("users", None, None),
}


def check_object_access(object_type: str, object_id: str, action: str,
                        user_id: str, organization_id: Optional[str]) -> bool:
    """Record-level check; child records defer to their parent."""
    if not organization_id:
        return False

    mapping = OBJECT_TABLES.get(str(object_type))
    if mapping is None:
        # No record-level rules; profile check already applied
        return True

    table, parent_type, parent_column = mapping
    row = db.select_one(table, eq={"id": object_id})
    if not row:
        return False

    if row.get("organization_id") not in (None, organization_id):
        return False

    if parent_type and row.get(parent_column):
        return check_object_access(parent_type, row[parent_column], action, user_id, organization_id)

    if row.get("organization_id") is None:
        return False

    if action == Action.delete and row.get("created_by") and row["created_by"] != user_id:
        return False

    return True


def check_security(
    ctx: SecurityContext,
    action: str,
    feature_key: Optional[str] = None,
    object_type: Optional[str] = None,
    object_id: Optional[str] = None,
    field_name: Optional[str] = None,
) -> SecurityCheckResult:
    if not ctx.organization_id:
        return SecurityCheckResult(allowed=False, reason="User has no organization", failed_level=SecurityLevel.plan)

    if feature_key and not check_plan_feature(ctx.plan_name, feature_key):
        return SecurityCheckResult(
            allowed=False,
            reason=f"Feature {feature_key} is not enabled in plan {ctx.plan_name}",
            failed_level=SecurityLevel.plan,
        )

    if object_type and not check_permission(ctx.snapshot, object_type, action):
        return SecurityCheckResult(
            allowed=False,
            reason=f"Profile does not allow {action} on {object_type}",
            failed_level=SecurityLevel.profile,
        )

    if object_type and object_id and not check_object_access(
        object_type, object_id, action, ctx.user_id, ctx.organization_id
    ):
        return SecurityCheckResult(
            allowed=False,
            reason=f"User cannot {action} object {object_id} of type {object_type}",
            failed_level=SecurityLevel.object,
        )

    if object_type and field_name and action in (Action.read, Action.edit):
        if not check_field_permission(ctx.field_snapshot, object_type, field_name, action):
            return SecurityCheckResult(
                allowed=False,
                reason=f"Profile does not allow {action} on field {field_name} of {object_type}",
                failed_level=SecurityLevel.field,
            )

    return SecurityCheckResult(allowed=True)
