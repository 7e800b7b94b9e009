# routers/security.py

from fastapi import APIRouter, Depends

from dependencies.auth import get_current_user, CurrentUser
from core.plan_security import get_organization_plan_name
from core.profiles import load_field_snapshot, load_permission_snapshot
from core.security_checker import SecurityContext, check_security
from models.security import SecurityCheckRequest


router = APIRouter(
    prefix="/api/security",
    tags=["Security"],
)


@router.post("/check")
def post_security_check(payload: SecurityCheckRequest, current_user: CurrentUser = Depends(get_current_user)):
    """
    Run the plan → profile → object → field check for the caller.
    Always 200; ``allowed`` and ``failedLevel`` carry the answer.
    """
    ctx = SecurityContext(
        user_id=current_user.id,
        organization_id=current_user.organization_id,
        plan_name=get_organization_plan_name(current_user.organization_id, current_user.is_super_admin),
        snapshot=load_permission_snapshot(current_user.profile_id),
        field_snapshot=load_field_snapshot(current_user.profile_id),
    )

    result = check_security(
        ctx,
        payload.action,
        feature_key=payload.feature_key,
        object_type=payload.object_type,
        object_id=payload.object_id,
        field_name=payload.field_name,
    )
    return result.to_api()
