# routers/user_features.py

from fastapi import APIRouter, Depends

from dependencies.auth import get_current_user, CurrentUser
from core.plan_security import get_user_plan_features


router = APIRouter(
    prefix="/api/user",
    tags=["User"],
)


@router.get("/plan-features")
def get_my_plan_features(current_user: CurrentUser = Depends(get_current_user)):
    """Features of the caller's organization plan, enabled or not."""
    return get_user_plan_features(current_user.organization_id, current_user.is_super_admin)
