from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core import db
from core.supabase_client import get_supabase_client


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Current User Model (users row behind the Supabase session)
# ============================================================
class CurrentUser(BaseModel):
    id: str                         # users.id
    auth_user_id: str               # Supabase Auth UID (users.sb_user_id)
    email: Optional[str] = None
    role: Optional[str] = None

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool = True

    organization_id: Optional[str] = None
    profile_id: Optional[str] = None
    is_super_admin: bool = False


def _load_user_row(auth_user_id: str) -> Optional[dict]:
    user = db.select_one("users", eq={"sb_user_id": auth_user_id})
    if user is None:
        # Older rows use the Supabase UID as primary key without sb_user_id
        user = db.select_one("users", eq={"id": auth_user_id})
    return user


# ============================================================
# AUTH DECODING (Supabase: validates JWT, then loads users row)
# ============================================================
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None or not credentials.credentials:
        raise unauthorized

    client: Client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(credentials.credentials)
    except Exception:
        raise unauthorized

    if not auth_resp or not auth_resp.user:
        raise unauthorized

    auth_user = auth_resp.user

    # ---------------------------------------------------------
    # Resolve the application user
    # ---------------------------------------------------------
    user = _load_user_row(auth_user.id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.get("is_active") is False:
        raise HTTPException(status_code=403, detail="User account is disabled")

    return CurrentUser(
        id=user["id"],
        auth_user_id=auth_user.id,
        email=user.get("email") or auth_user.email,
        role=user.get("role"),
        first_name=user.get("first_name"),
        last_name=user.get("last_name"),
        is_active=user.get("is_active", True),
        organization_id=user.get("organization_id"),
        profile_id=user.get("profile_id"),
        is_super_admin=user.get("is_super_admin") is True,
    )


# ============================================================
# SUPER ADMIN GUARD
# ============================================================
def require_super_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_super_admin:
        raise HTTPException(
            status_code=403,
            detail="Forbidden: Super admin access required",
        )
    return current_user
