# models/profile.py

from typing import Optional
from datetime import datetime
from pydantic import Field

from models.base import CamelModel
from models.enums import AccessLevel, FieldAccessLevel


# ===============================================================
# PROFILE
# ===============================================================

class ProfileBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, description="Profile name, unique per organization")
    description: Optional[str] = Field(None, max_length=500)


class ProfileCreate(ProfileBase):
    """Create a profile in the caller's organization (or organization_id for super-admins)."""
    organization_id: Optional[str] = Field(None, description="Super-admin only: target organization")


class ProfileUpdate(CamelModel):
    """Update profile model - all fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None


class ProfileRead(ProfileBase):
    id: str
    organization_id: Optional[str] = None
    organization_name: Optional[str] = None
    is_system_profile: bool = False
    is_global: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileAssign(CamelModel):
    user_id: str = Field(..., description="users.id of the user receiving the profile")


class DefaultProfilesRequest(CamelModel):
    organization_id: str


# ===============================================================
# OBJECT PERMISSION
# ===============================================================

class ObjectPermission(CamelModel):
    """
    Stored object permission for one (profile, object_type) pair.
    access_level is always derive_access_level() of the five flags.
    """
    object_type: str
    access_level: AccessLevel = AccessLevel.none
    can_create: bool = False
    can_read: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_view_all: bool = False


class ObjectPermissionIn(CamelModel):
    """
    Incoming object permission. Explicit flags win over access_level;
    an access level alone expands through ACCESS_LEVEL_FLAGS.
    """
    object_type: str = Field(..., min_length=1)
    access_level: Optional[AccessLevel] = None
    can_create: Optional[bool] = None
    can_read: Optional[bool] = None
    can_edit: Optional[bool] = None
    can_delete: Optional[bool] = None
    can_view_all: Optional[bool] = None


# ===============================================================
# FIELD PERMISSION
# ===============================================================

class FieldPermission(CamelModel):
    object_type: str
    field_name: str
    access_level: FieldAccessLevel = FieldAccessLevel.none
    can_read: bool = False
    can_edit: bool = False
    is_sensitive: bool = False


class FieldPermissionIn(CamelModel):
    object_type: str = Field(..., min_length=1)
    field_name: str = Field(..., min_length=1)
    access_level: Optional[FieldAccessLevel] = None
    can_read: Optional[bool] = None
    can_edit: Optional[bool] = None
    is_sensitive: bool = False
