# models/security.py

from typing import Optional
from pydantic import Field

from models.base import CamelModel
from models.enums import Action, SecurityLevel


class SecurityCheckRequest(CamelModel):
    action: Action
    feature_key: Optional[str] = None
    object_type: Optional[str] = None
    object_id: Optional[str] = None
    field_name: Optional[str] = None


class SecurityCheckResult(CamelModel):
    allowed: bool
    reason: Optional[str] = None
    failed_level: Optional[SecurityLevel] = Field(None, description="First layer that denied")
