# models/button.py

from typing import Optional
from pydantic import BaseModel, Field

from models.base import CamelModel
from models.enums import ButtonAction


class ButtonDefinition(BaseModel):
    """Static description of a UI button (see core/button_definitions.py)."""
    key: str
    name: str
    label: str
    object_type: str
    action: ButtonAction
    icon: Optional[str] = None
    variant: str = "default"
    size: str = "default"
    tooltip: Optional[str] = None


class ButtonPermission(CamelModel):
    """Resolved button state for one profile."""
    button_key: str
    button_id: Optional[str] = None
    name: str
    label: str
    object_type: str
    action: ButtonAction
    icon: Optional[str] = None
    is_enabled: bool
    is_visible: bool
    custom_label: Optional[str] = None
    custom_icon: Optional[str] = None
    is_override: bool = False


class ButtonPermissionIn(CamelModel):
    button_key: str = Field(..., min_length=1)
    is_enabled: Optional[bool] = None
    is_visible: Optional[bool] = None
    custom_label: Optional[str] = None
    custom_icon: Optional[str] = None
