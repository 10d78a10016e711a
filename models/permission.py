from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class PermissionFlags(BaseModel):
    can_manage_menu: bool = True
    can_accept_order: bool = False
    can_reject_order: bool = False
    can_manage_offers: bool = False
    can_view_reports: bool = True

class Permission(BaseModel):
    id: Optional[str] = None
    restaurant_id: str
    permissions: PermissionFlags
    created_at: Optional[datetime] = None
