from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from storefront.enums.user_role import UserRole


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
