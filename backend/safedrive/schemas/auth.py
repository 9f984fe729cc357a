from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from safedrive.models.user import UserRole


class UserLogin(BaseModel):
    # Presence is checked by the endpoint so a missing field is a 400, not a 422
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: UserRole
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None
