from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any
from datetime import datetime

from safedrive.models.notification import NotificationType


class NotificationCreate(BaseModel):
    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[NotificationType] = None
    driver_id: Optional[str] = None
    action_url: Optional[str] = None
    organization_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    message: str
    type: NotificationType
    read: bool
    driver_id: Optional[str] = None
    action_url: Optional[str] = None
    organization_id: str
    alert_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="notification_metadata")
    created_at: datetime
