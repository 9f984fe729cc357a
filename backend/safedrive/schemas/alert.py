from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any
from datetime import datetime

from safedrive.models.alert import AlertType, AlertSeverity


class AlertCreate(BaseModel):
    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[AlertType] = None
    severity: Optional[AlertSeverity] = None
    target_role: Optional[str] = None
    organization_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class AlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    message: str
    type: AlertType
    severity: AlertSeverity
    is_read: bool
    target_role: Optional[str] = None
    organization_id: str
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="alert_metadata")
    created_at: datetime
    updated_at: Optional[datetime] = None


class AlertStats(BaseModel):
    total: int
    unread: int
    critical: int
    by_type: Dict[str, int]
    by_severity: Dict[str, int]
