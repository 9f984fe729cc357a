from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Text, JSON, Index
from datetime import datetime
import enum

from safedrive.core.database import Base, generate_id


class AlertType(str, enum.Enum):
    HEALTH = "HEALTH"
    ATTENDANCE = "ATTENDANCE"
    ALCOHOL_DETECTION = "ALCOHOL_DETECTION"
    OBJECT_DETECTION = "OBJECT_DETECTION"
    SAFETY = "SAFETY"
    SYSTEM = "SYSTEM"


class AlertSeverity(str, enum.Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SystemAlert(Base):
    """Health, safety or system alert raised for an organization"""
    __tablename__ = "system_alerts"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(SQLEnum(AlertType), nullable=False)
    severity = Column(SQLEnum(AlertSeverity), nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    target_role = Column(String(50), nullable=True)
    organization_id = Column(String(100), nullable=False, index=True)
    # "metadata" is reserved on declarative classes
    alert_metadata = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_system_alerts_org_created", "organization_id", "created_at"),
    )

    def __repr__(self):
        return f"<SystemAlert {self.severity} {self.title}>"
