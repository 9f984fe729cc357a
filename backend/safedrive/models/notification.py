from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Text, JSON, Index
from datetime import datetime
import enum

from safedrive.core.database import Base, generate_id


class NotificationType(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class Notification(Base):
    """User-facing notification, optionally derived from a SystemAlert"""
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(
        SQLEnum(NotificationType, values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )
    read = Column(Boolean, default=False, nullable=False)
    driver_id = Column(String(36), nullable=True, index=True)
    action_url = Column(String(255), nullable=True)
    organization_id = Column(String(100), nullable=False, index=True)
    alert_id = Column(String(36), unique=True, nullable=True)
    notification_metadata = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_notifications_org_created", "organization_id", "created_at"),
    )

    def __repr__(self):
        return f"<Notification {self.type} {self.title}>"
