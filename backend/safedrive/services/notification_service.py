"""
Notification Service - user-facing notification feed

Notifications are either created directly or derived from a SystemAlert
(at most one per alert).
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from safedrive.core.config import settings
from safedrive.core.exceptions import NotificationNotFoundError, ValidationError
from safedrive.core.logging_config import logger
from safedrive.models.alert import SystemAlert, AlertSeverity, AlertType
from safedrive.models.notification import Notification, NotificationType
from safedrive.schemas.notification import NotificationCreate
from safedrive.ui.windowing import VisibleWindow
from safedrive.utils.pagination import paginate, fetch_window


SEVERITY_TO_TYPE = {
    AlertSeverity.CRITICAL: NotificationType.ERROR,
    AlertSeverity.ERROR: NotificationType.ERROR,
    AlertSeverity.WARNING: NotificationType.WARNING,
    AlertSeverity.INFO: NotificationType.INFO,
}

ALERT_ACTION_URLS = {
    AlertType.HEALTH: "/health",
    AlertType.ATTENDANCE: "/attendance",
    AlertType.ALCOHOL_DETECTION: "/monitoring",
    AlertType.SAFETY: "/monitoring",
}


def notification_type_for(severity: AlertSeverity) -> NotificationType:
    return SEVERITY_TO_TYPE.get(severity, NotificationType.SUCCESS)


def action_url_for(alert_type: AlertType) -> str:
    return ALERT_ACTION_URLS.get(alert_type, "/alerts")


class NotificationService:
    """Service for the notification feed of one organization"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _query(
        self,
        organization_id: Optional[str] = None,
        read: Optional[bool] = None,
        driver_id: Optional[str] = None,
        created_after: Optional[datetime] = None,
    ) -> Select:
        query = select(Notification).where(
            Notification.organization_id == (organization_id or settings.DEFAULT_ORGANIZATION_ID)
        )
        if read is not None:
            query = query.where(Notification.read == read)
        if driver_id:
            query = query.where(Notification.driver_id == driver_id)
        if created_after is not None:
            query = query.where(Notification.created_at >= created_after)
        return query.order_by(Notification.created_at.desc(), Notification.id)

    async def list_notifications(self, page: int = 1, limit: int = 50, **filters: Any) -> dict:
        return await paginate(self.db, self._query(**filters), page=page, limit=limit)

    async def window(
        self,
        scroll_offset: float,
        row_height: int,
        visible_rows: int,
        **filters: Any,
    ) -> Tuple[List[Notification], VisibleWindow, int]:
        return await fetch_window(self.db, self._query(**filters), scroll_offset, row_height, visible_rows)

    async def get_notification(self, notification_id: str) -> Notification:
        result = await self.db.execute(select(Notification).where(Notification.id == notification_id))
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotificationNotFoundError(notification_id)
        return notification

    async def create_notification(self, data: NotificationCreate) -> Notification:
        missing = [name for name in ("title", "message", "type") if not getattr(data, name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", field=missing[0])

        notification = Notification(
            title=data.title,
            message=data.message,
            type=data.type,
            read=False,
            driver_id=data.driver_id,
            action_url=data.action_url,
            organization_id=data.organization_id or settings.DEFAULT_ORGANIZATION_ID,
            notification_metadata=data.metadata or {},
        )
        self.db.add(notification)
        await self.db.commit()
        await self.db.refresh(notification)
        return notification

    async def create_from_alert(self, alert: SystemAlert, organization_id: Optional[str] = None) -> Optional[Notification]:
        """
        Derive a notification from an alert.

        Returns None when the alert already has one or its metadata
        explicitly opts out with ``send_notification: false``.
        """
        metadata: Dict[str, Any] = alert.alert_metadata or {}
        if metadata.get("send_notification") is False:
            return None

        existing = await self.db.execute(
            select(Notification.id).where(Notification.alert_id == alert.id)
        )
        if existing.first() is not None:
            return None

        notification = Notification(
            title=alert.title,
            message=alert.message,
            type=notification_type_for(alert.severity),
            read=False,
            driver_id=metadata.get("driver_id"),
            action_url=action_url_for(alert.type),
            organization_id=organization_id or alert.organization_id,
            alert_id=alert.id,
            notification_metadata=metadata,
        )
        self.db.add(notification)
        await self.db.commit()
        await self.db.refresh(notification)

        logger.debug(f"[Notifications] Created from alert {alert.id}: {alert.title}")
        return notification

    async def sync_from_alerts(self, alerts: Iterable[SystemAlert], organization_id: Optional[str] = None) -> int:
        """Create missing notifications for ``alerts``; returns how many were created"""
        created = 0
        for alert in alerts:
            if await self.create_from_alert(alert, organization_id):
                created += 1
        if created:
            logger.info(f"[Notifications] Synced {created} notifications from alerts")
        return created

    async def sync_recent_alerts(self, organization_id: Optional[str] = None, hours: Optional[int] = None) -> int:
        org = organization_id or settings.DEFAULT_ORGANIZATION_ID
        cutoff = datetime.utcnow() - timedelta(hours=hours or settings.NOTIFICATION_SYNC_HOURS)
        result = await self.db.execute(
            select(SystemAlert)
            .where(SystemAlert.organization_id == org, SystemAlert.created_at >= cutoff)
            .order_by(SystemAlert.created_at.desc())
        )
        return await self.sync_from_alerts(result.scalars().all(), org)

    async def mark_as_read(self, notification_id: str) -> Notification:
        notification = await self.get_notification(notification_id)
        notification.read = True
        await self.db.commit()
        await self.db.refresh(notification)
        return notification

    async def mark_all_as_read(self, organization_id: Optional[str] = None) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.organization_id == (organization_id or settings.DEFAULT_ORGANIZATION_ID),
                Notification.read.is_(False),
            )
            .values(read=True)
        )
        await self.db.commit()
        return result.rowcount or 0

    async def delete_notification(self, notification_id: str) -> None:
        notification = await self.get_notification(notification_id)
        await self.db.delete(notification)
        await self.db.commit()

    async def clear_old(self, days_to_keep: Optional[int] = None) -> int:
        """Purge notifications older than ``days_to_keep`` days"""
        days = settings.NOTIFICATION_RETENTION_DAYS if days_to_keep is None else days_to_keep
        cutoff = datetime.utcnow() - timedelta(days=days)
        result = await self.db.execute(delete(Notification).where(Notification.created_at < cutoff))
        await self.db.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info(f"[Notifications] Removed {removed} notifications older than {days} days")
        return removed

    async def unread_count(self, organization_id: Optional[str] = None) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.organization_id == (organization_id or settings.DEFAULT_ORGANIZATION_ID),
                Notification.read.is_(False),
            )
        )
        return result.scalar() or 0
