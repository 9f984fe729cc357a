"""
Alert Service - system alerts and health threshold evaluation

Handles:
- Alert CRUD, read state and organization statistics
- Evaluating driver vitals against HEALTH_THRESHOLDS
- Detection alerts (alcohol, drowsiness) with their notifications
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from safedrive.core.config import settings
from safedrive.core.exceptions import AlertNotFoundError, ValidationError
from safedrive.core.logging_config import logger
from safedrive.models.alert import SystemAlert, AlertType, AlertSeverity
from safedrive.schemas.alert import AlertCreate
from safedrive.services.alert_thresholds import (
    HEALTH_THRESHOLDS,
    METRIC_ALIASES,
    check_threshold,
    format_reading,
    instance_tracker,
)
from safedrive.services.notification_service import NotificationService
from safedrive.ui.windowing import VisibleWindow
from safedrive.utils.pagination import paginate, fetch_window


class AlertService:
    """Service for system alerts of one organization"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    # ==================== QUERIES ====================

    def _query(
        self,
        organization_id: Optional[str] = None,
        type: Optional[AlertType] = None,
        severity: Optional[AlertSeverity] = None,
        is_read: Optional[bool] = None,
        created_after: Optional[datetime] = None,
    ) -> Select:
        query = select(SystemAlert).where(
            SystemAlert.organization_id == (organization_id or settings.DEFAULT_ORGANIZATION_ID)
        )
        if type is not None:
            query = query.where(SystemAlert.type == type)
        if severity is not None:
            query = query.where(SystemAlert.severity == severity)
        if is_read is not None:
            query = query.where(SystemAlert.is_read == is_read)
        if created_after is not None:
            query = query.where(SystemAlert.created_at >= created_after)
        return query.order_by(SystemAlert.created_at.desc(), SystemAlert.id)

    async def list_alerts(self, page: int = 1, limit: int = 50, **filters: Any) -> dict:
        return await paginate(self.db, self._query(**filters), page=page, limit=limit)

    async def window(
        self,
        scroll_offset: float,
        row_height: int,
        visible_rows: int,
        **filters: Any,
    ) -> Tuple[List[SystemAlert], VisibleWindow, int]:
        return await fetch_window(self.db, self._query(**filters), scroll_offset, row_height, visible_rows)

    async def recent_alerts(self, organization_id: Optional[str] = None, limit: int = 5) -> List[SystemAlert]:
        result = await self.db.execute(self._query(organization_id=organization_id).limit(limit))
        return list(result.scalars().all())

    async def get_alert(self, alert_id: str) -> SystemAlert:
        result = await self.db.execute(select(SystemAlert).where(SystemAlert.id == alert_id))
        alert = result.scalar_one_or_none()
        if not alert:
            raise AlertNotFoundError(alert_id)
        return alert

    async def get_stats(self, organization_id: Optional[str] = None) -> Dict[str, Any]:
        """Totals for the organization; every type and severity is present"""
        org = organization_id or settings.DEFAULT_ORGANIZATION_ID
        base = SystemAlert.organization_id == org

        total = (await self.db.execute(select(func.count(SystemAlert.id)).where(base))).scalar() or 0
        unread = (await self.db.execute(
            select(func.count(SystemAlert.id)).where(base, SystemAlert.is_read.is_(False))
        )).scalar() or 0

        by_type = {t.value: 0 for t in AlertType}
        rows = await self.db.execute(
            select(SystemAlert.type, func.count(SystemAlert.id)).where(base).group_by(SystemAlert.type)
        )
        for alert_type, count in rows.all():
            by_type[AlertType(alert_type).value] = count

        by_severity = {s.value: 0 for s in AlertSeverity}
        rows = await self.db.execute(
            select(SystemAlert.severity, func.count(SystemAlert.id)).where(base).group_by(SystemAlert.severity)
        )
        for severity, count in rows.all():
            by_severity[AlertSeverity(severity).value] = count

        return {
            "total": total,
            "unread": unread,
            "critical": by_severity[AlertSeverity.CRITICAL.value],
            "by_type": by_type,
            "by_severity": by_severity,
        }

    async def check_for_duplicate_alert(
        self,
        organization_id: str,
        alert_type: AlertType,
        title_contains: str,
        within_minutes: int = 60,
    ) -> bool:
        cutoff = datetime.utcnow() - timedelta(minutes=within_minutes)
        result = await self.db.execute(
            select(SystemAlert.id).where(
                SystemAlert.organization_id == organization_id,
                SystemAlert.type == alert_type,
                SystemAlert.title.contains(title_contains),
                SystemAlert.created_at >= cutoff,
            ).limit(1)
        )
        return result.first() is not None

    # ==================== MUTATIONS ====================

    async def create_alert(self, data: AlertCreate) -> SystemAlert:
        missing = [name for name in ("title", "message", "type", "severity") if not getattr(data, name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", field=missing[0])

        return await self._store_alert(
            title=data.title,
            message=data.message,
            alert_type=data.type,
            severity=data.severity,
            organization_id=data.organization_id or settings.DEFAULT_ORGANIZATION_ID,
            metadata=data.metadata or {},
            target_role=data.target_role,
        )

    async def _store_alert(
        self,
        title: str,
        message: str,
        alert_type: AlertType,
        severity: AlertSeverity,
        organization_id: str,
        metadata: Dict[str, Any],
        target_role: Optional[str] = None,
    ) -> SystemAlert:
        alert = SystemAlert(
            title=title,
            message=message,
            type=alert_type,
            severity=severity,
            is_read=False,
            target_role=target_role,
            organization_id=organization_id,
            alert_metadata=metadata,
        )
        self.db.add(alert)
        await self.db.commit()
        await self.db.refresh(alert)

        logger.log_alert_event(
            alert_type.value,
            severity.value,
            title,
            driver_name=metadata.get("driver_name"),
            alert_id=alert.id,
        )
        return alert

    async def mark_as_read(self, alert_id: str) -> SystemAlert:
        alert = await self.get_alert(alert_id)
        alert.is_read = True
        alert.updated_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(alert)
        return alert

    async def mark_all_as_read(self, organization_id: Optional[str] = None) -> int:
        result = await self.db.execute(
            update(SystemAlert)
            .where(
                SystemAlert.organization_id == (organization_id or settings.DEFAULT_ORGANIZATION_ID),
                SystemAlert.is_read.is_(False),
            )
            .values(is_read=True, updated_at=datetime.utcnow())
        )
        await self.db.commit()
        return result.rowcount or 0

    async def delete_alert(self, alert_id: str) -> None:
        alert = await self.get_alert(alert_id)
        await self.db.delete(alert)
        await self.db.commit()

    # ==================== HEALTH THRESHOLDS ====================

    async def check_and_create_alerts(
        self,
        driver_id: str,
        driver_name: str,
        metrics: Dict[str, Any],
        organization_id: Optional[str] = None,
    ) -> List[SystemAlert]:
        """
        Evaluate one set of vitals for a driver.

        Every out-of-range reading counts as an instance for today; an alert
        is raised once the day's count reaches the threshold's
        ``flag_instances``, unless an equivalent alert exists within
        ALERT_DUPLICATE_WINDOW_MINUTES.

        Returns:
            Alerts created by this call
        """
        org = organization_id or settings.DEFAULT_ORGANIZATION_ID
        created: List[SystemAlert] = []

        for key, value in metrics.items():
            parameter = METRIC_ALIASES.get(key, key)
            threshold = HEALTH_THRESHOLDS.get(parameter)
            if threshold is None or value is None:
                continue

            is_alert, is_critical = check_threshold(parameter, value)
            if not is_alert:
                continue

            instances = instance_tracker.record(driver_id, parameter)
            if instances < threshold.flag_instances:
                logger.debug(
                    f"[Alerts] {driver_name} {parameter} out of range "
                    f"({instances}/{threshold.flag_instances} today)"
                )
                continue

            alert = await self._create_health_alert(
                driver_id, driver_name, parameter, value, is_critical, org
            )
            if alert is not None:
                created.append(alert)

        return created

    async def _create_health_alert(
        self,
        driver_id: str,
        driver_name: str,
        parameter: str,
        value: Any,
        is_critical: bool,
        organization_id: str,
    ) -> Optional[SystemAlert]:
        threshold = HEALTH_THRESHOLDS[parameter]

        if await self.check_for_duplicate_alert(
            organization_id,
            AlertType.HEALTH,
            threshold.parameter,
            settings.ALERT_DUPLICATE_WINDOW_MINUTES,
        ):
            logger.debug(f"[Alerts] Duplicate {threshold.parameter} alert suppressed for {driver_name}")
            return None

        alert = await self._store_alert(
            title=f"Critical Health Alert: {threshold.parameter}",
            message=threshold.alert_message(value, driver_name),
            alert_type=AlertType.HEALTH,
            severity=AlertSeverity.CRITICAL if is_critical else AlertSeverity.WARNING,
            organization_id=organization_id,
            metadata={
                "driver_id": driver_id,
                "driver_name": driver_name,
                "parameter": threshold.parameter,
                "value": format_reading(value),
                "threshold": parameter,
                "unit": threshold.unit,
                "send_notification": threshold.send_notification,
            },
        )

        if threshold.send_notification:
            await self.notifications.create_from_alert(alert, organization_id)

        return alert

    async def create_alcohol_alert(
        self,
        driver_id: str,
        driver_name: str,
        organization_id: Optional[str] = None,
        detection_data: Optional[Dict[str, Any]] = None,
    ) -> SystemAlert:
        org = organization_id or settings.DEFAULT_ORGANIZATION_ID
        alert = await self._store_alert(
            title="Alcohol Detection Alert",
            message=f"Alcohol detected for driver {driver_name}. Immediate action required.",
            alert_type=AlertType.ALCOHOL_DETECTION,
            severity=AlertSeverity.CRITICAL,
            organization_id=org,
            metadata={
                "driver_id": driver_id,
                "driver_name": driver_name,
                "detection_data": detection_data,
                "send_notification": True,
            },
        )
        await self.notifications.create_from_alert(alert, org)
        return alert

    async def create_drowsiness_alert(
        self,
        driver_id: str,
        driver_name: str,
        organization_id: Optional[str] = None,
        detection_data: Optional[Dict[str, Any]] = None,
    ) -> SystemAlert:
        org = organization_id or settings.DEFAULT_ORGANIZATION_ID
        alert = await self._store_alert(
            title="Drowsiness Detection Alert",
            message=f"Drowsiness detected for driver {driver_name}. Safety check required.",
            alert_type=AlertType.SAFETY,
            severity=AlertSeverity.CRITICAL,
            organization_id=org,
            metadata={
                "driver_id": driver_id,
                "driver_name": driver_name,
                "detection_data": detection_data,
                "send_notification": True,
            },
        )
        await self.notifications.create_from_alert(alert, org)
        return alert

    # ==================== DEMO DATA ====================

    async def create_test_alerts(self, kind: str = "all", organization_id: Optional[str] = None) -> Dict[str, int]:
        """Generate demo alerts of one kind (or all kinds) for the dashboard"""
        org = organization_id or settings.DEFAULT_ORGANIZATION_ID
        created: List[SystemAlert] = []
        now = datetime.utcnow().isoformat()

        if kind in ("health", "all"):
            created.extend(await self.check_and_create_alerts(
                "test-driver-1",
                "Test Driver 1",
                {"heartRate": 120, "breathingRate": 25, "hrvSDNN": 15, "oxygenSaturation": 88, "snsIndex": 7},
                org,
            ))
            created.append(await self._store_alert(
                "High Blood Pressure Detected",
                "Test Driver 2 has recorded blood pressure of 180/95 mmHg",
                AlertType.HEALTH,
                AlertSeverity.ERROR,
                org,
                {"driver_id": "test-driver-2", "driver_name": "Test Driver 2",
                 "parameter": "Blood Pressure", "value": "180/95", "unit": "mmHg"},
            ))

        if kind in ("alcohol", "all"):
            created.append(await self.create_alcohol_alert(
                "test-driver-3", "Test Driver 3", org, {"confidence": 0.85, "timestamp": now}
            ))

        if kind in ("drowsiness", "all"):
            created.append(await self.create_drowsiness_alert(
                "test-driver-4", "Test Driver 4", org, {"confidence": 0.92, "timestamp": now}
            ))

        if kind in ("attendance", "all"):
            created.append(await self._store_alert(
                "Late Check-in",
                "Test Driver 5 checked in 30 minutes late for duty",
                AlertType.ATTENDANCE,
                AlertSeverity.INFO,
                org,
                {"driver_id": "test-driver-5", "driver_name": "Test Driver 5", "late_minutes": 30},
            ))

        if kind in ("object", "all"):
            created.append(await self._store_alert(
                "Phone Usage Detected",
                "Test Driver 6 was detected using phone while driving",
                AlertType.OBJECT_DETECTION,
                AlertSeverity.WARNING,
                org,
                {"driver_id": "test-driver-6", "driver_name": "Test Driver 6",
                 "object_type": "phone", "confidence": 0.89},
            ))

        if kind in ("system", "all"):
            created.append(await self._store_alert(
                "System Maintenance",
                "Scheduled system maintenance will begin at 2:00 AM tonight",
                AlertType.SYSTEM,
                AlertSeverity.INFO,
                org,
                {"maintenance_type": "scheduled", "duration": "2 hours"},
            ))

        total = (await self.db.execute(
            select(func.count(SystemAlert.id)).where(SystemAlert.organization_id == org)
        )).scalar() or 0

        return {"new_alerts": len(created), "total_alerts": total}
