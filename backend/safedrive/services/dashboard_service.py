"""Dashboard Service - headline numbers for the overview page"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from safedrive.schemas.alert import AlertResponse
from safedrive.services.alert_service import AlertService
from safedrive.services.driver_service import DriverService
from safedrive.services.notification_service import NotificationService


class DashboardService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_stats(self, organization_id: Optional[str] = None) -> Dict[str, Any]:
        alerts = AlertService(self.db)
        driver_stats = await DriverService(self.db).get_stats()
        alert_stats = await alerts.get_stats(organization_id)
        recent = await alerts.recent_alerts(organization_id, limit=5)

        return {
            "total_drivers": driver_stats["total"],
            "drivers_by_gender": {
                "male": driver_stats["male"],
                "female": driver_stats["female"],
                "other": driver_stats["other"],
            },
            "alerts": {
                "total": alert_stats["total"],
                "unread": alert_stats["unread"],
                "critical": alert_stats["critical"],
            },
            "unread_notifications": await NotificationService(self.db).unread_count(organization_id),
            "recent_alerts": [AlertResponse.model_validate(a).model_dump(mode="json") for a in recent],
        }
