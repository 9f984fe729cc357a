from fastapi import APIRouter
from safedrive.api.v1.endpoints import auth, alerts, notifications, drivers, dashboard, health_reports, attendance

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(alerts.router, prefix="/alerts", tags=["Alerts"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(drivers.router, prefix="/drivers", tags=["Drivers"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(health_reports.router, prefix="/health-reports", tags=["Health Reports"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
