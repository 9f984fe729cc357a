# API endpoints
from . import auth, alerts, notifications, drivers, dashboard, health, health_reports, attendance

__all__ = ["auth", "alerts", "notifications", "drivers", "dashboard", "health", "health_reports", "attendance"]
