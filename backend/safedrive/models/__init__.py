# Re-export all models for convenient imports
from safedrive.models.user import User, UserRole
from safedrive.models.driver import Driver, Gender
from safedrive.models.alert import SystemAlert, AlertType, AlertSeverity
from safedrive.models.notification import Notification, NotificationType
from safedrive.models.health_report import HealthReport, RiskLevel, StressLevel
from safedrive.models.attendance import AttendanceRecord, AttendanceStatus

__all__ = [
    # User
    "User",
    "UserRole",
    # Driver
    "Driver",
    "Gender",
    # Alerts
    "SystemAlert",
    "AlertType",
    "AlertSeverity",
    # Notifications
    "Notification",
    "NotificationType",
    # Health
    "HealthReport",
    "RiskLevel",
    "StressLevel",
    # Attendance
    "AttendanceRecord",
    "AttendanceStatus",
]
