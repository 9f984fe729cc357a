# Services
from safedrive.services.alert_service import AlertService
from safedrive.services.notification_service import NotificationService
from safedrive.services.driver_service import DriverService
from safedrive.services.dashboard_service import DashboardService
from safedrive.services.health_report_service import HealthReportService
from safedrive.services.attendance_service import AttendanceService
