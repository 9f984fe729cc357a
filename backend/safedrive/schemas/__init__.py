# Pydantic schemas
from safedrive.schemas.common import (
    PaginationMeta,
    WindowMeta,
    pagination_meta,
    window_meta,
    success_response,
    window_response,
    paginated_response,
)
from safedrive.schemas.auth import UserLogin, UserResponse
from safedrive.schemas.driver import (
    DriverCreate,
    DriverUpdate,
    DriverResponse,
    DriverStats,
    VitalsPayload,
)
from safedrive.schemas.alert import AlertCreate, AlertResponse, AlertStats
from safedrive.schemas.notification import NotificationCreate, NotificationResponse
from safedrive.schemas.health_report import (
    DriverSummary,
    HealthReportCreate,
    HealthReportResponse,
    HealthTodayStats,
    DriverHealthReport,
)
from safedrive.schemas.attendance import AttendanceCheck, AttendanceResponse
