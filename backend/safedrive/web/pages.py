"""
Server-rendered dashboard pages.

Every table is a VirtualizedTable: the page ships the first window and
``/ui/{resource}/rows`` returns the slice for a later scroll position, loading
only those rows from the database.
"""
from dataclasses import dataclass
from typing import Any, Callable, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from safedrive.api.v1.endpoints.auth import authenticate_user, issue_token
from safedrive.core.config import settings
from safedrive.core.database import get_db
from safedrive.core.exceptions import AuthenticationError, AuthorizationError, ResourceNotFoundError
from safedrive.core.security import set_auth_cookie, clear_auth_cookie
from safedrive.models.user import User
from safedrive.modules.auth.dependencies import get_current_user, get_optional_user
from safedrive.services.attendance_service import AttendanceService
from safedrive.services.alert_service import AlertService
from safedrive.services.dashboard_service import DashboardService
from safedrive.services.driver_service import DriverService
from safedrive.services.health_report_service import HealthReportService
from safedrive.services.notification_service import NotificationService
from safedrive.ui.scroll import Viewport
from safedrive.ui.virtualized_table import VirtualizedTable
from safedrive.web.templating import templates, row_renderer


router = APIRouter()


@dataclass(frozen=True)
class TableSpec:
    title: str
    service: Callable[[AsyncSession], Any]
    row_macro: str
    columns: List[str]


TABLES = {
    "alerts": TableSpec(
        title="Alerts",
        service=AlertService,
        row_macro="alert_row",
        columns=["Severity", "Type", "Title", "Message", "Created", "Status"],
    ),
    "drivers": TableSpec(
        title="Drivers",
        service=DriverService,
        row_macro="driver_row",
        columns=["Photo", "Code", "Name", "Phone", "Age", "Gender", "Joined"],
    ),
    "notifications": TableSpec(
        title="Notifications",
        service=NotificationService,
        row_macro="notification_row",
        columns=["Type", "Title", "Message", "Received", "Status"],
    ),
    "health": TableSpec(
        title="Health Reports",
        service=HealthReportService,
        row_macro="health_report_row",
        columns=["Driver", "Report Date", "Blood Pressure", "Heart Rate", "Stress", "Risk"],
    ),
    "attendance": TableSpec(
        title="Attendance",
        service=AttendanceService,
        row_macro="attendance_row",
        columns=["Driver", "Date", "Check In", "Check Out", "Hours", "Status"],
    ),
}


def login_redirect(request: Request) -> RedirectResponse:
    return RedirectResponse(f"/login?from={quote(request.url.path)}", status_code=303)


def safe_next_path(path: Optional[str]) -> str:
    """Only same-site absolute paths are honoured after login"""
    if path and path.startswith("/") and not path.startswith("//"):
        return path
    return "/"


async def build_table(
    db: AsyncSession,
    resource: str,
    scroll_top: float = 0,
    row_height: Optional[int] = None,
    visible_rows: Optional[int] = None,
) -> VirtualizedTable:
    """Load the window at ``scroll_top`` and mount a table on it"""
    config = TABLES.get(resource)
    if config is None:
        raise ResourceNotFoundError("Table", resource)

    row_height = row_height or settings.TABLE_ROW_HEIGHT
    visible_rows = visible_rows or settings.TABLE_VISIBLE_ROWS

    rows, window, total = await config.service(db).window(scroll_top, row_height, visible_rows)

    table = VirtualizedTable(
        rows,
        row_height=row_height,
        visible_rows=visible_rows,
        render_row=row_renderer(config.row_macro),
        total=total,
        base_index=window.start_index,
        table_id=f"{resource}-table",
    )
    viewport = Viewport(name=resource)
    with table.mounted(viewport):
        viewport.scroll_to(scroll_top)
    return table


# ==================== AUTH PAGES ====================

@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    next_path: Optional[str] = Query(None, alias="from"),
    user: Optional[User] = Depends(get_optional_user)
):
    if user is not None:
        return RedirectResponse(safe_next_path(next_path), status_code=303)
    return templates.TemplateResponse(
        request,
        "pages/login.html",
        {"next_path": safe_next_path(next_path), "error": None},
    )


@router.post("/login", response_class=HTMLResponse)
async def login_form(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next_path: str = Form("/"),
    db: AsyncSession = Depends(get_db)
):
    error = None
    if not email or not password:
        error = "Email and password are required"
    else:
        client_ip = request.client.host if request.client else "unknown"
        try:
            user = await authenticate_user(db, email, password, client_ip)
        except (AuthenticationError, AuthorizationError) as e:
            error = e.message

    if error:
        return templates.TemplateResponse(
            request,
            "pages/login.html",
            {"next_path": safe_next_path(next_path), "error": error, "email": email},
            status_code=400 if not email or not password else 401,
        )

    response = RedirectResponse(safe_next_path(next_path), status_code=303)
    set_auth_cookie(response, issue_token(user))
    return response


@router.post("/logout")
async def logout_form():
    response = RedirectResponse("/login", status_code=303)
    clear_auth_cookie(response)
    return response


# ==================== DASHBOARD PAGES ====================

@router.get("/", response_class=HTMLResponse)
async def dashboard_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user)
):
    if user is None:
        return login_redirect(request)
    stats = await DashboardService(db).get_stats()
    return templates.TemplateResponse(
        request,
        "pages/dashboard.html",
        {"user": user, "active_page": "dashboard", "stats": stats},
    )


async def _table_page(request: Request, db: AsyncSession, user: Optional[User], resource: str):
    if user is None:
        return login_redirect(request)
    config = TABLES[resource]
    table = await build_table(db, resource)
    return templates.TemplateResponse(
        request,
        "pages/table_page.html",
        {
            "user": user,
            "active_page": resource,
            "resource": resource,
            "title": config.title,
            "columns": config.columns,
            "table": table,
        },
    )


@router.get("/alerts", response_class=HTMLResponse)
async def alerts_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user)
):
    return await _table_page(request, db, user, "alerts")


@router.get("/drivers", response_class=HTMLResponse)
async def drivers_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user)
):
    return await _table_page(request, db, user, "drivers")


@router.get("/notifications", response_class=HTMLResponse)
async def notifications_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user)
):
    return await _table_page(request, db, user, "notifications")


@router.get("/health", response_class=HTMLResponse)
async def health_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user)
):
    return await _table_page(request, db, user, "health")


@router.get("/attendance", response_class=HTMLResponse)
async def attendance_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user)
):
    return await _table_page(request, db, user, "attendance")


# ==================== FRAGMENTS ====================

@router.get("/ui/{resource}/rows", response_class=HTMLResponse)
async def table_rows_fragment(
    resource: str,
    scroll_top: float = Query(0, ge=0, allow_inf_nan=False),
    row_height: int = Query(settings.TABLE_ROW_HEIGHT, ge=1),
    visible_rows: int = Query(settings.TABLE_VISIBLE_ROWS, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Re-rendered slice for a scroll position"""
    table = await build_table(db, resource, scroll_top, row_height, visible_rows)
    return HTMLResponse(
        content=str(table.render_slice()),
        headers={
            "X-Window-Start": str(table.window.start_index),
            "X-Window-End": str(table.window.end_index),
            "X-Window-Total": str(table.total),
        },
    )
