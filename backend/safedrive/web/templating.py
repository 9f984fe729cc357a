"""Jinja2 environment and helpers shared by the HTML pages"""
from datetime import datetime
from typing import Any, Callable, Optional

from fastapi.templating import Jinja2Templates

from safedrive.core.config import settings

templates = Jinja2Templates(directory=str(settings.TEMPLATES_DIR))

ROW_MACROS_TEMPLATE = "components/rows.html"

SEVERITY_BADGES = {
    "CRITICAL": "badge badge--critical",
    "ERROR": "badge badge--error",
    "WARNING": "badge badge--warning",
    "INFO": "badge badge--info",
    # Health report risk levels
    "HIGH": "badge badge--error",
    "MEDIUM": "badge badge--warning",
    "LOW": "badge badge--info",
    "NORMAL": "badge badge--success",
}


def format_datetime(value: Optional[datetime], fmt: str = "%d %b %Y, %H:%M") -> str:
    if value is None:
        return "-"
    return value.strftime(fmt)


def severity_badge(severity: Any) -> str:
    key = getattr(severity, "value", severity)
    return SEVERITY_BADGES.get(str(key), "badge")


def enum_label(value: Any) -> str:
    """ALCOHOL_DETECTION -> Alcohol Detection"""
    raw = str(getattr(value, "value", value) or "")
    return raw.replace("_", " ").title()


templates.env.filters["datetime"] = format_datetime
templates.env.filters["severity_badge"] = severity_badge
templates.env.filters["enum_label"] = enum_label
templates.env.globals["app_name"] = settings.APP_NAME


def row_renderer(macro_name: str) -> Callable[[Any, int], Any]:
    """Wrap a macro from the row macro template as ``(item, index) -> Markup``"""
    module = templates.env.get_template(ROW_MACROS_TEMPLATE).module
    macro = getattr(module, macro_name)

    def render(item: Any, index: int):
        return macro(item, index)

    return render
