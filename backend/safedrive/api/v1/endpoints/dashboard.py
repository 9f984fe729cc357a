from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from safedrive.core.database import get_db
from safedrive.models.user import User
from safedrive.modules.auth.dependencies import get_current_user
from safedrive.schemas.common import success_response
from safedrive.services.dashboard_service import DashboardService


router = APIRouter()


@router.get("/stats")
async def dashboard_stats(
    organization_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Headline counts and the five newest alerts"""
    return success_response(await DashboardService(db).get_stats(organization_id))
