"""Dashboard API endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.middleware.cache import cache_control
from crm.schemas.common import Envelope, ok
from crm.schemas.dashboard import DashboardSummary
from crm.services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary", response_model=Envelope[DashboardSummary], dependencies=[Depends(cache_control("short"))])
async def get_summary(db: AsyncSession = Depends(get_db)):
    """Lead counts and the 25 most recent entries across activities, cold calls and visits"""
    return ok(await dashboard_service.get_summary(db))
