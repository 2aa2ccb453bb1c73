"""Pricing (subscription plans) endpoints"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.middleware.cache import cache_control
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.pricing import PlanCreate, PlanResponse, PlanUpdate
from crm.services import pricing_service

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.get("", response_model=Envelope[list[PlanResponse]], dependencies=[Depends(cache_control("long"))])
async def list_plans(
    include_inactive: bool = Query(False, alias="includeInactive", description="Include inactive plans"),
    db: AsyncSession = Depends(get_db),
):
    plans = await pricing_service.list_plans(db, active_only=not include_inactive)
    return ok([PlanResponse.model_validate(p) for p in plans], count=len(plans))


@router.get("/{plan_id}", response_model=Envelope[PlanResponse], dependencies=[Depends(cache_control("long"))])
async def get_plan(plan_id: int, db: AsyncSession = Depends(get_db)):
    return ok(PlanResponse.model_validate(await pricing_service.get_plan(db, plan_id)))


@router.post(
    "",
    response_model=Envelope[PlanResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(cache_control("none"))],
)
async def create_plan(body: PlanCreate, db: AsyncSession = Depends(get_db)):
    plan = await pricing_service.create_plan(db, body)
    return ok(PlanResponse.model_validate(plan), message="Plan created successfully")


@router.patch("/{plan_id}", response_model=Envelope[PlanResponse], dependencies=[Depends(cache_control("none"))])
async def update_plan(plan_id: int, body: PlanUpdate, db: AsyncSession = Depends(get_db)):
    plan = await pricing_service.update_plan(db, plan_id, body)
    return ok(PlanResponse.model_validate(plan), message="Plan updated successfully")


@router.delete("/{plan_id}", response_model=MessageResponse, dependencies=[Depends(cache_control("none"))])
async def delete_plan(plan_id: int, db: AsyncSession = Depends(get_db)):
    await pricing_service.delete_plan(db, plan_id)
    return {"success": True, "message": "Plan deleted successfully"}
