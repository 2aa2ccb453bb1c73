"""Subscription plan catalogue"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import NotFoundError
from crm.models.subscription_plan import SubscriptionPlan
from crm.schemas.pricing import PlanCreate, PlanUpdate
from crm.services.patching import apply_patch, patch_values

logger = logging.getLogger(__name__)


async def list_plans(db: AsyncSession, active_only: bool = False) -> list[SubscriptionPlan]:
    stmt = select(SubscriptionPlan)
    if active_only:
        stmt = stmt.where(SubscriptionPlan.is_active.is_(True))
    result = await db.execute(
        stmt.order_by(SubscriptionPlan.display_order.asc(), SubscriptionPlan.created_at.asc(), SubscriptionPlan.id.asc())
    )
    return list(result.scalars().all())


async def get_plan(db: AsyncSession, plan_id: int) -> SubscriptionPlan:
    plan = await db.get(SubscriptionPlan, plan_id, populate_existing=True)
    if plan is None:
        raise NotFoundError("Subscription plan not found")
    return plan


async def create_plan(db: AsyncSession, data: PlanCreate) -> SubscriptionPlan:
    plan = SubscriptionPlan(**data.model_dump())
    db.add(plan)
    await db.commit()
    await db.refresh(plan)
    logger.info(f"Subscription plan created: id={plan.id}, name={plan.name}")
    return plan


async def update_plan(db: AsyncSession, plan_id: int, patch: PlanUpdate) -> SubscriptionPlan:
    await get_plan(db, plan_id)
    values = patch_values(patch, model=SubscriptionPlan)
    if values:
        await apply_patch(db, SubscriptionPlan, plan_id, values)
        await db.commit()
    return await get_plan(db, plan_id)


async def delete_plan(db: AsyncSession, plan_id: int) -> None:
    result = await db.execute(delete(SubscriptionPlan).where(SubscriptionPlan.id == plan_id))
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError("Subscription plan not found")
    await db.commit()
    logger.info(f"Subscription plan deleted: id={plan_id}")
