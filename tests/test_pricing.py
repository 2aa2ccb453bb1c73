"""Tests for the subscription plan catalogue."""

import pytest

from crm.exceptions import NotFoundError
from crm.schemas.pricing import PlanCreate, PlanResponse, PlanUpdate
from crm.services import pricing_service


@pytest.mark.asyncio
async def test_plans_ordered_and_filtered(db_session):
    await pricing_service.create_plan(db_session, PlanCreate(name="Pro", price=499, display_order=2))
    await pricing_service.create_plan(db_session, PlanCreate(name="Starter", price=99, display_order=1))
    await pricing_service.create_plan(
        db_session, PlanCreate(name="Legacy", price=49, display_order=0, is_active=False)
    )

    active = await pricing_service.list_plans(db_session, active_only=True)
    every = await pricing_service.list_plans(db_session)

    assert [p.name for p in active] == ["Starter", "Pro"]
    assert [p.name for p in every] == ["Legacy", "Starter", "Pro"]


@pytest.mark.asyncio
async def test_update_and_delete_plan(db_session):
    plan = await pricing_service.create_plan(
        db_session, PlanCreate(name="Pro", price=499, features=["CRM", "Reports"])
    )

    updated = await pricing_service.update_plan(db_session, plan.id, PlanUpdate(price=549, is_custom=True))
    response = PlanResponse.model_validate(updated)
    assert response.price == 549
    assert response.is_custom is True
    assert response.features == ["CRM", "Reports"]
    assert response.currency == "INR"

    await pricing_service.delete_plan(db_session, plan.id)
    with pytest.raises(NotFoundError):
        await pricing_service.get_plan(db_session, plan.id)
