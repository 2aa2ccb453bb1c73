"""Tests for deal creation and pipeline stage moves."""

import pytest

from crm.exceptions import NotFoundError, ValidationError
from crm.models.deal import Deal
from crm.schemas.deal import DealCreate
from crm.services import deal_service


def test_default_deal_title():
    assert deal_service.default_deal_title("Big deal", "Acme", 3) == "Big deal"
    assert deal_service.default_deal_title(None, "Acme", 3) == "Acme"
    assert deal_service.default_deal_title("  ", None, 3) == "Deal for Lead #3"


def test_normalize_stage_is_case_insensitive():
    assert deal_service.normalize_stage("Proposal") == "proposal"
    assert deal_service.normalize_stage(" CLOSED ") == "closed"
    with pytest.raises(ValidationError):
        deal_service.normalize_stage("won")


@pytest.mark.asyncio
async def test_deal_starts_at_new_with_company_title(db_session, lead):
    deal = await deal_service.create_deal_from_lead(db_session, DealCreate(lead_id=lead.id, deal_value=1500))
    assert deal.stage == "new"
    assert deal.title == "Acme"
    assert len(deal.id) == 36


@pytest.mark.asyncio
async def test_deal_for_missing_lead(db_session):
    with pytest.raises(NotFoundError) as exc:
        await deal_service.create_deal_from_lead(db_session, DealCreate(lead_id=77))
    assert "77" in exc.value.message


@pytest.mark.asyncio
async def test_move_deal_to_stage(db_session, lead):
    deal = await deal_service.create_deal_from_lead(db_session, DealCreate(lead_id=lead.id))

    moved = await deal_service.move_deal_to_stage(db_session, deal.id, "Negotiation")
    assert moved.stage == "negotiation"

    pipeline = await deal_service.list_deals_by_stage(db_session)
    assert [d.id for d in pipeline.negotiation] == [deal.id]
    assert pipeline.new == []
    assert pipeline.negotiation[0].contact_name == "Jane Doe"


@pytest.mark.asyncio
async def test_invalid_stage_leaves_deal_untouched(db_session, lead):
    deal = await deal_service.create_deal_from_lead(db_session, DealCreate(lead_id=lead.id))

    with pytest.raises(ValidationError):
        await deal_service.move_deal_to_stage(db_session, deal.id, "archived")

    stored = await db_session.get(Deal, deal.id, populate_existing=True)
    assert stored.stage == "new"


@pytest.mark.asyncio
async def test_move_missing_deal(db_session):
    with pytest.raises(NotFoundError):
        await deal_service.move_deal_to_stage(db_session, "00000000-0000-0000-0000-000000000000", "closed")


@pytest.mark.asyncio
async def test_pipeline_lists_every_stage(db_session):
    pipeline = await deal_service.list_deals_by_stage(db_session)
    assert set(pipeline.model_dump()) == {"new", "qualified", "proposal", "negotiation", "closed"}
