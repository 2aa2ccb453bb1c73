"""Tests for lead creation, detail, timeline and cascade delete."""

from datetime import time

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from crm.exceptions import NotFoundError
from crm.models.activity import Activity, ColdCall, OnsiteVisit
from crm.models.contact import Contact
from crm.models.deal import Deal
from crm.models.lead import Lead
from crm.models.notification import Notification
from crm.models.task import Task
from crm.models.user import User
from crm.schemas.contact import ContactCreate
from crm.schemas.deal import DealCreate
from crm.schemas.lead import LeadCreate
from crm.schemas.task import TaskCreate
from crm.schemas.timeline import OnsiteVisitCreate
from crm.services import deal_service, lead_service, task_service


def _lead_payload(name="Jane Doe", **kwargs) -> LeadCreate:
    return LeadCreate(contact=ContactCreate(name=name, email="jane@acme.io", company="Acme"), **kwargs)


@pytest.mark.asyncio
async def test_create_lead_stores_contact_and_lead(db_session):
    lead = await lead_service.create_lead(db_session, _lead_payload(source="referral"), "alice@example.com")

    assert lead.stage == "new"
    assert lead.status == "new"
    assert lead.source == "referral"
    assert lead.name == "Jane Doe"
    assert lead.created_by_email == "alice@example.com"
    assert lead.contact is not None
    assert lead.contact.company == "Acme"
    assert lead.contact_id == lead.contact.id


@pytest.mark.asyncio
async def test_create_lead_keeps_given_stage(db_session):
    lead = await lead_service.create_lead(db_session, _lead_payload(stage="Qualified"))
    assert lead.stage == "qualified"


@pytest.mark.asyncio
async def test_failed_lead_insert_rolls_back_contact(db_session, monkeypatch):
    """A lead row that violates NOT NULL must leave no orphan contact behind."""
    monkeypatch.setattr(lead_service, "DEFAULT_LEAD_STATUS", None)

    with pytest.raises(IntegrityError):
        await lead_service.create_lead(db_session, _lead_payload(name="Orphan Candidate"))

    contacts = await db_session.scalar(select(func.count(Contact.id)))
    leads = await db_session.scalar(select(func.count(Lead.id)))
    assert contacts == 0
    assert leads == 0


@pytest.mark.asyncio
async def test_list_leads_includes_creator_name(db_session):
    db_session.add(User(email="alice@example.com", name="Alice", role="manager"))
    await db_session.commit()

    await lead_service.create_lead(db_session, _lead_payload(name="First"), "alice@example.com")
    await lead_service.create_lead(db_session, _lead_payload(name="Second"))

    leads = await lead_service.list_leads(db_session)
    assert [lead.name for lead in leads] == ["Second", "First"]
    assert leads[1].creator_name == "Alice"
    assert leads[0].creator_name is None


@pytest.mark.asyncio
async def test_get_lead_detail_missing(db_session):
    with pytest.raises(NotFoundError):
        await lead_service.get_lead_detail(db_session, 999)


@pytest.mark.asyncio
async def test_timeline_returns_three_arrays_newest_first(db_session, lead):
    await lead_service.add_activity(db_session, lead.id, "note", "first note")
    await lead_service.add_activity(db_session, lead.id, "email", "second")
    await lead_service.add_cold_call(db_session, lead.id, "voicemail", "left message")
    await lead_service.add_onsite_visit(
        db_session,
        lead.id,
        OnsiteVisitCreate(location="HQ", outcome="completed", in_time=time(9, 30), out_time=time(10, 15)),
    )

    timeline = await lead_service.get_lead_timeline(db_session, lead.id)

    assert [a.description for a in timeline.activities] == ["second", "first note"]
    assert len(timeline.cold_calls) == 1
    assert timeline.cold_calls[0].outcome == "voicemail"
    assert len(timeline.onsite_visits) == 1
    visit = timeline.onsite_visits[0]
    assert visit.location == "HQ"
    assert visit.outcome == "completed"
    assert visit.in_time == "09:30:00"


@pytest.mark.asyncio
async def test_logging_against_missing_lead_fails(db_session):
    with pytest.raises(NotFoundError):
        await lead_service.add_cold_call(db_session, 12345, "answered")
    with pytest.raises(NotFoundError):
        await lead_service.get_lead_timeline(db_session, 12345)


@pytest.mark.asyncio
async def test_delete_lead_removes_dependents(db_session, lead):
    other = await lead_service.create_lead(db_session, _lead_payload(name="Bystander"))
    await lead_service.add_activity(db_session, other.id, "note", "keep me")
    await lead_service.add_cold_call(db_session, other.id, "answered")
    await lead_service.add_activity(db_session, lead.id, "note", "hello")
    await lead_service.add_cold_call(db_session, lead.id, "answered")
    await lead_service.add_onsite_visit(db_session, lead.id, OnsiteVisitCreate(location="HQ", outcome="done"))
    await deal_service.create_deal_from_lead(db_session, DealCreate(lead_id=lead.id))
    await task_service.create_task(
        db_session, TaskCreate(assigned_to_email="bob@example.com", title="Call back", lead_id=lead.id)
    )

    assert await lead_service.delete_lead(db_session, lead.id) is True

    for model, column in (
        (Activity, Activity.lead_id),
        (ColdCall, ColdCall.lead_id),
        (OnsiteVisit, OnsiteVisit.lead_id),
        (Deal, Deal.lead_id),
        (Task, Task.lead_id),
    ):
        remaining = await db_session.scalar(select(func.count()).select_from(model).where(column == lead.id))
        assert remaining == 0, model.__name__

    assert await db_session.scalar(select(func.count(Notification.id))) == 0
    untouched = await lead_service.get_lead_timeline(db_session, other.id)
    assert [a.description for a in untouched.activities] == ["keep me"]
    assert len(untouched.cold_calls) == 1
    assert await db_session.get(Lead, lead.id, populate_existing=True) is None
    # the contact survives the lead
    assert await db_session.get(Contact, lead.contact_id, populate_existing=True) is not None


@pytest.mark.asyncio
async def test_delete_missing_lead_returns_false(db_session):
    assert await lead_service.delete_lead(db_session, 424242) is False


@pytest.mark.asyncio
async def test_delete_lead_clears_client_back_reference(db_session, lead, active_client):
    assert active_client.lead_id == lead.id

    await lead_service.delete_lead(db_session, lead.id)

    contact = await db_session.get(Contact, active_client.id, populate_existing=True)
    assert contact is not None
    assert contact.lead_id is None
