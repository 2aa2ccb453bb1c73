"""Lead service: transactional creation, detail/timeline reads, interaction logging, cascade delete."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from crm.exceptions import NotFoundError
from crm.models.activity import Activity, ColdCall, OnsiteVisit
from crm.models.contact import Contact
from crm.models.deal import Deal
from crm.models.lead import Lead
from crm.models.notification import Notification
from crm.models.task import Task
from crm.models.user import User
from crm.schemas.lead import LeadCreate, LeadDetailResponse, LeadResponse
from crm.schemas.timeline import (
    ActivityResponse,
    ColdCallResponse,
    LeadTimelineResponse,
    OnsiteVisitCreate,
    TimelineVisit,
)
from crm.timeutils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_LEAD_STAGE = "new"
DEFAULT_LEAD_STATUS = "new"


def _lead_response(lead: Lead, creator_name: Optional[str] = None) -> LeadResponse:
    response = LeadResponse.model_validate(lead)
    if creator_name:
        response = response.model_copy(update={"creator_name": creator_name})
    return response


async def create_lead(
    db: AsyncSession,
    data: LeadCreate,
    created_by_email: Optional[str] = None,
) -> LeadResponse:
    """
    Create a lead and its contact in one transaction.

    The contact is inserted first and the lead references it; the lead row
    carries a copy of the contact's name/email/phone. If either insert fails
    both are rolled back and the original error propagates.

    Args:
        db: Database session
        data: Validated lead payload (contact + lead fields)
        created_by_email: Email of the team member creating the lead

    Returns:
        The new lead joined with its contact
    """
    try:
        contact = Contact(
            name=data.contact.name,
            email=data.contact.email,
            phone=data.contact.phone,
            company=data.contact.company,
        )
        db.add(contact)
        await db.flush()

        lead = Lead(
            name=contact.name,
            email=contact.email,
            phone=contact.phone,
            contact=contact,
            source=data.source,
            stage=data.stage or DEFAULT_LEAD_STAGE,
            status=DEFAULT_LEAD_STATUS,
            verticals=data.verticals,
            notes=None,
            created_by_email=created_by_email,
        )
        db.add(lead)
        await db.flush()
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating lead, transaction rolled back: {e}", exc_info=True)
        raise

    logger.info(f"New lead created: id={lead.id}, contact_id={contact.id}, source={lead.source}")
    return _lead_response(lead)


async def list_leads(db: AsyncSession) -> list[LeadResponse]:
    """All leads with their contact and the creator's name, newest first"""
    result = await db.execute(
        select(Lead, User.name)
        .outerjoin(User, User.email == Lead.created_by_email)
        .options(selectinload(Lead.contact))
        .order_by(Lead.created_at.desc(), Lead.id.desc())
    )
    return [_lead_response(lead, creator_name) for lead, creator_name in result.all()]


async def get_lead(db: AsyncSession, lead_id: int) -> Lead:
    result = await db.execute(
        select(Lead).options(selectinload(Lead.contact)).where(Lead.id == lead_id)
    )
    lead = result.scalar_one_or_none()
    if lead is None:
        raise NotFoundError("Lead not found")
    return lead


async def _ensure_lead_exists(db: AsyncSession, lead_id: int) -> None:
    found = await db.scalar(select(Lead.id).where(Lead.id == lead_id))
    if found is None:
        raise NotFoundError("Lead not found")


async def get_lead_detail(db: AsyncSession, lead_id: int) -> LeadDetailResponse:
    """Lead + contact + creator name + activities (newest first)"""
    result = await db.execute(
        select(Lead, User.name)
        .outerjoin(User, User.email == Lead.created_by_email)
        .options(selectinload(Lead.contact))
        .where(Lead.id == lead_id)
    )
    row = result.first()
    if row is None:
        raise NotFoundError("Lead not found")
    lead, creator_name = row

    activities = await db.execute(
        select(Activity)
        .where(Activity.lead_id == lead_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
    )

    detail = LeadDetailResponse.model_validate(lead)
    return detail.model_copy(update={
        "creator_name": creator_name,
        "activities": [ActivityResponse.model_validate(a) for a in activities.scalars().all()],
    })


async def add_activity(
    db: AsyncSession,
    lead_id: int,
    activity_type: str,
    description: Optional[str] = None,
) -> Activity:
    await _ensure_lead_exists(db, lead_id)
    activity = Activity(
        lead_id=lead_id,
        contact_id=None,
        activity_type=activity_type,
        description=description,
        created_at=utcnow(),
    )
    db.add(activity)
    await db.commit()
    await db.refresh(activity)
    return activity


async def add_cold_call(
    db: AsyncSession,
    lead_id: int,
    outcome: str,
    notes: Optional[str] = None,
) -> ColdCall:
    await _ensure_lead_exists(db, lead_id)
    now = utcnow()
    call = ColdCall(lead_id=lead_id, call_date=now, outcome=outcome, notes=notes, created_at=now)
    db.add(call)
    await db.commit()
    await db.refresh(call)
    return call


async def add_onsite_visit(db: AsyncSession, lead_id: int, data: OnsiteVisitCreate) -> OnsiteVisit:
    """Log a visit; location is stored as address and outcome as status"""
    await _ensure_lead_exists(db, lead_id)
    now = utcnow()
    visit = OnsiteVisit(
        lead_id=lead_id,
        visit_date=now,
        address=data.location,
        status=data.outcome,
        notes=data.notes,
        in_time=data.in_time,
        out_time=data.out_time,
        rescheduled_date=data.rescheduled_date,
        created_at=now,
        updated_at=now,
    )
    db.add(visit)
    await db.commit()
    await db.refresh(visit)
    return visit


async def get_lead_timeline(db: AsyncSession, lead_id: int) -> LeadTimelineResponse:
    """
    Per-lead timeline.

    The three logs are fetched independently and each is ordered by
    created_at descending. They are returned as three arrays; merging them is
    left to the client.
    """
    await _ensure_lead_exists(db, lead_id)

    activities = await db.execute(
        select(Activity)
        .where(Activity.lead_id == lead_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
    )
    calls = await db.execute(
        select(ColdCall)
        .where(ColdCall.lead_id == lead_id)
        .order_by(ColdCall.created_at.desc(), ColdCall.id.desc())
    )
    visits = await db.execute(
        select(OnsiteVisit)
        .where(OnsiteVisit.lead_id == lead_id)
        .order_by(OnsiteVisit.created_at.desc(), OnsiteVisit.id.desc())
    )

    return LeadTimelineResponse(
        activities=[ActivityResponse.model_validate(a) for a in activities.scalars().all()],
        cold_calls=[ColdCallResponse.model_validate(c) for c in calls.scalars().all()],
        onsite_visits=[TimelineVisit.from_row(v) for v in visits.scalars().all()],
    )


async def delete_lead(db: AsyncSession, lead_id: int) -> bool:
    """
    Delete a lead and everything hanging off it in one transaction.

    Removes the lead's activities, cold calls, onsite visits, deals and tasks
    (with their notifications), clears back-references from contacts and
    notifications, then deletes the lead. The lead's own contact row is kept:
    it may have been promoted to a client.

    Returns:
        False if the lead does not exist, True once deleted
    """
    try:
        exists = await db.scalar(select(Lead.id).where(Lead.id == lead_id))
        if exists is None:
            await db.rollback()
            return False

        task_ids = select(Task.id).where(Task.lead_id == lead_id).scalar_subquery()

        await db.execute(delete(Activity).where(Activity.lead_id == lead_id))
        await db.execute(delete(ColdCall).where(ColdCall.lead_id == lead_id))
        await db.execute(delete(OnsiteVisit).where(OnsiteVisit.lead_id == lead_id))
        await db.execute(delete(Notification).where(Notification.related_task_id.in_(task_ids)))
        await db.execute(delete(Task).where(Task.lead_id == lead_id))
        await db.execute(delete(Deal).where(Deal.lead_id == lead_id))
        await db.execute(
            update(Notification)
            .where(Notification.related_lead_id == lead_id)
            .values(related_lead_id=None)
        )
        await db.execute(
            update(Contact).where(Contact.lead_id == lead_id).values(lead_id=None, updated_at=utcnow())
        )
        await db.execute(delete(Lead).where(Lead.id == lead_id))
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error deleting lead {lead_id}, transaction rolled back: {e}", exc_info=True)
        raise

    logger.info(f"Lead deleted: id={lead_id}")
    return True
