"""Stand-alone activity CRUD (activities not created through a lead or a task)"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from crm.exceptions import NotFoundError, ValidationError
from crm.models.activity import Activity
from crm.models.contact import Contact
from crm.models.lead import Lead
from crm.schemas.timeline import ActivityResponse, ActivityUpdate, StandaloneActivityCreate
from crm.services.patching import apply_patch, patch_values
from crm.timeutils import utcnow

LeadContact = aliased(Contact)


def _enriched():
    """Activity with lead name/email/company and the directly linked contact's details"""
    return (
        select(
            Activity,
            Lead.name,
            Lead.email,
            LeadContact.company,
            Contact.name,
            Contact.email,
            Contact.company,
        )
        .outerjoin(Lead, Lead.id == Activity.lead_id)
        .outerjoin(LeadContact, LeadContact.id == Lead.contact_id)
        .outerjoin(Contact, Contact.id == Activity.contact_id)
        .execution_options(populate_existing=True)
    )


def _to_response(row) -> ActivityResponse:
    activity, lead_name, lead_email, lead_company, contact_name, contact_email, contact_company = row
    return ActivityResponse.model_validate(activity).model_copy(update={
        "lead_name": lead_name,
        "lead_email": lead_email,
        "lead_company": lead_company,
        "contact_name": contact_name,
        "contact_email": contact_email,
        "contact_company": contact_company,
    })


async def list_activities(db: AsyncSession, activity_type: str | None = None) -> list[ActivityResponse]:
    stmt = _enriched()
    if activity_type:
        stmt = stmt.where(Activity.activity_type == activity_type)
    result = await db.execute(stmt.order_by(Activity.created_at.desc(), Activity.id.desc()))
    return [_to_response(row) for row in result.all()]


async def get_activity(db: AsyncSession, activity_id: int) -> ActivityResponse:
    result = await db.execute(_enriched().where(Activity.id == activity_id))
    row = result.first()
    if row is None:
        raise NotFoundError("Activity not found")
    return _to_response(row)


async def _ensure_references(db: AsyncSession, lead_id: int | None, contact_id: int | None) -> None:
    if lead_id is not None and await db.scalar(select(Lead.id).where(Lead.id == lead_id)) is None:
        raise NotFoundError("Lead not found")
    if contact_id is not None and await db.scalar(select(Contact.id).where(Contact.id == contact_id)) is None:
        raise NotFoundError("Contact not found")


async def create_activity(db: AsyncSession, data: StandaloneActivityCreate) -> ActivityResponse:
    if data.lead_id is None and data.contact_id is None:
        raise ValidationError("Either leadId or contactId must be provided")
    await _ensure_references(db, data.lead_id, data.contact_id)
    activity = Activity(
        lead_id=data.lead_id,
        contact_id=data.contact_id,
        activity_type=data.activity_type,
        description=data.description,
        created_at=utcnow(),
    )
    db.add(activity)
    await db.commit()
    return await get_activity(db, activity.id)


async def update_activity(db: AsyncSession, activity_id: int, patch: ActivityUpdate) -> ActivityResponse:
    await get_activity(db, activity_id)
    values = patch_values(patch, model=Activity)
    await _ensure_references(db, values.get("lead_id"), values.get("contact_id"))
    if values:
        await apply_patch(db, Activity, activity_id, values)
        await db.commit()
    return await get_activity(db, activity_id)


async def delete_activity(db: AsyncSession, activity_id: int) -> None:
    result = await db.execute(delete(Activity).where(Activity.id == activity_id))
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError("Activity not found")
    await db.commit()
