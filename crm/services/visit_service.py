"""Onsite visit CRUD"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import NotFoundError
from crm.models.activity import OnsiteVisit
from crm.models.contact import Contact
from crm.models.lead import Lead
from crm.schemas.timeline import OnsiteVisitResponse, StandaloneVisitCreate, VisitUpdate
from crm.services.patching import apply_patch, patch_values
from crm.timeutils import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_VISIT_STATUS = "scheduled"


def _enriched():
    return (
        select(OnsiteVisit, Lead.name, Lead.email, Contact.company)
        .outerjoin(Lead, Lead.id == OnsiteVisit.lead_id)
        .outerjoin(Contact, Contact.id == Lead.contact_id)
        .execution_options(populate_existing=True)
    )


def _to_response(row) -> OnsiteVisitResponse:
    visit, lead_name, lead_email, lead_company = row
    return OnsiteVisitResponse.model_validate(visit).model_copy(update={
        "lead_name": lead_name,
        "lead_email": lead_email,
        "lead_company": lead_company,
    })


async def list_visits(db: AsyncSession) -> list[OnsiteVisitResponse]:
    result = await db.execute(
        _enriched().order_by(OnsiteVisit.visit_date.desc(), OnsiteVisit.created_at.desc(), OnsiteVisit.id.desc())
    )
    return [_to_response(row) for row in result.all()]


async def get_visit(db: AsyncSession, visit_id: int) -> OnsiteVisitResponse:
    result = await db.execute(_enriched().where(OnsiteVisit.id == visit_id))
    row = result.first()
    if row is None:
        raise NotFoundError("Onsite visit not found")
    return _to_response(row)


async def _ensure_lead(db: AsyncSession, lead_id: int) -> None:
    if await db.scalar(select(Lead.id).where(Lead.id == lead_id)) is None:
        raise NotFoundError("Lead not found")


async def create_visit(db: AsyncSession, data: StandaloneVisitCreate) -> OnsiteVisitResponse:
    await _ensure_lead(db, data.lead_id)
    now = utcnow()
    visit = OnsiteVisit(
        lead_id=data.lead_id,
        visit_date=to_naive_utc(data.visit_date) or now,
        address=data.address,
        visit_type=data.visit_type,
        status=data.status or DEFAULT_VISIT_STATUS,
        notes=data.notes,
        in_time=data.in_time,
        out_time=data.out_time,
        rescheduled_date=data.rescheduled_date,
        created_at=now,
        updated_at=now,
    )
    db.add(visit)
    await db.commit()
    logger.info(f"Onsite visit logged: id={visit.id}, lead_id={visit.lead_id}, status={visit.status}")
    return await get_visit(db, visit.id)


async def update_visit(db: AsyncSession, visit_id: int, patch: VisitUpdate) -> OnsiteVisitResponse:
    await get_visit(db, visit_id)
    values = patch_values(patch, model=OnsiteVisit)
    if values.get("lead_id") is not None:
        await _ensure_lead(db, values["lead_id"])
    if values:
        await apply_patch(db, OnsiteVisit, visit_id, values)
        await db.commit()
    return await get_visit(db, visit_id)


async def delete_visit(db: AsyncSession, visit_id: int) -> None:
    result = await db.execute(delete(OnsiteVisit).where(OnsiteVisit.id == visit_id))
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError("Onsite visit not found")
    await db.commit()
