"""Cold call CRUD"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import NotFoundError
from crm.models.activity import ColdCall
from crm.models.contact import Contact
from crm.models.lead import Lead
from crm.schemas.timeline import ColdCallResponse, ColdCallUpdate, StandaloneColdCallCreate
from crm.services.patching import apply_patch, patch_values
from crm.timeutils import to_naive_utc, utcnow

logger = logging.getLogger(__name__)


def _enriched():
    return (
        select(ColdCall, Lead.name, Lead.email, Contact.company)
        .outerjoin(Lead, Lead.id == ColdCall.lead_id)
        .outerjoin(Contact, Contact.id == Lead.contact_id)
        .execution_options(populate_existing=True)
    )


def _to_response(row) -> ColdCallResponse:
    call, lead_name, lead_email, lead_company = row
    return ColdCallResponse.model_validate(call).model_copy(update={
        "lead_name": lead_name,
        "lead_email": lead_email,
        "lead_company": lead_company,
    })


async def list_calls(db: AsyncSession) -> list[ColdCallResponse]:
    result = await db.execute(
        _enriched().order_by(ColdCall.call_date.desc(), ColdCall.created_at.desc(), ColdCall.id.desc())
    )
    return [_to_response(row) for row in result.all()]


async def get_call(db: AsyncSession, call_id: int) -> ColdCallResponse:
    result = await db.execute(_enriched().where(ColdCall.id == call_id))
    row = result.first()
    if row is None:
        raise NotFoundError("Cold call not found")
    return _to_response(row)


async def _ensure_lead(db: AsyncSession, lead_id: int) -> None:
    if await db.scalar(select(Lead.id).where(Lead.id == lead_id)) is None:
        raise NotFoundError("Lead not found")


async def create_call(db: AsyncSession, data: StandaloneColdCallCreate) -> ColdCallResponse:
    await _ensure_lead(db, data.lead_id)
    now = utcnow()
    call = ColdCall(
        lead_id=data.lead_id,
        call_date=to_naive_utc(data.call_date) or now,
        duration=data.duration,
        outcome=data.outcome,
        notes=data.notes,
        created_at=now,
    )
    db.add(call)
    await db.commit()
    logger.info(f"Cold call logged: id={call.id}, lead_id={call.lead_id}, outcome={call.outcome}")
    return await get_call(db, call.id)


async def update_call(db: AsyncSession, call_id: int, patch: ColdCallUpdate) -> ColdCallResponse:
    await get_call(db, call_id)
    values = patch_values(patch, model=ColdCall)
    if values.get("lead_id") is not None:
        await _ensure_lead(db, values["lead_id"])
    if values:
        await apply_patch(db, ColdCall, call_id, values)
        await db.commit()
    return await get_call(db, call_id)


async def delete_call(db: AsyncSession, call_id: int) -> None:
    result = await db.execute(delete(ColdCall).where(ColdCall.id == call_id))
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError("Cold call not found")
    await db.commit()
