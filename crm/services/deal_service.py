"""Deal service: lead-to-deal conversion and pipeline stage moves."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import NotFoundError, ValidationError
from crm.models.contact import Contact
from crm.models.deal import DEAL_STAGES, Deal
from crm.models.lead import Lead
from crm.schemas.deal import DealCreate, DealPipelineResponse, DealResponse
from crm.services.patching import apply_patch

logger = logging.getLogger(__name__)


def default_deal_title(title: Optional[str], company: Optional[str], lead_id: int) -> str:
    """Explicit title, else the contact's company, else 'Deal for Lead #<id>'"""
    for candidate in (title, company):
        if candidate and candidate.strip():
            return candidate.strip()
    return f"Deal for Lead #{lead_id}"


def normalize_stage(stage: Optional[str]) -> str:
    value = (stage or "").strip().lower()
    if value not in DEAL_STAGES:
        raise ValidationError.for_field(
            "stage", f"Invalid stage. Must be one of: {', '.join(DEAL_STAGES)}"
        )
    return value


async def create_deal_from_lead(db: AsyncSession, data: DealCreate) -> Deal:
    """
    Create a deal for an existing lead.

    The deal always starts at stage 'new', whatever stage the lead is in.

    Raises:
        NotFoundError: the lead does not exist
    """
    result = await db.execute(
        select(Lead.id, Contact.company)
        .outerjoin(Contact, Contact.id == Lead.contact_id)
        .where(Lead.id == data.lead_id)
    )
    row = result.first()
    if row is None:
        raise NotFoundError(f"Lead with id {data.lead_id} does not exist")

    deal = Deal(
        lead_id=data.lead_id,
        title=default_deal_title(data.title, row.company, data.lead_id),
        deal_value=data.deal_value,
        stage="new",
        notes=data.notes,
    )
    db.add(deal)
    await db.commit()
    await db.refresh(deal)

    logger.info(f"Deal created: id={deal.id}, lead_id={deal.lead_id}, title={deal.title}")
    return deal


async def list_deals_by_stage(db: AsyncSession) -> DealPipelineResponse:
    """All deals grouped by stage, newest first; the display title prefers the contact's company"""
    result = await db.execute(
        select(Deal, Lead.name, Contact.name, Contact.company)
        .join(Lead, Lead.id == Deal.lead_id)
        .outerjoin(Contact, Contact.id == Lead.contact_id)
        .order_by(Deal.created_at.desc())
    )

    grouped: dict[str, list[DealResponse]] = {stage: [] for stage in DEAL_STAGES}
    for deal, lead_name, contact_name, company in result.all():
        item = DealResponse.model_validate(deal).model_copy(update={
            "title": company or deal.title,
            "lead_name": lead_name,
            "contact_name": contact_name,
            "company": company,
        })
        grouped.setdefault(deal.stage, []).append(item)

    return DealPipelineResponse(**{stage: grouped[stage] for stage in DEAL_STAGES})


async def move_deal_to_stage(db: AsyncSession, deal_id: str, stage: str) -> Deal:
    """
    Move a deal to another pipeline stage (case-insensitive).

    The stage is validated before anything is written, so an invalid stage
    leaves the stored row untouched.

    Raises:
        ValidationError: unknown stage
        NotFoundError: no deal with this id
    """
    target = normalize_stage(stage)

    matched = await apply_patch(db, Deal, deal_id, {"stage": target})
    if not matched:
        await db.rollback()
        raise NotFoundError(f"Deal with id {deal_id} not found")
    await db.commit()

    deal = await db.get(Deal, deal_id, populate_existing=True)
    logger.info(f"Deal moved: id={deal_id}, stage={target}")
    return deal


async def delete_deal(db: AsyncSession, deal_id: str) -> bool:
    result = await db.execute(delete(Deal).where(Deal.id == deal_id))
    await db.commit()
    return bool(result.rowcount)
