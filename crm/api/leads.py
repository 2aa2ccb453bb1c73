"""Leads API endpoints - creation, detail, timeline and interaction logging"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.exceptions import CRMError, InternalError, NotFoundError
from crm.middleware.cache import cache_control
from crm.middleware.identity import get_optional_user_email
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.lead import LeadCreate, LeadDetailResponse, LeadResponse
from crm.schemas.timeline import (
    ActivityCreate,
    ActivityResponse,
    ColdCallCreate,
    ColdCallResponse,
    LeadTimelineResponse,
    OnsiteVisitCreate,
    OnsiteVisitResponse,
)
from crm.services import lead_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/leads", tags=["leads"])


@router.get("", response_model=Envelope[list[LeadResponse]], dependencies=[Depends(cache_control("short"))])
async def list_leads(db: AsyncSession = Depends(get_db)):
    """All leads with their contact, newest first"""
    leads = await lead_service.list_leads(db)
    return ok(leads, count=len(leads))


@router.post("", response_model=Envelope[LeadResponse], status_code=status.HTTP_201_CREATED)
async def create_lead(
    lead_data: LeadCreate,
    db: AsyncSession = Depends(get_db),
    user_email: Optional[str] = Depends(get_optional_user_email),
):
    """
    Create a new lead.

    The contact is created in the same transaction; if either insert fails
    nothing is stored.
    """
    try:
        lead = await lead_service.create_lead(db, lead_data, created_by_email=user_email)
        return ok(lead, message="Lead created successfully")
    except CRMError:
        raise
    except Exception as e:
        logger.error(f"Error creating lead: {e}", exc_info=True)
        raise InternalError("Failed to create lead")


@router.get("/{lead_id}", response_model=Envelope[LeadDetailResponse])
async def get_lead(lead_id: int, db: AsyncSession = Depends(get_db)):
    return ok(await lead_service.get_lead_detail(db, lead_id))


@router.get("/{lead_id}/timeline", response_model=Envelope[LeadTimelineResponse])
async def get_lead_timeline(lead_id: int, db: AsyncSession = Depends(get_db)):
    """Activities, cold calls and onsite visits of a lead as three arrays"""
    return ok(await lead_service.get_lead_timeline(db, lead_id))


@router.post("/{lead_id}/activities", response_model=Envelope[ActivityResponse], status_code=status.HTTP_201_CREATED)
async def add_activity(lead_id: int, body: ActivityCreate, db: AsyncSession = Depends(get_db)):
    activity = await lead_service.add_activity(db, lead_id, body.activity_type, body.description)
    return ok(ActivityResponse.model_validate(activity), message="Activity added successfully")


@router.post("/{lead_id}/cold-calls", response_model=Envelope[ColdCallResponse], status_code=status.HTTP_201_CREATED)
async def add_cold_call(lead_id: int, body: ColdCallCreate, db: AsyncSession = Depends(get_db)):
    call = await lead_service.add_cold_call(db, lead_id, body.outcome, body.notes)
    return ok(ColdCallResponse.model_validate(call), message="Cold call added successfully")


@router.post("/{lead_id}/onsite-visits", response_model=Envelope[OnsiteVisitResponse], status_code=status.HTTP_201_CREATED)
async def add_onsite_visit(lead_id: int, body: OnsiteVisitCreate, db: AsyncSession = Depends(get_db)):
    visit = await lead_service.add_onsite_visit(db, lead_id, body)
    return ok(OnsiteVisitResponse.model_validate(visit), message="Onsite visit added successfully")


@router.delete("/{lead_id}", response_model=MessageResponse)
async def delete_lead(lead_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a lead together with its timeline, deals and tasks"""
    if not await lead_service.delete_lead(db, lead_id):
        raise NotFoundError("Lead not found")
    return {"success": True, "message": "Lead deleted successfully"}
