"""Deals API endpoints - pipeline board"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.exceptions import NotFoundError, ValidationError
from crm.middleware.cache import cache_control
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.deal import DealCreate, DealPipelineResponse, DealResponse, DealStageUpdate
from crm.services import deal_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/deals", tags=["deals"])


@router.get("/pipeline", response_model=Envelope[DealPipelineResponse], dependencies=[Depends(cache_control("medium"))])
async def get_pipeline(db: AsyncSession = Depends(get_db)):
    return ok(await deal_service.list_deals_by_stage(db))


@router.post("", response_model=Envelope[DealResponse], status_code=status.HTTP_201_CREATED)
async def create_deal(body: DealCreate, db: AsyncSession = Depends(get_db)):
    """Create a deal from a lead (404 when the lead does not exist)"""
    deal = await deal_service.create_deal_from_lead(db, body)
    return ok(DealResponse.model_validate(deal), message="Deal created successfully")


@router.patch("/{deal_id}/stage", response_model=Envelope[DealResponse])
async def move_deal_stage(deal_id: str, body: DealStageUpdate, db: AsyncSession = Depends(get_db)):
    """Move a deal; an invalid stage or an unknown deal is a 400"""
    try:
        deal = await deal_service.move_deal_to_stage(db, deal_id, body.stage)
    except NotFoundError as e:
        raise ValidationError(e.message)
    return ok(DealResponse.model_validate(deal), message="Deal stage updated successfully")


@router.delete("/{deal_id}", response_model=MessageResponse)
async def delete_deal(deal_id: str, db: AsyncSession = Depends(get_db)):
    if not await deal_service.delete_deal(db, deal_id):
        raise NotFoundError("Deal not found")
    return {"success": True, "message": "Deal deleted successfully"}
