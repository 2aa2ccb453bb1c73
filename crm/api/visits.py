"""Onsite visits API endpoints"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.timeline import OnsiteVisitResponse, StandaloneVisitCreate, VisitUpdate
from crm.services import visit_service

router = APIRouter(prefix="/visits", tags=["visits"])


@router.get("", response_model=Envelope[list[OnsiteVisitResponse]])
async def list_visits(db: AsyncSession = Depends(get_db)):
    visits = await visit_service.list_visits(db)
    return ok(visits, count=len(visits))


@router.get("/{visit_id}", response_model=Envelope[OnsiteVisitResponse])
async def get_visit(visit_id: int, db: AsyncSession = Depends(get_db)):
    return ok(await visit_service.get_visit(db, visit_id))


@router.post("", response_model=Envelope[OnsiteVisitResponse], status_code=status.HTTP_201_CREATED)
async def create_visit(body: StandaloneVisitCreate, db: AsyncSession = Depends(get_db)):
    return ok(await visit_service.create_visit(db, body), message="Visit created successfully")


@router.patch("/{visit_id}", response_model=Envelope[OnsiteVisitResponse])
async def update_visit(visit_id: int, body: VisitUpdate, db: AsyncSession = Depends(get_db)):
    return ok(await visit_service.update_visit(db, visit_id, body), message="Visit updated successfully")


@router.delete("/{visit_id}", response_model=MessageResponse)
async def delete_visit(visit_id: int, db: AsyncSession = Depends(get_db)):
    await visit_service.delete_visit(db, visit_id)
    return {"success": True, "message": "Visit deleted successfully"}
