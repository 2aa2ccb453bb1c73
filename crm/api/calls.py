"""Cold calls API endpoints"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.timeline import ColdCallResponse, ColdCallUpdate, StandaloneColdCallCreate
from crm.services import call_service

router = APIRouter(prefix="/calls", tags=["calls"])


@router.get("", response_model=Envelope[list[ColdCallResponse]])
async def list_calls(db: AsyncSession = Depends(get_db)):
    calls = await call_service.list_calls(db)
    return ok(calls, count=len(calls))


@router.get("/{call_id}", response_model=Envelope[ColdCallResponse])
async def get_call(call_id: int, db: AsyncSession = Depends(get_db)):
    return ok(await call_service.get_call(db, call_id))


@router.post("", response_model=Envelope[ColdCallResponse], status_code=status.HTTP_201_CREATED)
async def create_call(body: StandaloneColdCallCreate, db: AsyncSession = Depends(get_db)):
    return ok(await call_service.create_call(db, body), message="Call created successfully")


@router.patch("/{call_id}", response_model=Envelope[ColdCallResponse])
async def update_call(call_id: int, body: ColdCallUpdate, db: AsyncSession = Depends(get_db)):
    return ok(await call_service.update_call(db, call_id, body), message="Call updated successfully")


@router.delete("/{call_id}", response_model=MessageResponse)
async def delete_call(call_id: int, db: AsyncSession = Depends(get_db)):
    await call_service.delete_call(db, call_id)
    return {"success": True, "message": "Call deleted successfully"}
