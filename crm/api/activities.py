"""Activities API endpoints"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.timeline import ActivityResponse, ActivityUpdate, StandaloneActivityCreate
from crm.services import activity_service

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("", response_model=Envelope[list[ActivityResponse]])
async def list_activities(db: AsyncSession = Depends(get_db)):
    activities = await activity_service.list_activities(db)
    return ok(activities, count=len(activities))


@router.get("/type/{activity_type}", response_model=Envelope[list[ActivityResponse]])
async def list_activities_by_type(activity_type: str, db: AsyncSession = Depends(get_db)):
    activities = await activity_service.list_activities(db, activity_type=activity_type)
    return ok(activities, count=len(activities))


@router.get("/{activity_id}", response_model=Envelope[ActivityResponse])
async def get_activity(activity_id: int, db: AsyncSession = Depends(get_db)):
    return ok(await activity_service.get_activity(db, activity_id))


@router.post("", response_model=Envelope[ActivityResponse], status_code=status.HTTP_201_CREATED)
async def create_activity(body: StandaloneActivityCreate, db: AsyncSession = Depends(get_db)):
    return ok(await activity_service.create_activity(db, body), message="Activity created successfully")


@router.patch("/{activity_id}", response_model=Envelope[ActivityResponse])
async def update_activity(activity_id: int, body: ActivityUpdate, db: AsyncSession = Depends(get_db)):
    return ok(await activity_service.update_activity(db, activity_id, body), message="Activity updated successfully")


@router.delete("/{activity_id}", response_model=MessageResponse)
async def delete_activity(activity_id: int, db: AsyncSession = Depends(get_db)):
    await activity_service.delete_activity(db, activity_id)
    return {"success": True, "message": "Activity deleted successfully"}
