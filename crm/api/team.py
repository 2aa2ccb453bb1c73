"""Team members endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.config import Settings
from crm.database import get_db
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.team import TeamMemberCreate, TeamMemberResponse, TeamMemberUpdate
from crm.services import team_service
from crm.services.supabase_auth import SupabaseAdminClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/team", tags=["team"])


def get_auth_client(request: Request) -> Optional[SupabaseAdminClient]:
    """Supabase admin client when configured (overridable in tests)"""
    settings: Settings = request.app.state.settings
    if not settings.supabase_enabled:
        return None
    return SupabaseAdminClient(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_ROLE_KEY,
        timeout=settings.SUPABASE_TIMEOUT,
    )


@router.get("", response_model=Envelope[list[TeamMemberResponse]])
async def list_members(
    db: AsyncSession = Depends(get_db),
    auth_client: Optional[SupabaseAdminClient] = Depends(get_auth_client),
):
    members = await team_service.list_members(db, auth_client)
    return ok([TeamMemberResponse.model_validate(m) for m in members], count=len(members))


@router.get("/{user_id}", response_model=Envelope[TeamMemberResponse])
async def get_member(user_id: int, db: AsyncSession = Depends(get_db)):
    return ok(TeamMemberResponse.model_validate(await team_service.get_member(db, user_id)))


@router.post("", response_model=Envelope[TeamMemberResponse], status_code=status.HTTP_201_CREATED)
async def create_member(body: TeamMemberCreate, db: AsyncSession = Depends(get_db)):
    member = await team_service.create_member(db, body)
    return ok(TeamMemberResponse.model_validate(member), message="Team member created successfully")


@router.patch("/{user_id}", response_model=Envelope[TeamMemberResponse])
async def update_member(user_id: int, body: TeamMemberUpdate, db: AsyncSession = Depends(get_db)):
    member = await team_service.update_member(db, user_id, body)
    return ok(TeamMemberResponse.model_validate(member), message="Team member updated successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_member(user_id: int, db: AsyncSession = Depends(get_db)):
    await team_service.delete_member(db, user_id)
    return {"success": True, "message": "Team member deleted successfully"}
