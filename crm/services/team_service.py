"""Team members, optionally kept in sync with Supabase Auth"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import ConflictError, NotFoundError
from crm.models.user import User
from crm.schemas.team import TeamMemberCreate, TeamMemberUpdate
from crm.services.patching import apply_patch, patch_values
from crm.services.supabase_auth import SupabaseAdminClient

logger = logging.getLogger(__name__)


def _auth_profile(auth_user: dict[str, Any]) -> Optional[tuple[str, str, str]]:
    """(email, name, role) from an auth user; name falls back to the email local part"""
    email = (auth_user.get("email") or "").strip().lower()
    if not email:
        return None
    metadata = auth_user.get("user_metadata") or {}
    name = metadata.get("name") or metadata.get("full_name") or email.split("@")[0]
    role = metadata.get("role") or "user"
    return email, name, role


async def sync_from_auth(db: AsyncSession, auth_client: SupabaseAdminClient) -> int:
    """
    Insert auth users missing locally and update changed names/roles.

    Returns the number of rows inserted or updated.
    """
    auth_users = await auth_client.list_users()
    result = await db.execute(select(User))
    local = {user.email.lower(): user for user in result.scalars().all()}

    changed = 0
    for auth_user in auth_users:
        profile = _auth_profile(auth_user)
        if profile is None:
            continue
        email, name, role = profile
        user = local.get(email)
        if user is None:
            user = User(email=email, name=name, role=role, is_active=True)
            db.add(user)
            local[email] = user
            changed += 1
        elif user.name != name or user.role != role:
            user.name = name
            user.role = role
            changed += 1

    await db.commit()
    if changed:
        logger.info(f"Team sync: {changed} member(s) inserted or updated from Supabase Auth")
    return changed


async def list_members(db: AsyncSession, auth_client: Optional[SupabaseAdminClient] = None) -> list[User]:
    """Team members ordered by name; a failed auth sync is logged and the local list returned"""
    if auth_client is not None:
        try:
            await sync_from_auth(db, auth_client)
        except (httpx.HTTPError, IntegrityError, ValueError) as e:
            await db.rollback()
            logger.warning(f"Team sync with Supabase Auth failed, serving local list: {e}", exc_info=True)

    result = await db.execute(select(User).order_by(User.name.asc(), User.id.asc()))
    return list(result.scalars().all())


async def get_member(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id, populate_existing=True)
    if user is None:
        raise NotFoundError("Team member not found")
    return user


async def create_member(db: AsyncSession, data: TeamMemberCreate) -> User:
    user = User(email=data.email, name=data.name, role=data.role, is_active=data.is_active)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("A team member with this email already exists")
    logger.info(f"Team member created: id={user.id}, email={user.email}, role={user.role}")
    return user


async def update_member(db: AsyncSession, user_id: int, patch: TeamMemberUpdate) -> User:
    await get_member(db, user_id)
    values = patch_values(patch, model=User)
    if values:
        await apply_patch(db, User, user_id, values)
        await db.commit()
    return await get_member(db, user_id)


async def delete_member(db: AsyncSession, user_id: int) -> None:
    result = await db.execute(delete(User).where(User.id == user_id))
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError("Team member not found")
    await db.commit()
