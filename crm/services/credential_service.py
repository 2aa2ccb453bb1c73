"""Project credentials per client; passwords are encrypted at rest"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import NotFoundError, ValidationError
from crm.models.project_credential import ProjectCredential
from crm.schemas.credential import CredentialCreate, CredentialResponse, CredentialUpdate
from crm.services.client_service import get_active_client_row
from crm.services.encryption import decrypt_password, encrypt_password
from crm.services.patching import apply_patch, patch_values

logger = logging.getLogger(__name__)


def _to_response(credential: ProjectCredential) -> CredentialResponse:
    return CredentialResponse(
        id=credential.id,
        client_id=credential.client_id,
        title=credential.title,
        url=credential.url,
        username=credential.username,
        password=decrypt_password(credential.encrypted_password),
        created_at=credential.created_at,
        updated_at=credential.updated_at,
    )


async def _get_row(db: AsyncSession, credential_id: int) -> ProjectCredential:
    credential = await db.get(ProjectCredential, credential_id, populate_existing=True)
    if credential is None:
        raise NotFoundError("Credential not found")
    return credential


async def list_credentials(db: AsyncSession, client_id: int) -> list[CredentialResponse]:
    result = await db.execute(
        select(ProjectCredential)
        .where(ProjectCredential.client_id == client_id)
        .order_by(ProjectCredential.created_at.desc(), ProjectCredential.id.desc())
    )
    return [_to_response(c) for c in result.scalars().all()]


async def get_credential(db: AsyncSession, credential_id: int) -> CredentialResponse:
    return _to_response(await _get_row(db, credential_id))


async def create_credential(db: AsyncSession, client_id: int, data: CredentialCreate) -> CredentialResponse:
    await get_active_client_row(db, client_id)
    credential = ProjectCredential(
        client_id=client_id,
        title=data.title,
        url=data.url,
        username=data.username,
        encrypted_password=encrypt_password(data.password),
    )
    db.add(credential)
    await db.commit()
    logger.info(f"Credential created: id={credential.id}, client_id={client_id}")
    return _to_response(credential)


async def update_credential(db: AsyncSession, credential_id: int, patch: CredentialUpdate) -> CredentialResponse:
    values = patch_values(patch, exclude=("password",), model=ProjectCredential)
    if patch.password is not None:
        values["encrypted_password"] = encrypt_password(patch.password)
    if not values:
        raise ValidationError("No fields to update")

    await _get_row(db, credential_id)
    await apply_patch(db, ProjectCredential, credential_id, values)
    await db.commit()
    return _to_response(await _get_row(db, credential_id))


async def delete_credential(db: AsyncSession, credential_id: int) -> None:
    result = await db.execute(delete(ProjectCredential).where(ProjectCredential.id == credential_id))
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError("Credential not found")
    await db.commit()
    logger.info(f"Credential deleted: id={credential_id}")
