"""Client project file metadata.

Uploading and serving the bytes belongs to the storage layer; this module
keeps the metadata rows and removes the stored copy when a file is deleted.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import NotFoundError
from crm.models.client_file import ClientFile
from crm.services.client_service import get_active_client_row

logger = logging.getLogger(__name__)


async def list_files(db: AsyncSession, client_id: int) -> list[ClientFile]:
    result = await db.execute(
        select(ClientFile)
        .where(ClientFile.client_id == client_id)
        .order_by(ClientFile.created_at.desc(), ClientFile.id.desc())
    )
    return list(result.scalars().all())


async def get_file(db: AsyncSession, file_id: int) -> ClientFile:
    client_file = await db.get(ClientFile, file_id, populate_existing=True)
    if client_file is None:
        raise NotFoundError("File not found")
    return client_file


async def record_file(
    db: AsyncSession,
    client_id: int,
    original_name: str,
    file_path: str,
    file_size: int,
    mime_type: Optional[str] = None,
    uploaded_by: Optional[str] = None,
) -> ClientFile:
    """Register a file the storage layer has already written"""
    await get_active_client_row(db, client_id)
    client_file = ClientFile(
        client_id=client_id,
        file_name=os.path.basename(file_path),
        original_name=original_name,
        file_path=file_path,
        file_size=file_size,
        mime_type=mime_type,
        uploaded_by=uploaded_by,
    )
    db.add(client_file)
    await db.commit()
    logger.info(f"File recorded: id={client_file.id}, client_id={client_id}, size={file_size}")
    return client_file


async def delete_file(db: AsyncSession, file_id: int) -> None:
    """
    Delete the metadata row and the stored copy.

    A stored copy that cannot be removed is logged; the row is deleted anyway.
    """
    client_file = await get_file(db, file_id)
    file_path = client_file.file_path

    try:
        if os.path.exists(file_path):
            os.unlink(file_path)
    except OSError as e:
        logger.warning(f"Failed to remove stored file {file_path}: {e}")

    await db.delete(client_file)
    await db.commit()
    logger.info(f"File deleted: id={file_id}")
