"""Client file metadata endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.schemas.client_file import ClientFileResponse
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.services import file_service

router = APIRouter(tags=["files"])


@router.get("/clients/{client_id}/files", response_model=Envelope[list[ClientFileResponse]])
async def list_files(client_id: int, db: AsyncSession = Depends(get_db)):
    files = await file_service.list_files(db, client_id)
    return ok([ClientFileResponse.model_validate(f) for f in files], count=len(files))


@router.delete("/files/{file_id}", response_model=MessageResponse)
async def delete_file(file_id: int, db: AsyncSession = Depends(get_db)):
    await file_service.delete_file(db, file_id)
    return {"success": True, "message": "File deleted successfully"}
