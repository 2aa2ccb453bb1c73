"""Project credentials endpoints"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.credential import CredentialCreate, CredentialResponse, CredentialUpdate
from crm.services import credential_service

router = APIRouter(tags=["credentials"])


@router.get("/clients/{client_id}/credentials", response_model=Envelope[list[CredentialResponse]])
async def list_credentials(client_id: int, db: AsyncSession = Depends(get_db)):
    credentials = await credential_service.list_credentials(db, client_id)
    return ok(credentials, count=len(credentials))


@router.post(
    "/clients/{client_id}/credentials",
    response_model=Envelope[CredentialResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_credential(client_id: int, body: CredentialCreate, db: AsyncSession = Depends(get_db)):
    credential = await credential_service.create_credential(db, client_id, body)
    return ok(credential, message="Credential created successfully")


@router.get("/credentials/{credential_id}", response_model=Envelope[CredentialResponse])
async def get_credential(credential_id: int, db: AsyncSession = Depends(get_db)):
    return ok(await credential_service.get_credential(db, credential_id))


@router.patch("/credentials/{credential_id}", response_model=Envelope[CredentialResponse])
async def update_credential(credential_id: int, body: CredentialUpdate, db: AsyncSession = Depends(get_db)):
    credential = await credential_service.update_credential(db, credential_id, body)
    return ok(credential, message="Credential updated successfully")


@router.delete("/credentials/{credential_id}", response_model=MessageResponse)
async def delete_credential(credential_id: int, db: AsyncSession = Depends(get_db)):
    await credential_service.delete_credential(db, credential_id)
    return {"success": True, "message": "Credential deleted successfully"}
