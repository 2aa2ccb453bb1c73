"""Clients API endpoints - conversion, updates and the trash"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.contact import ClientCreate, ClientResponse, ClientUpdate
from crm.services import client_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=Envelope[list[ClientResponse]])
async def list_clients(db: AsyncSession = Depends(get_db)):
    clients = await client_service.list_clients(db)
    return ok(clients, count=len(clients))


@router.get("/trash", response_model=Envelope[list[ClientResponse]])
async def list_trash(db: AsyncSession = Depends(get_db)):
    clients = await client_service.list_trashed_clients(db)
    return ok(clients, count=len(clients))


@router.post("", response_model=Envelope[ClientResponse], status_code=status.HTTP_201_CREATED)
async def create_client(body: ClientCreate, db: AsyncSession = Depends(get_db)):
    """Create a client (optionally converted from a lead); assigns the next CLT- number"""
    client = await client_service.create_client(db, body)
    return ok(client, message="Client created successfully")


@router.get("/{client_id}", response_model=Envelope[ClientResponse])
async def get_client(client_id: int, db: AsyncSession = Depends(get_db)):
    return ok(await client_service.get_client(db, client_id))


@router.patch("/{client_id}", response_model=Envelope[ClientResponse])
async def update_client(client_id: int, body: ClientUpdate, db: AsyncSession = Depends(get_db)):
    client = await client_service.update_client(db, client_id, body)
    return ok(client, message="Client updated successfully")


@router.delete("/{client_id}", response_model=MessageResponse)
async def trash_client(client_id: int, db: AsyncSession = Depends(get_db)):
    await client_service.trash_client(db, client_id)
    return {"success": True, "message": "Client moved to trash"}


@router.post("/{client_id}/restore", response_model=MessageResponse)
async def restore_client(client_id: int, db: AsyncSession = Depends(get_db)):
    await client_service.restore_client(db, client_id)
    return {"success": True, "message": "Client restored successfully"}


@router.delete("/{client_id}/permanent", response_model=MessageResponse)
async def purge_client(client_id: int, db: AsyncSession = Depends(get_db)):
    await client_service.purge_client(db, client_id)
    return {"success": True, "message": "Client permanently deleted"}
