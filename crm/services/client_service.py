"""Client service: lead-to-client conversion, client numbers, trash/restore/purge."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import and_, case, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import ConflictError, NotFoundError
from crm.models.contact import Contact
from crm.models.deal import Deal
from crm.models.lead import Lead
from crm.schemas.contact import ClientCreate, ClientResponse, ClientUpdate
from crm.services.patching import apply_patch, patch_values
from crm.timeutils import utcnow

logger = logging.getLogger(__name__)

CLIENT_NUMBER_PREFIX = "CLT-"
CLIENT_NUMBER_DIGITS = 6


def format_client_number(n: int) -> str:
    return f"{CLIENT_NUMBER_PREFIX}{n:0{CLIENT_NUMBER_DIGITS}d}"


def next_client_number(current: Optional[str]) -> str:
    """Increment the numeric suffix of the highest existing number (CLT-000001 when none)"""
    if not current:
        return format_client_number(1)
    try:
        last = int(current[len(CLIENT_NUMBER_PREFIX):])
    except ValueError:
        last = 0
    return format_client_number(last + 1)


async def generate_client_number(db: AsyncSession) -> str:
    """
    Next sequential client number.

    Reads the current maximum and increments it. There is no lock or sequence
    behind this, so two concurrent conversions can compute the same number;
    the unique constraint on client_number rejects the second insert.
    """
    current = await db.scalar(
        select(Contact.client_number)
        .where(Contact.client_number.like(f"{CLIENT_NUMBER_PREFIX}%"))
        .order_by(Contact.client_number.desc())
        .limit(1)
    )
    return next_client_number(current)


def _client_query():
    """Contacts with lead_count and closed deal_count"""
    lead_count = func.count(func.distinct(Lead.id)).label("lead_count")
    deal_count = func.count(
        func.distinct(case((Deal.stage == "closed", Deal.id)))
    ).label("deal_count")
    return (
        select(Contact, lead_count, deal_count)
        .outerjoin(Lead, Lead.contact_id == Contact.id)
        .outerjoin(Deal, Deal.lead_id == Lead.id)
        .group_by(Contact.id)
        .execution_options(populate_existing=True)
    )


def _client_response(row) -> ClientResponse:
    contact, lead_count, deal_count = row
    response = ClientResponse.model_validate(contact)
    return response.model_copy(update={"lead_count": lead_count or 0, "deal_count": deal_count or 0})


def _active():
    return and_(Contact.is_client.is_(True), Contact.deleted_at.is_(None))


def _trashed():
    return and_(Contact.is_client.is_(True), Contact.deleted_at.is_not(None))


async def list_clients(db: AsyncSession) -> list[ClientResponse]:
    result = await db.execute(
        _client_query().where(_active()).order_by(Contact.created_at.desc(), Contact.id.desc())
    )
    return [_client_response(row) for row in result.all()]


async def list_trashed_clients(db: AsyncSession) -> list[ClientResponse]:
    result = await db.execute(
        _client_query().where(_trashed()).order_by(Contact.deleted_at.desc(), Contact.id.desc())
    )
    return [_client_response(row) for row in result.all()]


async def get_client(db: AsyncSession, client_id: int) -> ClientResponse:
    """Active client by id (trashed clients are not returned)"""
    result = await db.execute(_client_query().where(Contact.id == client_id, _active()))
    row = result.first()
    if row is None:
        raise NotFoundError("Client not found")
    return _client_response(row)


async def create_client(db: AsyncSession, data: ClientCreate) -> ClientResponse:
    """
    Convert to / create a client.

    Args:
        db: Database session
        data: Client details; lead_id records the originating lead (may be None)

    Returns:
        The new client with its assigned client number
    """
    if data.lead_id is not None:
        exists = await db.scalar(select(Lead.id).where(Lead.id == data.lead_id))
        if exists is None:
            raise NotFoundError("Lead not found")

    client_number = await generate_client_number(db)
    contact = Contact(
        name=data.name,
        email=data.email,
        phone=data.phone,
        company=data.company,
        is_client=True,
        client_number=client_number,
        lead_id=data.lead_id,
    )
    db.add(contact)
    await db.commit()

    logger.info(f"Client created: id={contact.id}, client_number={client_number}, lead_id={data.lead_id}")
    return await get_client(db, contact.id)


async def update_client(db: AsyncSession, client_id: int, patch: ClientUpdate) -> ClientResponse:
    await get_client(db, client_id)
    values = patch_values(patch, model=Contact)
    if values:
        await apply_patch(db, Contact, client_id, values)
        await db.commit()
    return await get_client(db, client_id)


async def _load_client_state(db: AsyncSession, client_id: int) -> Contact:
    contact = await db.get(Contact, client_id, populate_existing=True)
    if contact is None or not contact.is_client:
        raise NotFoundError("Client not found")
    return contact


async def trash_client(db: AsyncSession, client_id: int) -> None:
    """active -> trashed"""
    contact = await _load_client_state(db, client_id)
    if contact.deleted_at is not None:
        raise ConflictError("Client is already in trash")
    now = utcnow()
    await apply_patch(db, Contact, client_id, {"deleted_at": now, "updated_at": now},
                      where=(Contact.deleted_at.is_(None),))
    await db.commit()
    await db.refresh(contact)
    logger.info(f"Client moved to trash: id={client_id}")


async def restore_client(db: AsyncSession, client_id: int) -> None:
    """trashed -> active"""
    contact = await _load_client_state(db, client_id)
    if contact.deleted_at is None:
        raise ConflictError("Client is not in trash")
    await apply_patch(db, Contact, client_id, {"deleted_at": None},
                      where=(Contact.deleted_at.is_not(None),))
    await db.commit()
    await db.refresh(contact)
    logger.info(f"Client restored: id={client_id}")


async def purge_client(db: AsyncSession, client_id: int) -> None:
    """trashed -> removed for good"""
    contact = await _load_client_state(db, client_id)
    if contact.deleted_at is None:
        raise ConflictError("Only clients in trash can be permanently deleted")
    try:
        await db.execute(
            delete(Contact).where(
                Contact.id == client_id,
                Contact.is_client.is_(True),
                Contact.deleted_at.is_not(None),
            )
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Client {client_id} is still referenced, not deleted: {e.orig}")
        raise ConflictError("Client is still referenced by leads, tasks, credentials or files")
    logger.info(f"Client permanently deleted: id={client_id}")


async def get_active_client_row(db: AsyncSession, client_id: int) -> Contact:
    """Active client ORM row, used by task and credential services"""
    contact = await db.get(Contact, client_id, populate_existing=True)
    if contact is None or not contact.is_client or contact.deleted_at is not None:
        raise NotFoundError("Client not found")
    return contact
