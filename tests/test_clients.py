"""Tests for client numbering and the trash state machine."""

import pytest
from sqlalchemy import select

from crm.exceptions import ConflictError, NotFoundError
from crm.models.contact import Contact
from crm.schemas.contact import ClientCreate, ClientUpdate
from crm.schemas.credential import CredentialCreate
from crm.services import client_service, credential_service


def test_next_client_number():
    assert client_service.next_client_number(None) == "CLT-000001"
    assert client_service.next_client_number("CLT-000041") == "CLT-000042"
    assert client_service.next_client_number("CLT-999999") == "CLT-1000000"
    assert client_service.next_client_number("CLT-garbage") == "CLT-000001"


@pytest.mark.asyncio
async def test_client_numbers_are_sequential(db_session):
    first = await client_service.create_client(db_session, ClientCreate(name="One"))
    second = await client_service.create_client(db_session, ClientCreate(name="Two"))
    third = await client_service.create_client(db_session, ClientCreate(name="Three"))

    assert [first.client_number, second.client_number, third.client_number] == [
        "CLT-000001",
        "CLT-000002",
        "CLT-000003",
    ]


@pytest.mark.asyncio
async def test_client_number_continues_from_highest(db_session):
    db_session.add(Contact(name="Imported", is_client=True, client_number="CLT-000120"))
    await db_session.commit()

    created = await client_service.create_client(db_session, ClientCreate(name="Next"))
    assert created.client_number == "CLT-000121"


@pytest.mark.asyncio
async def test_create_client_from_lead(db_session, lead):
    created = await client_service.create_client(
        db_session, ClientCreate(name="Acme Corp", company="Acme", lead_id=lead.id)
    )
    assert created.is_client is True
    assert created.lead_id == lead.id
    assert created.deleted_at is None


@pytest.mark.asyncio
async def test_create_client_unknown_lead(db_session):
    with pytest.raises(NotFoundError):
        await client_service.create_client(db_session, ClientCreate(name="Ghost", lead_id=999))


@pytest.mark.asyncio
async def test_update_client_only_touches_sent_fields(db_session, active_client):
    updated = await client_service.update_client(db_session, active_client.id, ClientUpdate(phone="555-0199"))
    assert updated.phone == "555-0199"
    assert updated.name == "Acme Corp"
    assert updated.email == "ops@acme.io"


@pytest.mark.asyncio
async def test_trash_restore_cycle(db_session, active_client):
    await client_service.trash_client(db_session, active_client.id)

    active = await client_service.list_clients(db_session)
    trashed = await client_service.list_trashed_clients(db_session)
    assert active_client.id not in [c.id for c in active]
    assert [c.id for c in trashed] == [active_client.id]
    assert trashed[0].deleted_at is not None

    with pytest.raises(NotFoundError):
        await client_service.get_client(db_session, active_client.id)

    await client_service.restore_client(db_session, active_client.id)
    restored = await client_service.get_client(db_session, active_client.id)
    assert restored.deleted_at is None
    assert await client_service.list_trashed_clients(db_session) == []

    await client_service.trash_client(db_session, active_client.id)
    assert [c.id for c in await client_service.list_trashed_clients(db_session)] == [active_client.id]


@pytest.mark.asyncio
async def test_invalid_transitions_are_rejected(db_session, active_client):
    with pytest.raises(ConflictError):
        await client_service.restore_client(db_session, active_client.id)
    with pytest.raises(ConflictError):
        await client_service.purge_client(db_session, active_client.id)

    await client_service.trash_client(db_session, active_client.id)
    with pytest.raises(ConflictError):
        await client_service.trash_client(db_session, active_client.id)

    with pytest.raises(NotFoundError):
        await client_service.trash_client(db_session, 98765)


@pytest.mark.asyncio
async def test_purge_removes_trashed_client(db_session, active_client):
    await client_service.trash_client(db_session, active_client.id)
    await client_service.purge_client(db_session, active_client.id)

    result = await db_session.execute(select(Contact).where(Contact.id == active_client.id))
    assert result.scalar_one_or_none() is None


@pytest.mark.asyncio
async def test_purge_refuses_referenced_client(db_session, active_client):
    await credential_service.create_credential(
        db_session, active_client.id, CredentialCreate(title="Hosting", password="s3cret")
    )
    await client_service.trash_client(db_session, active_client.id)

    with pytest.raises(ConflictError):
        await client_service.purge_client(db_session, active_client.id)

    trashed = await client_service.list_trashed_clients(db_session)
    assert [c.id for c in trashed] == [active_client.id]
