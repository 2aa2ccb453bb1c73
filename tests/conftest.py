"""
Pytest configuration and fixtures for the CRM API tests.
"""
import os
from typing import AsyncGenerator

# Ensure settings can be initialized before any crm module is imported.
os.environ.setdefault("ENCRYPTION_KEY", "dGVzdC1rZXktZm9yLXB5dGVzdC0xMjM0NTY3ODkwMTI=")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_crm.db")
os.environ.setdefault("ENVIRONMENT", "test")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from crm.config import get_settings
from crm.database import Database
from crm.main import create_app
from crm.schemas.contact import ClientCreate, ContactCreate
from crm.schemas.lead import LeadCreate
from crm.services import client_service, lead_service


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """
    File-backed SQLite database per test.

    A file (not :memory:) so every pooled connection sees the same schema.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'crm_test.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def app(database: Database):
    return create_app(settings=get_settings(), database=database)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def user_headers() -> dict:
    return {"x-user-email": "alice@example.com"}


@pytest_asyncio.fixture
async def lead(db_session: AsyncSession):
    """A lead with contact, created through the service"""
    return await lead_service.create_lead(
        db_session,
        LeadCreate(
            contact=ContactCreate(name="Jane Doe", email="jane@acme.io", phone="555-0100", company="Acme"),
            source="website",
        ),
        created_by_email="alice@example.com",
    )


@pytest_asyncio.fixture
async def active_client(db_session: AsyncSession, lead):
    return await client_service.create_client(
        db_session,
        ClientCreate(name="Acme Corp", email="ops@acme.io", company="Acme", lead_id=lead.id),
    )
