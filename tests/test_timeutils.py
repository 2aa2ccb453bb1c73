"""Tests for UTC timestamp handling and partial updates."""

import time
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import BaseModel

from crm.schemas.contact import ClientUpdate
from crm.schemas.lead import LeadResponse
from crm.services.patching import patch_values
from crm.timeutils import UTCDateTime, as_utc, isoformat_utc, to_naive_utc, utcnow


class _Stamped(BaseModel):
    at: UTCDateTime


def test_isoformat_utc_uses_z_suffix_and_millis():
    assert isoformat_utc(datetime(2024, 1, 15, 10, 0, 0, 123456)) == "2024-01-15T10:00:00.123Z"
    assert isoformat_utc(None) is None


def test_aware_values_are_converted_not_relabelled():
    ist = timezone(timedelta(hours=5, minutes=30))
    local = datetime(2024, 1, 15, 15, 30, tzinfo=ist)
    assert isoformat_utc(local) == "2024-01-15T10:00:00.000Z"
    assert to_naive_utc(local) == datetime(2024, 1, 15, 10, 0)


def test_naive_values_are_read_as_utc():
    naive = datetime(2024, 6, 1, 8, 0)
    assert as_utc(naive) == datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)
    assert _Stamped(at=naive).model_dump(mode="json") == {"at": "2024-06-01T08:00:00.000Z"}


def test_utcnow_is_naive_utc():
    now = utcnow()
    assert now.tzinfo is None
    assert abs(as_utc(now) - datetime.now(timezone.utc)) < timedelta(seconds=5)


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="time.tzset is not available")
@pytest.mark.asyncio
async def test_created_at_is_utc_whatever_the_process_zone(db_session, monkeypatch):
    from crm.schemas.contact import ContactCreate
    from crm.schemas.lead import LeadCreate
    from crm.services import lead_service

    monkeypatch.setenv("TZ", "Asia/Kolkata")
    time.tzset()
    try:
        before = datetime.now(timezone.utc)
        lead = await lead_service.create_lead(db_session, LeadCreate(contact=ContactCreate(name="Zone Test")))
        reloaded = await lead_service.get_lead(db_session, lead.id)
        after = datetime.now(timezone.utc)
    finally:
        monkeypatch.undo()
        time.tzset()

    body = LeadResponse.model_validate(reloaded).model_dump(mode="json")
    assert body["created_at"].endswith("Z")
    created = datetime.fromisoformat(body["created_at"].replace("Z", "+00:00"))
    assert before - timedelta(seconds=1) <= created <= after + timedelta(seconds=1)


def test_patch_values_only_includes_sent_fields():
    patch = ClientUpdate.model_validate({"phone": "555", "company": None})
    assert patch_values(patch) == {"phone": "555", "company": None}


def test_patch_values_renames_and_excludes():
    patch = ClientUpdate.model_validate({"name": "New", "email": "a@b.co"})
    assert patch_values(patch, renames={"name": "display_name"}, exclude=("email",)) == {"display_name": "New"}


def test_patch_values_normalizes_datetimes():
    class _Patch(BaseModel):
        due: datetime | None = None

    ist = timezone(timedelta(hours=5, minutes=30))
    values = patch_values(_Patch(due=datetime(2024, 1, 1, 5, 30, tzinfo=ist)))
    assert values == {"due": datetime(2024, 1, 1, 0, 0)}
