"""Tests for client project file metadata."""

import pytest

from crm.exceptions import ConflictError, NotFoundError
from crm.services import client_service, file_service


@pytest.mark.asyncio
async def test_files_listed_newest_first(db_session, active_client, tmp_path):
    first = await file_service.record_file(
        db_session, active_client.id, "brief.pdf", str(tmp_path / "a1.pdf"), 1024, "application/pdf", "alice@example.com"
    )
    second = await file_service.record_file(db_session, active_client.id, "logo.png", str(tmp_path / "b2.png"), 2048)
    first_id, second_id = first.id, second.id

    files = await file_service.list_files(db_session, active_client.id)
    assert [f.id for f in files] == [second_id, first_id]
    assert files[1].file_name == "a1.pdf"
    assert files[1].uploaded_by == "alice@example.com"

    assert await file_service.list_files(db_session, 98765) == []


@pytest.mark.asyncio
async def test_recording_needs_an_active_client(db_session, active_client, tmp_path):
    await client_service.trash_client(db_session, active_client.id)
    with pytest.raises(NotFoundError):
        await file_service.record_file(db_session, active_client.id, "x.txt", str(tmp_path / "x.txt"), 1)


@pytest.mark.asyncio
async def test_delete_removes_row_and_stored_copy(db_session, active_client, tmp_path):
    stored = tmp_path / "c3.txt"
    stored.write_text("contract")
    recorded = await file_service.record_file(db_session, active_client.id, "contract.txt", str(stored), 8)
    file_id = recorded.id

    await file_service.delete_file(db_session, file_id)

    assert not stored.exists()
    with pytest.raises(NotFoundError):
        await file_service.get_file(db_session, file_id)
    with pytest.raises(NotFoundError):
        await file_service.delete_file(db_session, file_id)


@pytest.mark.asyncio
async def test_delete_with_missing_stored_copy(db_session, active_client, tmp_path):
    recorded = await file_service.record_file(
        db_session, active_client.id, "gone.txt", str(tmp_path / "never-written.txt"), 4
    )
    file_id = recorded.id

    await file_service.delete_file(db_session, file_id)
    assert await file_service.list_files(db_session, active_client.id) == []


@pytest.mark.asyncio
async def test_purge_refuses_client_with_files(db_session, active_client, tmp_path):
    await file_service.record_file(db_session, active_client.id, "brief.pdf", str(tmp_path / "d4.pdf"), 10)
    await client_service.trash_client(db_session, active_client.id)

    with pytest.raises(ConflictError):
        await client_service.purge_client(db_session, active_client.id)


@pytest.mark.asyncio
async def test_file_endpoints(client, db_session, active_client, tmp_path):
    client_id = active_client.id
    recorded = await file_service.record_file(
        db_session, client_id, "brief.pdf", str(tmp_path / "e5.pdf"), 1024, "application/pdf"
    )
    file_id = recorded.id

    listed = await client.get(f"/api/clients/{client_id}/files")
    assert listed.status_code == 200
    body = listed.json()
    assert body["count"] == 1
    assert body["data"][0]["original_name"] == "brief.pdf"
    assert body["data"][0]["mime_type"] == "application/pdf"
    assert "file_path" not in body["data"][0]
    assert body["data"][0]["created_at"].endswith("Z")

    deleted = await client.delete(f"/api/files/{file_id}")
    assert deleted.json() == {"success": True, "message": "File deleted successfully"}
    assert (await client.delete(f"/api/files/{file_id}")).status_code == 404
