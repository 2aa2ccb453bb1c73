"""API tests: response envelopes, error mapping, identity and cache headers."""

import httpx
import pytest

from crm.api import team as team_api


async def _create_lead(client: httpx.AsyncClient, headers=None, name="Jane Doe") -> dict:
    response = await client.post(
        "/api/leads",
        json={"contact": {"name": name, "email": "jane@acme.io", "company": "Acme"}, "source": "website"},
        headers=headers or {},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_create_lead_envelope(client, user_headers):
    response = await client.post(
        "/api/leads",
        json={"contact": {"name": "Jane Doe", "email": "jane@acme.io"}},
        headers=user_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Lead created successfully"
    assert "count" not in body
    assert body["data"]["status"] == "new"
    assert body["data"]["created_by_email"] == "alice@example.com"
    assert body["data"]["created_at"].endswith("Z")


@pytest.mark.asyncio
async def test_list_leads_has_count_and_cache_header(client):
    await _create_lead(client)
    await _create_lead(client, name="John Roe")

    response = await client.get("/api/leads")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert "message" not in body
    assert response.headers["Cache-Control"] == "public, max-age=30, s-maxage=60"
    assert response.headers["Vary"] == "Accept-Encoding"


@pytest.mark.asyncio
async def test_validation_errors_are_field_level(client):
    response = await client.post("/api/leads", json={"contact": {"name": "Jane", "email": "not-an-email"}})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert body["errors"] == [{"field": "contact.email", "message": "Invalid email format"}]


@pytest.mark.asyncio
async def test_not_found_maps_to_404(client):
    response = await client.get("/api/leads/999")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Lead not found"}


@pytest.mark.asyncio
async def test_timeline_uses_camel_case_keys(client):
    lead = await _create_lead(client)
    await client.post(f"/api/leads/{lead['id']}/cold-calls", json={"outcome": "answered"})
    visit = await client.post(
        f"/api/leads/{lead['id']}/onsite-visits",
        json={"location": "HQ", "outcome": "completed", "in_time": "09:30:00"},
    )
    assert visit.status_code == 201
    assert visit.json()["data"]["in_time"] == "09:30:00"

    response = await client.get(f"/api/leads/{lead['id']}/timeline")

    data = response.json()["data"]
    assert set(data) == {"activities", "coldCalls", "onsiteVisits"}
    assert data["coldCalls"][0]["outcome"] == "answered"
    assert data["onsiteVisits"][0]["location"] == "HQ"


@pytest.mark.asyncio
async def test_deal_stage_errors_are_400(client):
    lead = await _create_lead(client)
    created = await client.post("/api/deals", json={"leadId": lead["id"], "dealValue": 2500})
    assert created.status_code == 201
    deal = created.json()["data"]
    assert deal["stage"] == "new"

    bad_stage = await client.patch(f"/api/deals/{deal['id']}/stage", json={"stage": "won"})
    assert bad_stage.status_code == 400
    assert bad_stage.json()["errors"][0]["field"] == "stage"

    missing = await client.patch("/api/deals/does-not-exist/stage", json={"stage": "closed"})
    assert missing.status_code == 400

    moved = await client.patch(f"/api/deals/{deal['id']}/stage", json={"stage": "PROPOSAL"})
    assert moved.status_code == 200
    assert moved.json()["data"]["stage"] == "proposal"

    pipeline = await client.get("/api/deals/pipeline")
    assert pipeline.headers["Cache-Control"] == "public, max-age=60, s-maxage=120"
    assert [d["id"] for d in pipeline.json()["data"]["proposal"]] == [deal["id"]]


@pytest.mark.asyncio
async def test_deal_for_unknown_lead_is_404(client):
    response = await client.post("/api/deals", json={"leadId": 31337})
    assert response.status_code == 404
    assert response.json()["message"] == "Lead with id 31337 does not exist"


@pytest.mark.asyncio
async def test_client_trash_flow(client):
    created = await client.post("/api/clients", json={"name": "Acme Corp"})
    assert created.status_code == 201
    client_id = created.json()["data"]["id"]
    assert created.json()["data"]["client_number"] == "CLT-000001"

    assert (await client.post(f"/api/clients/{client_id}/restore")).status_code == 400
    assert (await client.delete(f"/api/clients/{client_id}/permanent")).status_code == 400
    assert (await client.delete(f"/api/clients/{client_id}")).status_code == 200
    assert (await client.get(f"/api/clients/{client_id}")).status_code == 404

    trash = await client.get("/api/clients/trash")
    assert [c["id"] for c in trash.json()["data"]] == [client_id]

    assert (await client.delete(f"/api/clients/{client_id}/permanent")).status_code == 200
    assert (await client.delete(f"/api/clients/{client_id}/permanent")).status_code == 404


@pytest.mark.asyncio
async def test_task_with_both_targets_is_rejected(client):
    lead = await _create_lead(client)
    created = await client.post("/api/clients", json={"name": "Acme Corp", "leadId": lead["id"]})
    client_id = created.json()["data"]["id"]

    response = await client.post(
        "/api/tasks",
        json={"assignedToEmail": "bob@example.com", "title": "Both", "leadId": lead["id"], "clientId": client_id},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_task_write_reports_side_effects(client):
    lead = await _create_lead(client)

    response = await client.post(
        f"/api/leads/{lead['id']}/tasks",
        json={"assignedToEmail": "bob@example.com", "title": "Call", "dueDate": "2030-01-01"},
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["lead_id"] == lead["id"]
    assert data["due_date"] == "2030-01-01T00:00:00.000Z"
    assert [(s["name"], s["ok"]) for s in data["side_effects"]] == [("activity", True), ("notification", True)]

    mine = await client.get("/api/tasks/my", headers={"x-user-email": "Bob@Example.com"})
    assert mine.json()["count"] == 1

    notifications = await client.get("/api/notifications/unread-count", headers={"x-user-email": "bob@example.com"})
    assert notifications.json()["data"] == {"count": 1}


@pytest.mark.asyncio
async def test_user_scoped_routes_need_identity(client):
    missing = await client.get("/api/notifications")
    assert missing.status_code == 401
    assert missing.json()["message"] == "User email is required"

    malformed = await client.get("/api/chat/conversations", headers={"x-user-email": "nobody"})
    assert malformed.status_code == 401


@pytest.mark.asyncio
async def test_chat_round_trip(client):
    alice = {"x-user-email": "alice@example.com"}
    bob = {"x-user-email": "bob@example.com"}

    sent = await client.post("/api/chat/send", json={"receiverEmail": "bob@example.com", "message": "hi"}, headers=alice)
    assert sent.status_code == 201

    unread = await client.get("/api/chat/unread-count", headers=bob)
    assert unread.json()["data"]["count"] == 1

    marked = await client.patch("/api/chat/mark-read", json={"senderEmail": "alice@example.com"}, headers=bob)
    assert marked.status_code == 200

    conversation = await client.get("/api/chat/conversation/alice@example.com", headers=bob)
    assert [m["message"] for m in conversation.json()["data"]] == ["hi"]
    assert conversation.json()["data"][0]["is_read"] is True


@pytest.mark.asyncio
async def test_pricing_cache_profiles(client):
    created = await client.post("/api/pricing", json={"name": "Pro", "price": 499, "billingPeriod": "yearly"})
    assert created.status_code == 201
    assert created.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"

    listed = await client.get("/api/pricing")
    assert listed.headers["Cache-Control"] == "public, max-age=300, s-maxage=600"
    assert listed.json()["data"][0]["billing_period"] == "yearly"


@pytest.mark.asyncio
async def test_credentials_endpoints(client):
    created = await client.post("/api/clients", json={"name": "Acme Corp"})
    client_id = created.json()["data"]["id"]

    credential = await client.post(
        f"/api/clients/{client_id}/credentials",
        json={"title": "Hosting", "username": "root", "password": "s3cret"},
    )
    assert credential.status_code == 201
    credential_id = credential.json()["data"]["id"]

    fetched = await client.get(f"/api/credentials/{credential_id}")
    assert fetched.json()["data"]["password"] == "s3cret"

    empty = await client.patch(f"/api/credentials/{credential_id}", json={})
    assert empty.status_code == 400
    assert empty.json()["message"] == "No fields to update"


@pytest.mark.asyncio
async def test_team_list_without_auth_backend(client, app):
    app.dependency_overrides[team_api.get_auth_client] = lambda: None
    created = await client.post("/api/team", json={"email": "dana@example.com", "name": "Dana"})
    assert created.status_code == 201

    response = await client.get("/api/team")
    assert [m["email"] for m in response.json()["data"]] == ["dana@example.com"]


@pytest.mark.asyncio
async def test_dashboard_summary_keys(client):
    lead = await _create_lead(client)
    await client.post(f"/api/leads/{lead['id']}/activities", json={"activityType": "note", "description": "hi"})

    response = await client.get("/api/dashboard/summary")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalLeads"] == 1
    assert data["leadsByStage"]["new"] == 1
    assert data["recentActivities"][0]["lead_name"] == "Jane Doe"


@pytest.mark.asyncio
async def test_unhandled_errors_return_clean_500(client, monkeypatch):
    from crm.services import dashboard_service

    async def explode(db):
        raise RuntimeError("boom")

    monkeypatch.setattr(dashboard_service, "get_summary", explode)

    response = await client.get("/api/dashboard/summary")
    assert response.status_code == 500
    assert response.json()["success"] is False
    assert response.json()["message"] == "Internal server error"


@pytest.mark.asyncio
async def test_health_and_root(client):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"

    root = await client.get("/")
    assert root.json()["endpoints"]["leads"] == "/api/leads"

    metrics = await client.get("/api/metrics")
    assert metrics.status_code == 200
    assert "http_requests_total" in metrics.text


@pytest.mark.asyncio
async def test_null_for_required_field_is_400(client, active_client):
    client_id = active_client.id

    response = await client.patch(f"/api/clients/{client_id}", json={"name": None})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["errors"] == [{"field": "name", "message": "name cannot be null"}]
    assert (await client.get(f"/api/clients/{client_id}")).json()["data"]["name"] == "Acme Corp"

    created = await client.post(
        "/api/tasks",
        json={"clientId": client_id, "assignedToEmail": "bob@example.com", "title": "Call back"},
    )
    assert created.status_code == 201
    task_id = created.json()["data"]["id"]
    response = await client.patch(f"/api/tasks/{task_id}", json={"title": None})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "title"

    response = await client.patch(f"/api/tasks/{task_id}", json={"assignedToEmail": None})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "assignedToEmail"
