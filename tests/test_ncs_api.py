"""API tests for non-conformance CRUD and listing."""

from datetime import date

from nctrack.engine.schedule import add_months


async def test_create_closed_nc_derives_effectiveness_check(client):
    resp = await client.post(
        "/api/ncs",
        json={
            "title": "Weld porosity",
            "description": "Porosity found on seam 4",
            "date_reported": "2024-01-01",
            "status": "Closed",
            "severity": "High",
            "closure_date": "2024-01-10",
        },
    )
    assert resp.status_code == 201
    data = resp.json()
    assert isinstance(data["id"], int)
    assert data["effectiveness_check_date"] == "2024-05-10"
    assert data["needs_effectiveness_check"] == 1
    assert data["type"] == "NC"
    assert data["created_at"] == data["updated_at"]


async def test_create_missing_severity_is_rejected(client):
    payload = {
        "title": "No severity",
        "description": "x",
        "date_reported": "2024-01-01",
        "status": "Open",
    }
    resp = await client.post("/api/ncs", json=payload)
    assert resp.status_code == 400
    assert "severity" in resp.json()["detail"]

    listing = await client.get("/api/ncs")
    assert listing.json() == []


async def test_create_rejects_blank_title_and_unknown_status(client, make_nc):
    resp = await client.post(
        "/api/ncs",
        json={"title": "  ", "description": "d", "date_reported": "2024-01-01", "status": "Open", "severity": "Low"},
    )
    assert resp.status_code == 400
    resp = await client.post(
        "/api/ncs",
        json={"title": "t", "description": "d", "date_reported": "2024-01-01", "status": "Done", "severity": "Low"},
    )
    assert resp.status_code == 400


async def test_create_treats_blank_optional_fields_as_null(make_nc):
    nc = await make_nc(due_date="", department="", closure_date="")
    assert nc["due_date"] is None
    assert nc["department"] is None


async def test_manual_check_date_is_kept_on_create(make_nc):
    nc = await make_nc(
        status="Closed", closure_date="2024-01-10", effectiveness_check_date="2024-03-01"
    )
    assert nc["effectiveness_check_date"] == "2024-03-01"


async def test_get_missing_nc_returns_404(client):
    resp = await client.get("/api/ncs/999")
    assert resp.status_code == 404


async def test_update_merges_fields_and_refreshes_updated_at(client, make_nc):
    nc = await make_nc()
    resp = await client.put(
        f"/api/ncs/{nc['id']}",
        json={"root_cause": "Tool wear", "id": 77, "created_at": "2000-01-01T00:00:00"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == nc["id"]
    assert data["root_cause"] == "Tool wear"
    assert data["title"] == nc["title"]
    assert data["created_at"] == nc["created_at"]
    assert data["updated_at"] >= nc["updated_at"]


async def test_update_missing_nc_returns_404(client):
    resp = await client.put("/api/ncs/42", json={"status": "Closed"})
    assert resp.status_code == 404


async def test_update_cannot_clear_required_field(client, make_nc):
    nc = await make_nc()
    resp = await client.put(f"/api/ncs/{nc['id']}", json={"title": None})
    assert resp.status_code == 400


async def test_closing_via_update_derives_check_once(client, make_nc):
    nc = await make_nc()
    resp = await client.put(
        f"/api/ncs/{nc['id']}", json={"status": "Closed", "closure_date": "2024-02-14"}
    )
    assert resp.json()["effectiveness_check_date"] == "2024-06-14"
    assert resp.json()["needs_effectiveness_check"] is True

    # Re-closing with a new closure date keeps the existing check date.
    resp = await client.put(
        f"/api/ncs/{nc['id']}", json={"status": "Closed", "closure_date": "2024-03-01"}
    )
    assert resp.json()["closure_date"] == "2024-03-01"
    assert resp.json()["effectiveness_check_date"] == "2024-06-14"


async def test_reopen_and_reclose(client, make_nc):
    nc = await make_nc(status="Closed", closure_date="2024-01-10")
    resp = await client.put(f"/api/ncs/{nc['id']}", json={"status": "Open", "closure_date": None})
    assert resp.status_code == 200
    assert resp.json()["status"] == "Open"
    assert resp.json()["effectiveness_check_date"] == "2024-05-10"


async def test_delete_nc(client, make_nc):
    nc = await make_nc()
    resp = await client.delete(f"/api/ncs/{nc['id']}")
    assert resp.status_code == 200
    assert "message" in resp.json()
    assert (await client.get(f"/api/ncs/{nc['id']}")).status_code == 404
    assert (await client.delete(f"/api/ncs/{nc['id']}")).status_code == 404


async def test_listing_without_filters_is_newest_first(client, make_nc):
    ids = [(await make_nc(title=f"NC {i}"))["id"] for i in range(4)]
    resp = await client.get("/api/ncs")
    assert [nc["id"] for nc in resp.json()] == list(reversed(ids))


async def test_listing_filters(client, make_nc):
    await make_nc(title="Gauge drift", status="Open", severity="High", department="QA", nc_source="Audit")
    await make_nc(title="Label missing", status="Closed", severity="Low", department="Packing")
    await make_nc(
        title="Burr on edge",
        description="Edge finish out of TOLERANCE band",
        status="Open",
        severity="Low",
        category="Product",
    )

    resp = await client.get("/api/ncs", params={"status": "Open"})
    assert {nc["title"] for nc in resp.json()} == {"Gauge drift", "Burr on edge"}

    resp = await client.get("/api/ncs", params={"status": "Open", "severity": "Low"})
    assert [nc["title"] for nc in resp.json()] == ["Burr on edge"]

    resp = await client.get("/api/ncs", params={"nc_source": "Audit"})
    assert [nc["title"] for nc in resp.json()] == ["Gauge drift"]

    resp = await client.get("/api/ncs", params={"department": "Packing"})
    assert [nc["title"] for nc in resp.json()] == ["Label missing"]

    resp = await client.get("/api/ncs", params={"category": "Product"})
    assert [nc["title"] for nc in resp.json()] == ["Burr on edge"]


async def test_search_is_case_insensitive_over_title_and_description(client, make_nc):
    await make_nc(title="Tolerance stack-up error", description="Drawing issue")
    await make_nc(title="Bore size", description="Outside tolerance limits")
    await make_nc(title="Paint defect", description="Runs on panel")

    resp = await client.get("/api/ncs", params={"search": "tolerance"})
    titles = {nc["title"] for nc in resp.json()}
    assert titles == {"Tolerance stack-up error", "Bore size"}


async def test_kanban_style_close_uses_today(client, make_nc):
    nc = await make_nc()
    today = date.today()
    resp = await client.put(
        f"/api/ncs/{nc['id']}", json={"status": "Closed", "closure_date": today.isoformat()}
    )
    assert resp.json()["effectiveness_check_date"] == add_months(today, 4).isoformat()
