import uuid
from datetime import date, timedelta

import pytest

START = date.today() + timedelta(days=10)


@pytest.fixture
def unit_id(client):
    resp = client.post("/api/units/", json={
        "name": "Room 01",
        "property_name": "Kost Melati",
        "monthly_rate": 3000000,
        "annual_rate": 33000000,
    })
    assert resp.status_code == 200
    return resp.json()["id"]


@pytest.fixture
def tenant_id(client):
    resp = client.post("/api/tenants/", json={"full_name": "Budi Santoso"})
    assert resp.status_code == 200
    return resp.json()["id"]


def create_lease(client, unit_id, tenant_id, start=START, **fields):
    return client.post("/api/leases/", json={
        "tenant_id": tenant_id,
        "unit_id": unit_id,
        "start_date": start.isoformat(),
        "payment_cycle": "monthly",
        "rent_amount": 3000000,
        **fields,
    })


def test_create_and_fetch_lease(client, unit_id, tenant_id):
    resp = create_lease(client, unit_id, tenant_id)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "draft"
    assert body["unit_name"] == "Room 01"
    assert body["tenant_name"] == "Budi Santoso"

    fetched = client.get(f"/api/leases/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["end_date"] == body["end_date"]


def test_overlap_is_a_conflict_envelope(client, unit_id, tenant_id):
    first = create_lease(client, unit_id, tenant_id).json()

    resp = create_lease(client, unit_id, tenant_id, start=START + timedelta(days=5))
    assert resp.status_code == 409
    body = resp.json()
    assert body["status"] == "Failure"
    assert body["status_code"] == "400"
    assert body["data"]["error"] == "UnavailableInterval"
    assert body["data"]["reason"] == "overlap"
    assert body["data"]["conflicting_lease_id"] == first["id"]


def test_unpriced_cadence_is_rejected(client, unit_id, tenant_id):
    resp = client.post("/api/leases/", json={
        "tenant_id": tenant_id,
        "unit_id": unit_id,
        "start_date": START.isoformat(),
        "payment_cycle": "daily",
        "rent_amount": 150000,
    })
    assert resp.status_code == 400
    assert resp.json()["status_code"] == "401"
    assert resp.json()["data"]["cadence"] == "daily"


def test_illegal_transition_carries_guard(client, unit_id, tenant_id):
    lease = create_lease(client, unit_id, tenant_id).json()
    paid = client.post(f"/api/leases/{lease['id']}/payments", json={"payment_method": "qris"})
    assert paid.json()["status"] == "active"

    resp = client.delete(f"/api/leases/{lease['id']}")
    assert resp.status_code == 400
    assert resp.json()["status_code"] == "402"
    assert resp.json()["data"]["guard"] == "delete_non_draft"


def test_missing_lease_is_not_found(client):
    resp = client.get(f"/api/leases/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["status_code"] == "203"
    assert resp.json()["message"] == "Lease not found"


def test_invalid_payload_is_wrapped(client, unit_id, tenant_id):
    resp = create_lease(client, unit_id, tenant_id, rent_amount=-5)
    assert resp.status_code == 422
    assert resp.json()["status_code"] == "202"


def test_auto_renewal_toggle_and_future_lease_check(client, unit_id, tenant_id):
    lease = create_lease(client, unit_id, tenant_id).json()

    check = client.get(f"/api/leases/{lease['id']}/check-future-lease")
    assert check.json() == {"has_future_lease": False}

    resp = client.post(f"/api/leases/{lease['id']}/auto-renewal", json={"is_auto_renew": True})
    assert resp.status_code == 200
    body = resp.json()
    assert body["is_auto_renew"] is True
    assert body["auto_renewal_notice_days"] == 5
    assert body["can_cancel_auto_renewal"] is True


def test_chain_and_renew(client, unit_id, tenant_id):
    lease = create_lease(client, unit_id, tenant_id, start=date.today()).json()
    client.post(f"/api/leases/{lease['id']}/payments", json={"payment_method": "cash"})

    renewal = client.post(f"/api/leases/{lease['id']}/renew")
    assert renewal.status_code == 200
    assert renewal.json()["renewed_from_id"] == lease["id"]

    chain = client.get(f"/api/leases/{lease['id']}/chain").json()["chain"]
    assert [l["id"] for l in chain] == [lease["id"], renewal.json()["id"]]


def test_process_renewals_returns_summary(client):
    resp = client.post("/api/leases/process-renewals")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "Success"
    assert body["data"]["processed"] == 0


def test_unit_helpers(client, unit_id):
    cadences = client.get(f"/api/units/{unit_id}/cadence-lookup").json()
    assert [c["id"] for c in cadences] == ["monthly", "annual"]

    suggested = client.get("/api/units/suggest-end-date",
                           params={"start_date": "2024-01-31", "payment_cycle": "monthly"})
    assert suggested.json()["end_date"] == "2024-02-29"

    assert client.get(f"/api/units/{unit_id}/active-lease").json() is None


def test_lookups_and_listing(client, unit_id, tenant_id):
    create_lease(client, unit_id, tenant_id)

    statuses = client.get("/api/leases/status-lookup").json()
    assert {s["id"] for s in statuses} == {"draft", "active", "ended", "cancelled"}

    listing = client.get("/api/leases/all", params={"status": "draft"}).json()
    assert listing["total"] == 1

    overview = client.get("/api/leases/overview").json()
    assert overview["draftLeases"] == 1


def test_bulk_import_endpoint(client, unit_id, tenant_id):
    rows = [
        {"tenant_id": tenant_id, "unit_id": unit_id, "start_date": START.isoformat(),
         "payment_cycle": "monthly", "rent_amount": 3000000},
        {"tenant_id": tenant_id, "unit_id": unit_id, "start_date": START.isoformat(),
         "payment_cycle": "monthly", "rent_amount": 3000000},
    ]
    body = client.post("/api/leases/bulk-import", json={"rows": rows}).json()
    assert (body["created"], body["failed"]) == (1, 1)


def test_unknown_unit_for_lease_is_not_found(client, tenant_id):
    resp = create_lease(client, str(uuid.uuid4()), tenant_id)
    assert resp.status_code == 404
    assert resp.json()["status"] == "Failure"
    assert resp.json()["message"] == "Unit not found"
    assert resp.json()["data"] is None


def test_cadence_lookup_for_unknown_unit_is_not_found(client):
    resp = client.get(f"/api/units/{uuid.uuid4()}/cadence-lookup")
    assert resp.status_code == 404
    assert resp.json()["status_code"] == "203"
