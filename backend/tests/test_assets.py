import re

import pytest

from sims.core.permissions import ASSET_ADDER, HEAD_ADMIN

SR_PATTERN = re.compile(r"^[A-Z]+-SR-\d{4}-[A-Z0-9]{4}$")


def _asset(**overrides):
    payload = {
        "employeeName": "Nomsa Dlamini",
        "type": "Laptop",
        "serialNumber": "SN-1001",
        "department": "Finance",
        "extNumber": "2231",
        "model": "ThinkPad T14",
        "brand": "Lenovo",
        "status": "Active",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def adder(client, login):
    login(ASSET_ADDER)
    return client


def test_create_generates_sr_number(adder):
    response = adder.post("/api/assets", json=_asset())
    assert response.status_code == 201
    body = response.json()
    assert SR_PATTERN.match(body["srNumber"])
    assert body["srNumber"].startswith("BCC-SR-")

    assets = adder.get("/api/assets").json()["assets"]
    assert len(assets) == 1
    asset = assets[0]
    assert asset["id"] == body["id"]
    assert asset["srNumber"] == body["srNumber"]
    assert asset["type"] == "Laptop"
    assert asset["status"] == asset["assetStatus"] == "Active"
    assert asset["department"] == "Finance"
    assert asset["departmentId"] is not None


def test_client_supplied_sr_number_is_kept(adder):
    response = adder.post("/api/assets", json=_asset(srNumber="BCC-SR-2023-ZZ99"))
    assert response.json()["srNumber"] == "BCC-SR-2023-ZZ99"


def test_duplicate_client_sr_number_conflicts(adder):
    adder.post("/api/assets", json=_asset(srNumber="BCC-SR-2023-ZZ99"))
    response = adder.post("/api/assets", json=_asset(serialNumber="SN-2", srNumber="BCC-SR-2023-ZZ99"))
    assert response.status_code == 409


def test_duplicate_serial_rejected_without_insert(adder):
    adder.post("/api/assets", json=_asset())
    payload = _asset(manufacturerSerialNumber="SN-1001")
    del payload["serialNumber"]
    response = adder.post("/api/assets", json=payload)
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": 'An asset with Serial Number "SN-1001" is already registered.',
    }
    assert len(adder.get("/api/assets").json()["assets"]) == 1


def test_assets_without_serial_do_not_collide(adder):
    assert adder.post("/api/assets", json=_asset(serialNumber="")).status_code == 201
    assert adder.post("/api/assets", json=_asset(serialNumber=None)).status_code == 201
    assert len(adder.get("/api/assets").json()["assets"]) == 2


def test_employee_name_required(adder):
    response = adder.post("/api/assets", json=_asset(employeeName="  "))
    assert response.status_code == 400


def test_unknown_status_rejected(adder):
    response = adder.post("/api/assets", json=_asset(status="Lost"))
    assert response.status_code == 400


@pytest.mark.parametrize(
    "raw,label",
    [("good", "Active"), ("maintenance", "Under Repair"), ("UNDER REPAIR", "Under Repair"), ("disposed", "Disposed")],
)
def test_status_aliases(adder, raw, label):
    payload = _asset(assetStatus=raw)
    del payload["status"]
    adder.post("/api/assets", json=payload)
    assert adder.get("/api/assets").json()["assets"][0]["assetStatus"] == label


def test_lifecycle_dates_derived_from_purchase(adder):
    adder.post("/api/assets", json=_asset(purchaseDate="2024-02-29T00:00:00.000Z"))
    asset = adder.get("/api/assets").json()["assets"][0]
    assert asset["purchaseDate"] == "2024-02-29"
    assert asset["warrantyExpiry"] == "2025-02-28"
    assert asset["disposalDate"] == "2027-02-28"


def test_explicit_warranty_is_kept(adder):
    adder.post("/api/assets", json=_asset(purchaseDate="2024-05-01", warrantyExpiry="2026-05-01"))
    asset = adder.get("/api/assets").json()["assets"][0]
    assert asset["warrantyExpiry"] == "2026-05-01"
    assert asset["disposalDate"] == "2027-05-01"


def test_filters(adder):
    adder.post("/api/assets", json=_asset())
    adder.post("/api/assets", json=_asset(employeeName="Peter Mokoena", serialNumber="SN-2", department="IT"))
    adder.post(
        "/api/assets",
        json=_asset(employeeName="Lerato Khumalo", serialNumber="SN-3", department="IT", status="Under Repair"),
    )

    def names(**params):
        return sorted(a["employeeName"] for a in adder.get("/api/assets", params=params).json()["assets"])

    assert names(search="mokoena") == ["Peter Mokoena"]
    assert names(search="sn-100") == ["Nomsa Dlamini"]
    assert names(department="it") == ["Lerato Khumalo", "Peter Mokoena"]
    assert names(assetStatus="Under Repair") == ["Lerato Khumalo"]
    assert names(assetStatus="All") == ["Lerato Khumalo", "Nomsa Dlamini", "Peter Mokoena"]


def test_update_rechecks_serial_excluding_self(adder):
    first = adder.post("/api/assets", json=_asset()).json()
    second = adder.post("/api/assets", json=_asset(serialNumber="SN-2")).json()

    same = adder.put("/api/assets", json=_asset(id=first["id"], notes="Screen replaced"))
    assert same.status_code == 200
    assert same.json()["srNumber"] == first["srNumber"]

    clash = adder.put("/api/assets", json=_asset(id=second["id"], serialNumber="SN-1001"))
    assert clash.status_code == 400


def test_update_changes_status(adder):
    created = adder.post("/api/assets", json=_asset()).json()
    adder.put("/api/assets", json=_asset(id=created["id"], status="repair"))
    asset = adder.get("/api/assets").json()["assets"][0]
    assert asset["status"] == "Under Repair"


def test_delete_is_permanent(adder):
    created = adder.post("/api/assets", json=_asset()).json()
    assert adder.delete(f"/api/assets/{created['id']}").status_code == 200
    assert adder.get("/api/assets").json()["assets"] == []
    assert adder.delete(f"/api/assets/{created['id']}").status_code == 404


def test_bulk_import(adder):
    rows = [_asset(serialNumber=f"SN-B{i}", employeeName=f"Employee {i}") for i in range(3)]
    response = adder.post("/api/assets/bulk", json=rows)
    assert response.status_code == 201
    body = response.json()
    assert body["count"] == 3
    assert len(set(body["srNumbers"])) == 3
    assert all(SR_PATTERN.match(sr) for sr in body["srNumbers"])


def test_bulk_import_all_or_nothing(adder):
    adder.post("/api/assets", json=_asset())
    rows = [_asset(serialNumber="SN-NEW", employeeName="New"), _asset(employeeName="Clash")]
    response = adder.post("/api/assets/bulk", json=rows)
    assert response.status_code == 400
    assert "SN-1001" in response.json()["error"]
    assert len(adder.get("/api/assets").json()["assets"]) == 1


def test_bulk_import_rejects_repeated_serial_in_batch(adder):
    rows = [_asset(serialNumber="SN-X"), _asset(serialNumber="sn-x")]
    assert adder.post("/api/assets/bulk", json=rows).status_code == 400
    assert adder.get("/api/assets").json()["assets"] == []


def test_bulk_import_requires_a_list(adder):
    assert adder.post("/api/assets/bulk", json=_asset()).status_code == 400


def test_audit_entries_for_assets(client, login):
    login(ASSET_ADDER)
    created = client.post("/api/assets", json=_asset()).json()
    client.put("/api/assets", json=_asset(id=created["id"], brand="Dell"))
    client.post("/api/assets/bulk", json=[_asset(serialNumber="SN-B1")])
    client.delete(f"/api/assets/{created['id']}")

    login(HEAD_ADMIN)
    logs = [log for log in client.get("/api/activity-logs").json()["logs"] if log["tableName"] == "assets"]
    assert [log["action"] for log in logs] == ["DELETE_ASSET", "BULK_CREATE_ASSET", "UPDATE_ASSET", "CREATE_ASSET"]
    assert all(log["username"] == "adder" for log in logs)
    assert created["srNumber"] in logs[-1]["description"]


def test_departments_are_synced(adder):
    adder.post("/api/assets", json=_asset(department="Water Services"))
    adder.post("/api/assets", json=_asset(serialNumber="SN-2", department="water services"))
    departments = adder.get("/api/departments").json()["departments"]
    assert [d["name"] for d in departments] == ["Water Services"]

    created = adder.post("/api/departments", json={"name": "Fleet"})
    assert created.status_code == 201
    fleet_id = created.json()["department"]["id"]
    assert adder.post("/api/departments", json={"name": "fleet"}).status_code == 409

    adder.post("/api/assets", json=_asset(serialNumber="SN-3", department=None, departmentId=fleet_id))
    by_serial = {a["serialNumber"]: a for a in adder.get("/api/assets").json()["assets"]}
    assert by_serial["SN-3"]["department"] == "Fleet"
