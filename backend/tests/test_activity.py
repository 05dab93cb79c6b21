import pytest

from sims.core.permissions import ADMIN, HEAD_ADMIN, STOCK_TAKER

from .conftest import drop_table


def test_client_entries_are_attributed_to_session_user(client, login):
    login(STOCK_TAKER)
    response = client.post(
        "/api/activity-logs",
        json={"action": "export report", "details": "Exported stock sheet", "userId": 999},
    )
    assert response.status_code == 201
    log = response.json()["log"]
    assert log["action"] == "EXPORT_REPORT"
    assert log["username"] == "stock"
    assert log["userId"] != 999
    assert log["description"] == "Exported stock sheet"


def test_list_respects_limit(client, login):
    login(ADMIN)
    for index in range(5):
        client.post("/api/activity-logs", json={"action": "VIEW", "details": f"view {index}"})

    logs = client.get("/api/activity-logs", params={"limit": 3}).json()["logs"]
    assert [log["description"] for log in logs] == ["view 4", "view 3", "view 2"]
    assert client.get("/api/activity-logs", params={"limit": 0}).status_code == 400


def test_audit_failure_does_not_undo_mutation(client, login, caplog):
    client.portal.call(drop_table, "activity_log")
    login(STOCK_TAKER)

    response = client.post("/api/inventory", json={"name": "Gloves", "quantity": 20})

    assert response.status_code == 201
    assert [item["name"] for item in client.get("/api/inventory").json()["items"]] == ["Gloves"]
    assert "Failed to append activity CREATE_INVENTORY" in caplog.text


def test_dashboard_includes_recent_activity(client, login):
    login(HEAD_ADMIN)
    client.post("/api/activity-logs", json={"action": "PING"})
    stats = client.get("/api/stats/dashboard").json()["stats"]
    assert stats["recentActivity"][0]["action"] == "PING"


@pytest.mark.parametrize("action", ["DELETE_ASSET", "create inventory", "bulk_create_asset"])
def test_client_cannot_use_server_action_tags(client, login, action):
    login(STOCK_TAKER)
    response = client.post(
        "/api/activity-logs",
        json={"action": action, "tableName": "assets", "recordId": "1", "details": "Removed laptop"},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False

    login(ADMIN)
    assert client.get("/api/activity-logs").json()["logs"] == []


def test_client_entries_carry_no_table_or_record(client, login):
    login(STOCK_TAKER)
    response = client.post(
        "/api/activity-logs",
        json={"action": "PRINT_LABELS", "tableName": "assets", "recordId": "1"},
    )
    assert response.status_code == 201
    log = response.json()["log"]
    assert log["tableName"] is None
    assert log["recordId"] is None
