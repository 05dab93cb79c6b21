from sims.core.permissions import ASSET_ADDER, STOCK_TAKER


def test_health_needs_no_session(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_db_status_exposes_counts_only(client, login):
    login(STOCK_TAKER)
    client.cookies.clear()

    body = client.get("/api/debug/db-status").json()
    assert body["database"]["usersCount"] == 5
    assert body["database"]["activeSessions"] == 1
    assert body["sessionStore"] == "database"
    text = str(body).lower()
    assert "secret" not in text
    assert "sqlite" not in text


def test_dashboard_figures(client, login):
    login(STOCK_TAKER)
    client.post("/api/inventory", json={"name": "Paper", "quantity": 4, "price": 2.5, "lowStockThreshold": 5})
    client.post("/api/inventory", json={"name": "Pens", "quantity": 100, "price": 0.5})
    login(ASSET_ADDER)
    client.post("/api/assets", json={"employeeName": "A", "serialNumber": "S1"})
    client.post("/api/assets", json={"employeeName": "B", "serialNumber": "S2", "status": "Disposed"})

    stats = client.get("/api/stats/dashboard").json()["stats"]
    assert stats["inventory"] == {"totalItems": 2, "totalValue": 60.0, "lowStockItems": 1}
    assert stats["assets"] == {"totalAssets": 2, "activeAssets": 1}


def test_cors_allows_credentials_for_listed_origin(client):
    response = client.options(
        "/api/auth/login",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_ignores_unlisted_origin(client):
    response = client.options(
        "/api/auth/login",
        headers={"Origin": "http://evil.example", "Access-Control-Request-Method": "POST"},
    )
    assert "access-control-allow-origin" not in response.headers
