from fastapi.testclient import TestClient
from stockroom.main import app

def test_health_ok(db):
    with TestClient(app) as c:
        r = c.get("/health")

    assert r.status_code == 200
    assert r.headers.get("content-type", "").startswith("application/json")
    data = r.json()
    assert data.get("ok") is True
    assert data["data"]["service"] == "STOCKROOM"


def test_db_ping(client):
    r = client.get("/db-ping")
    assert r.status_code == 200
    assert r.json()["data"] == {"db": "ok", "select1": 1}
