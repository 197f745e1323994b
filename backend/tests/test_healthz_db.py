from fastapi.testclient import TestClient
from gymii.main import app
from gymii import main as app_main

client = TestClient(app)

def test_healthz_ok():
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}

def test_healthz_reports_database_failure(monkeypatch):
    class Unreachable:
        def __enter__(self): raise RuntimeError("database unreachable")
        def __exit__(self, *a): return False
    monkeypatch.setattr(app_main, "SessionLocal", lambda: Unreachable())
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "degraded", "error": "database unreachable"}

def test_version_defaults_to_dev(monkeypatch):
    monkeypatch.delenv("API_VERSION", raising=False)
    assert client.get("/version").json() == {"version": "dev"}
