def test_root_and_info(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["service"] == "ecofreight-api"
    assert client.get("/info").json()["endpoints"]["ready"] == "/health/ready"

def test_health_endpoints(client):
    for endpoint in ("/health", "/health/live", "/health/ready", "/health/startup"):
        resp = client.get(endpoint)
        assert resp.status_code in (200, 503)
        assert "status" in resp.json()

def test_readiness_reports_database_and_ledger(client):
    body = client.get("/health/ready").json()
    assert body["checks"]["database:connectivity"]["status"] == "pass"
    assert body["checks"]["ledger:transactions"]["status"] == "pass"

def test_startup_checks_config_and_migrations(client):
    # Tests run with a non-default secret and without an alembic_version table
    body = client.get("/health/startup").json()
    assert body["checks"]["config:environment"]["status"] == "pass"
    assert body["checks"]["database:migrations"]["status"] == "warn"

def test_metrics(client):
    body = client.get("/metrics").json()
    assert body["service"] == "ecofreight-api"
    assert "memory_rss_bytes" in body["system"]

def test_request_id_is_echoed(client):
    resp = client.get("/health/live", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
