from datetime import datetime, timedelta
from ecofreight.domain.models import Shipment
from ecofreight.infrastructure import cache

def test_manager_dashboard(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, customer_headers = customer
    first = create_shipment(customer_id)
    create_shipment(customer_id, transport_type="rail")
    client.put(f"/shipments/{first['id']}/status", json={"status": "delayed"}, headers=headers)
    client.post("/reviews/", json={"shipment_id": first["id"], "rating": 3}, headers=customer_headers)

    body = client.get("/dashboards/manager", headers=headers).json()
    assert body["total_shipments"] == 2
    assert body["status_counts"] == {"processing": 1, "in-transit": 0, "delivered": 0, "delayed": 1}
    assert body["total_carbon_footprint"] == 42.0
    assert body["pending_reviews"] == 1
    assert body["open_suggestions"] == 0
    assert {s["badge"]["color"] for s in body["recent_shipments"]} == {"yellow", "red"}

def test_dashboard_cache_is_invalidated_on_write(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, _ = customer
    create_shipment(customer_id)
    assert client.get("/dashboards/manager", headers=headers).json()["total_shipments"] == 1
    assert any(key.startswith(cache.DASHBOARD_PREFIX) for key in cache.local_cache.keys())

    create_shipment(customer_id)
    assert client.get("/dashboards/manager", headers=headers).json()["total_shipments"] == 2

def test_driver_dashboard(client, driver, customer, create_shipment):
    driver_id, headers = driver
    customer_id, _ = customer
    active = create_shipment(customer_id, assigned_driver_id=driver_id)
    done = create_shipment(customer_id, assigned_driver_id=driver_id)
    create_shipment(customer_id)
    client.put(f"/shipments/{done['id']}/status", json={"status": "delivered"}, headers=headers)

    body = client.get("/dashboards/driver", headers=headers).json()
    assert body["assigned_shipments"] == 2
    assert body["status_counts"]["delivered"] == 1
    assert [s["id"] for s in body["active_deliveries"]] == [active["id"]]

def test_customer_dashboard(client, customer, other_customer, create_shipment):
    customer_id, headers = customer
    other_id, _ = other_customer
    create_shipment(customer_id, transport_type="rail")
    create_shipment(other_id)

    body = client.get("/dashboards/customer", headers=headers).json()
    assert body["total_shipments"] == 1
    assert body["total_carbon_footprint"] == 11.0
    assert 0 <= body["sustainability_score"] <= 100
    assert body["shipments"][0]["badge"]["label"] == "Processing"

def test_dashboards_are_role_specific(client, manager, driver, customer):
    _, manager_headers = manager
    _, driver_headers = driver
    _, customer_headers = customer
    assert client.get("/dashboards/manager", headers=customer_headers).status_code == 403
    assert client.get("/dashboards/driver", headers=manager_headers).status_code == 403
    assert client.get("/dashboards/customer", headers=driver_headers).status_code == 403

def test_carbon_report_filters(client, db, manager, customer, other_customer, create_shipment):
    _, manager_headers = manager
    customer_id, headers = customer
    other_id, _ = other_customer
    recent = create_shipment(customer_id)
    old = create_shipment(customer_id, transport_type="rail")
    row = db.get(Shipment, old["id"])
    row.created_at = datetime.utcnow() - timedelta(days=120)
    db.commit()

    body = client.get("/dashboards/carbon-report", headers=headers).json()
    assert body["shipment_count"] == 2
    assert body["total_footprint"] == 42.0
    assert body["carbon_saved"] == 12.6
    assert set(body["by_transport_type"]) == {"truck", "rail"}

    body = client.get("/dashboards/carbon-report?timeframe=quarter", headers=headers).json()
    assert [s["id"] for s in body["shipments"]] == [recent["id"]]

    body = client.get("/dashboards/carbon-report?transport_type=rail", headers=headers).json()
    assert [s["id"] for s in body["shipments"]] == [old["id"]]

    resp = client.get(f"/dashboards/carbon-report?customer_id={other_id}", headers=headers)
    assert resp.status_code == 403
    resp = client.get(f"/dashboards/carbon-report?customer_id={customer_id}", headers=manager_headers)
    assert resp.json()["shipment_count"] == 2

def test_carbon_report_for_customer_without_shipments(client, customer):
    _, headers = customer
    body = client.get("/dashboards/carbon-report", headers=headers).json()
    assert body["shipment_count"] == 0
    assert body["average_footprint"] == 0
    assert body["sustainability_score"] == 0
    assert body["score_label"] == "Very Poor"
    assert body["by_transport_type"] == {}
