import re
from ecofreight.domain.ledger import get_ledger, is_transaction_hash
from ecofreight.domain.models import ShipmentEvent

TRACKING_RE = re.compile(r"^ECO-[A-Z0-9]{8}$")

def test_create_shipment(client, customer, create_shipment):
    customer_id, _ = customer
    shipment = create_shipment(customer_id)
    assert TRACKING_RE.match(shipment["tracking_id"])
    assert shipment["status"] == "processing"
    assert shipment["badge"] == {"status": "processing", "label": "Processing", "color": "yellow"}
    # 1 t by truck over the default 500 km
    assert shipment["carbon_footprint"] == 31.0
    assert is_transaction_hash(shipment["blockchain_tx_hash"])
    assert get_ledger().verify(shipment["blockchain_tx_hash"])["known"]

def test_create_with_explicit_distance(customer, create_shipment):
    customer_id, _ = customer
    shipment = create_shipment(customer_id, transport_type="rail", weight=2000, distance_km=1000)
    assert shipment["carbon_footprint"] == 44.0

def test_create_records_created_event(db, customer, create_shipment):
    customer_id, _ = customer
    shipment = create_shipment(customer_id)
    events = db.query(ShipmentEvent).filter(ShipmentEvent.shipment_id == shipment["id"]).all()
    assert [e.event_type for e in events] == ["created"]

def test_ledger_failure_does_not_fail_creation(client, manager, customer, monkeypatch):
    _, headers = manager
    customer_id, _ = customer

    def broken(*args, **kwargs):
        raise RuntimeError("ledger down")

    monkeypatch.setattr(get_ledger(), "register", broken)
    resp = client.post("/shipments/", json={
        "title": "Paper", "origin": "A", "destination": "B", "transport_type": "ship",
        "product_type": "paper", "quantity": 1, "weight": 500, "customer_id": customer_id,
    }, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["blockchain_tx_hash"] is None

def test_only_managers_create(client, customer, driver):
    customer_id, customer_headers = customer
    _, driver_headers = driver
    payload = {
        "title": "X", "origin": "A", "destination": "B", "product_type": "p",
        "quantity": 1, "customer_id": customer_id,
    }
    assert client.post("/shipments/", json=payload, headers=customer_headers).status_code == 403
    assert client.post("/shipments/", json=payload, headers=driver_headers).status_code == 403

def test_create_validation(client, manager, customer):
    _, headers = manager
    customer_id, _ = customer
    resp = client.post("/shipments/", json={
        "title": "X", "origin": "A", "destination": "B", "product_type": "p",
        "quantity": 0, "transport_type": "rocket", "customer_id": customer_id,
    }, headers=headers)
    assert resp.status_code == 422

def test_list_is_scoped_by_role(client, manager, driver, customer, other_customer, create_shipment):
    _, manager_headers = manager
    driver_id, driver_headers = driver
    customer_id, customer_headers = customer
    other_id, _ = other_customer

    mine = create_shipment(customer_id, assigned_driver_id=driver_id)
    create_shipment(other_id)

    assert len(client.get("/shipments/", headers=manager_headers).json()) == 2
    assert [s["id"] for s in client.get("/shipments/", headers=customer_headers).json()] == [mine["id"]]
    assert [s["id"] for s in client.get("/shipments/", headers=driver_headers).json()] == [mine["id"]]

def test_list_filters_newest_first(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, _ = customer
    first = create_shipment(customer_id, transport_type="air")
    second = create_shipment(customer_id, transport_type="rail")

    listed = client.get("/shipments/", headers=headers).json()
    assert [s["id"] for s in listed] == [second["id"], first["id"]]

    air = client.get("/shipments/?transport_type=air", headers=headers).json()
    assert [s["id"] for s in air] == [first["id"]]

def test_get_and_track(client, customer, other_customer, create_shipment):
    customer_id, headers = customer
    _, other_headers = other_customer
    shipment = create_shipment(customer_id)

    assert client.get(f"/shipments/{shipment['id']}", headers=headers).json()["id"] == shipment["id"]
    tracked = client.get(f"/shipments/track/{shipment['tracking_id'].lower()}", headers=headers)
    assert tracked.status_code == 200
    assert tracked.json()["id"] == shipment["id"]

    assert client.get(f"/shipments/{shipment['id']}", headers=other_headers).status_code == 403
    assert client.get("/shipments/missing", headers=headers).status_code == 404
    assert client.get("/shipments/track/ECO-00000000", headers=headers).status_code == 404

def test_status_change_records_event_and_hash(client, db, manager, customer, create_shipment):
    _, headers = manager
    customer_id, _ = customer
    shipment = create_shipment(customer_id)

    resp = client.put(f"/shipments/{shipment['id']}/status", json={"status": "in-transit"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["badge"]["label"] == "In Transit"
    assert body["blockchain_tx_hash"] != shipment["blockchain_tx_hash"]

    events = (
        db.query(ShipmentEvent)
        .filter(ShipmentEvent.shipment_id == shipment["id"], ShipmentEvent.event_type == "status_updated")
        .all()
    )
    assert len(events) == 1
    assert events[0].data["status"] == "in-transit"
    assert events[0].data["previous_status"] == "processing"

def test_any_status_may_follow_any_other(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, _ = customer
    shipment = create_shipment(customer_id)

    for status in ("delivered", "processing", "delayed", "in-transit", "delivered"):
        resp = client.put(f"/shipments/{shipment['id']}/status", json={"status": status}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == status

def test_delivered_stamps_arrival(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, _ = customer
    shipment = create_shipment(customer_id)
    assert shipment["actual_arrival_date"] is None

    resp = client.put(f"/shipments/{shipment['id']}/status", json={"status": "delivered"}, headers=headers)
    assert resp.json()["actual_arrival_date"] is not None

def test_driver_updates_only_assigned_status(client, driver, customer, create_shipment):
    driver_id, headers = driver
    customer_id, _ = customer
    assigned = create_shipment(customer_id, assigned_driver_id=driver_id)
    unassigned = create_shipment(customer_id)

    resp = client.put(f"/shipments/{assigned['id']}/status", json={"status": "in-transit"}, headers=headers)
    assert resp.status_code == 200

    resp = client.patch(f"/shipments/{assigned['id']}", json={"title": "Renamed"}, headers=headers)
    assert resp.status_code == 403

    resp = client.put(f"/shipments/{unassigned['id']}/status", json={"status": "delayed"}, headers=headers)
    assert resp.status_code == 403

def test_customer_cannot_update(client, customer, create_shipment):
    customer_id, headers = customer
    shipment = create_shipment(customer_id)
    resp = client.put(f"/shipments/{shipment['id']}/status", json={"status": "delivered"}, headers=headers)
    assert resp.status_code == 403

def test_partial_update_keeps_other_fields(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, _ = customer
    shipment = create_shipment(customer_id)

    resp = client.patch(f"/shipments/{shipment['id']}", json={"title": "Standing desks"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "Standing desks"
    assert resp.json()["origin"] == "Berlin"
    assert resp.json()["status"] == "processing"

def test_null_for_required_fields_is_rejected(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, _ = customer
    shipment = create_shipment(customer_id)

    for field in ("title", "origin", "transport_type", "quantity", "status"):
        resp = client.patch(f"/shipments/{shipment['id']}", json={field: None}, headers=headers)
        assert resp.status_code == 422, field
    # Nullable columns may still be cleared
    resp = client.patch(f"/shipments/{shipment['id']}", json={"description": None}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "Office chairs"

def test_footprint_follows_mode_and_weight_changes(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, _ = customer
    shipment = create_shipment(customer_id)
    assert shipment["carbon_footprint"] == 31.0

    resp = client.patch(f"/shipments/{shipment['id']}", json={"transport_type": "air", "weight": 5000}, headers=headers)
    assert resp.json()["carbon_footprint"] == 1505.0

    # Unrelated edits leave the estimate alone
    resp = client.patch(f"/shipments/{shipment['id']}", json={"title": "Desks"}, headers=headers)
    assert resp.json()["carbon_footprint"] == 1505.0

def test_footprint_keeps_distance_given_at_creation(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, _ = customer
    shipment = create_shipment(customer_id, transport_type="rail", weight=2000, distance_km=1000)
    assert shipment["distance_km"] == 1000

    resp = client.patch(f"/shipments/{shipment['id']}", json={"weight": 4000}, headers=headers)
    assert resp.json()["carbon_footprint"] == 88.0

    resp = client.patch(f"/shipments/{shipment['id']}", json={"weight": None}, headers=headers)
    assert resp.json()["carbon_footprint"] == 0.0

def test_delete(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, customer_headers = customer
    shipment = create_shipment(customer_id)

    assert client.delete(f"/shipments/{shipment['id']}", headers=customer_headers).status_code == 403
    assert client.delete(f"/shipments/{shipment['id']}", headers=headers).status_code == 204
    assert client.get(f"/shipments/{shipment['id']}", headers=headers).status_code == 404
    assert client.delete(f"/shipments/{shipment['id']}", headers=headers).status_code == 404
