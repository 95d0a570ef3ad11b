from ecofreight.domain.ledger import is_transaction_hash

def test_add_and_list_readings(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, customer_headers = customer
    shipment = create_shipment(customer_id)
    url = f"/shipments/{shipment['id']}/sensors/"

    later = client.post(url, json={
        "timestamp": "2024-05-01T12:00:00", "temperature": 4.5, "humidity": 40, "battery_level": 80,
    }, headers=headers)
    assert later.status_code == 201
    assert is_transaction_hash(later.json()["blockchain_tx_hash"])

    earlier = client.post(url, json={
        "timestamp": "2024-05-01T08:00:00", "temperature": 3.9, "shock_detected": True,
        "latitude": 52.52, "longitude": 13.40,
    }, headers=headers)
    assert earlier.status_code == 201

    readings = client.get(url, headers=customer_headers).json()
    assert [r["id"] for r in readings] == [earlier.json()["id"], later.json()["id"]]

    latest = client.get(f"{url}latest", headers=customer_headers).json()
    assert latest["id"] == later.json()["id"]

def test_latest_without_readings_is_null(client, manager, customer, create_shipment):
    _, headers = manager
    customer_id, _ = customer
    shipment = create_shipment(customer_id)
    resp = client.get(f"/shipments/{shipment['id']}/sensors/latest", headers=headers)
    assert resp.status_code == 200
    assert resp.json() is None

def test_reading_validation_and_permissions(client, manager, driver, customer, create_shipment):
    _, headers = manager
    _, driver_headers = driver
    customer_id, customer_headers = customer
    shipment = create_shipment(customer_id)
    url = f"/shipments/{shipment['id']}/sensors/"

    assert client.post(url, json={"humidity": 140}, headers=headers).status_code == 422
    assert client.post(url, json={"temperature": 5}, headers=customer_headers).status_code == 403
    # Drivers may only report on shipments assigned to them
    assert client.post(url, json={"temperature": 5}, headers=driver_headers).status_code == 403
    assert client.post("/shipments/missing/sensors/", json={"temperature": 5}, headers=headers).status_code == 404
