def test_list_and_get_routes(client, driver):
    _, headers = driver
    routes = client.get("/routes/", headers=headers).json()
    assert [r["name"] for r in routes] == ["Daily Delivery Route", "Weekly Distribution"]

    route = client.get("/routes/1", headers=headers).json()
    assert route["id"] == "1"
    optimized = client.get("/routes/1?optimized=true", headers=headers).json()
    assert optimized["id"] == "1-opt"
    assert optimized["distance"] < route["distance"]

def test_optimize_reports_savings(client, driver):
    _, headers = driver
    body = client.post("/routes/2/optimize", headers=headers).json()
    assert body["route"]["id"] == "2-opt"
    assert body["savings"] == {
        "time_saved_minutes": 50,
        "distance_saved_km": 12.5,
        "fuel_saved_liters": 3.3,
        "carbon_saved_kg": 7.8,
    }

def test_unknown_route(client, driver):
    _, headers = driver
    assert client.get("/routes/99", headers=headers).status_code == 404
    assert client.post("/routes/99/optimize", headers=headers).status_code == 404

def test_routes_require_login(client):
    assert client.get("/routes/").status_code == 401
