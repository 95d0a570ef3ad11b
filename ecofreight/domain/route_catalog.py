"""Pre-authored delivery routes for the route optimization demo.

Each route has one hand-made "optimized" variant. Optimizing swaps the two;
there is no search involved.
"""

ROUTES = {
    "1": {
        "id": "1",
        "name": "Daily Delivery Route",
        "stops": [
            {"id": "1", "name": "Central Warehouse", "address": "123 Main St, New York, NY", "time": "08:00 AM", "status": "current"},
            {"id": "2", "name": "Office Supplies Inc", "address": "456 Business Ave, New York, NY", "time": "09:30 AM", "status": "upcoming"},
            {"id": "3", "name": "Tech Solutions", "address": "789 Innovation Blvd, New York, NY", "time": "11:00 AM", "status": "upcoming"},
            {"id": "4", "name": "Downtown Mall", "address": "101 Shopping Center, New York, NY", "time": "01:00 PM", "status": "upcoming"},
            {"id": "5", "name": "Hospital Campus", "address": "202 Healthcare Dr, New York, NY", "time": "02:30 PM", "status": "upcoming"},
        ],
        "distance": 42.5,
        "duration": 195,
        "fuel_consumption": 12.3,
        "carbon_emission": 28.6,
    },
    "2": {
        "id": "2",
        "name": "Weekly Distribution",
        "stops": [
            {"id": "1", "name": "Regional Distribution Center", "address": "100 Logistics Pkwy, Newark, NJ", "time": "06:00 AM", "status": "current"},
            {"id": "2", "name": "Grocery Outlet North", "address": "234 Market St, Newark, NJ", "time": "08:00 AM", "status": "upcoming"},
            {"id": "3", "name": "Grocery Outlet East", "address": "345 Food Ave, Jersey City, NJ", "time": "10:30 AM", "status": "upcoming"},
            {"id": "4", "name": "Grocery Outlet South", "address": "456 Fresh Blvd, Bayonne, NJ", "time": "01:00 PM", "status": "upcoming"},
            {"id": "5", "name": "Grocery Outlet West", "address": "567 Produce Ln, Hoboken, NJ", "time": "03:30 PM", "status": "upcoming"},
            {"id": "6", "name": "Regional Distribution Center", "address": "100 Logistics Pkwy, Newark, NJ", "time": "05:30 PM", "status": "upcoming"},
        ],
        "distance": 78.2,
        "duration": 320,
        "fuel_consumption": 22.5,
        "carbon_emission": 52.3,
    },
}

OPTIMIZED_ROUTES = {
    "1": {
        "id": "1-opt",
        "name": "Daily Delivery Route (Optimized)",
        "stops": [
            {"id": "1", "name": "Central Warehouse", "address": "123 Main St, New York, NY", "time": "08:00 AM", "status": "current"},
            {"id": "3", "name": "Tech Solutions", "address": "789 Innovation Blvd, New York, NY", "time": "09:15 AM", "status": "upcoming"},
            {"id": "5", "name": "Hospital Campus", "address": "202 Healthcare Dr, New York, NY", "time": "10:30 AM", "status": "upcoming"},
            {"id": "4", "name": "Downtown Mall", "address": "101 Shopping Center, New York, NY", "time": "11:45 AM", "status": "upcoming"},
            {"id": "2", "name": "Office Supplies Inc", "address": "456 Business Ave, New York, NY", "time": "01:00 PM", "status": "upcoming"},
        ],
        "distance": 36.2,
        "duration": 165,
        "fuel_consumption": 10.5,
        "carbon_emission": 24.3,
    },
    "2": {
        "id": "2-opt",
        "name": "Weekly Distribution (Optimized)",
        "stops": [
            {"id": "1", "name": "Regional Distribution Center", "address": "100 Logistics Pkwy, Newark, NJ", "time": "06:00 AM", "status": "current"},
            {"id": "5", "name": "Grocery Outlet West", "address": "567 Produce Ln, Hoboken, NJ", "time": "07:30 AM", "status": "upcoming"},
            {"id": "3", "name": "Grocery Outlet East", "address": "345 Food Ave, Jersey City, NJ", "time": "09:00 AM", "status": "upcoming"},
            {"id": "4", "name": "Grocery Outlet South", "address": "456 Fresh Blvd, Bayonne, NJ", "time": "11:00 AM", "status": "upcoming"},
            {"id": "2", "name": "Grocery Outlet North", "address": "234 Market St, Newark, NJ", "time": "01:30 PM", "status": "upcoming"},
            {"id": "6", "name": "Regional Distribution Center", "address": "100 Logistics Pkwy, Newark, NJ", "time": "03:00 PM", "status": "upcoming"},
        ],
        "distance": 65.7,
        "duration": 270,
        "fuel_consumption": 19.2,
        "carbon_emission": 44.5,
    },
}


def route_savings(route_id: str) -> dict:
    base = ROUTES[route_id]
    optimized = OPTIMIZED_ROUTES[route_id]
    return {
        "time_saved_minutes": base["duration"] - optimized["duration"],
        "distance_saved_km": round(base["distance"] - optimized["distance"], 1),
        "fuel_saved_liters": round(base["fuel_consumption"] - optimized["fuel_consumption"], 1),
        "carbon_saved_kg": round(base["carbon_emission"] - optimized["carbon_emission"], 1),
    }
