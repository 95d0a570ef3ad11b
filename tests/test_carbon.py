from datetime import datetime, timedelta
import pytest
from ecofreight.domain import carbon

def test_estimate_footprint_uses_emission_factor():
    # 1 tonne by truck over 500 km: 62 g/t-km * 1 t * 500 km = 31 kg
    assert carbon.estimate_footprint("truck", 1000, 500) == 31.0
    assert carbon.estimate_footprint("air", 2000, 1000) == 1204.0
    assert carbon.estimate_footprint("ship", 1000) == 4.0

def test_estimate_footprint_unknown_type_and_missing_weight():
    assert carbon.estimate_footprint("hovercraft", 1000, 500) == carbon.estimate_footprint("truck", 1000, 500)
    assert carbon.estimate_footprint("rail", None) == 0.0

def test_fuel_consumption():
    assert carbon.fuel_consumption(100, "truck") == pytest.approx(35.0)
    assert carbon.fuel_consumption(100, "air") == pytest.approx(280.0)

def test_total_and_average():
    items = [{"carbon_footprint": 10}, {"carbon_footprint": 20.5}, {"carbon_footprint": None}]
    assert carbon.total_footprint(items) == pytest.approx(30.5)
    assert carbon.average_footprint(items) == pytest.approx(30.5 / 3)

def test_average_of_empty_is_zero():
    assert carbon.total_footprint([]) == 0
    assert carbon.average_footprint([]) == 0

def test_estimated_savings_is_thirty_percent():
    assert carbon.estimated_savings(200) == pytest.approx(60.0)

def test_breakdown_percentages_sum_to_100():
    items = [
        {"transport_type": "truck", "carbon_footprint": 12.3},
        {"transport_type": "truck", "carbon_footprint": 7.7},
        {"transport_type": "air", "carbon_footprint": 120.0},
        {"transport_type": "rail", "carbon_footprint": 3.33},
    ]
    breakdown = carbon.breakdown_by_transport(items)
    assert breakdown["truck"]["count"] == 2
    assert breakdown["truck"]["total"] == pytest.approx(20.0)
    assert sum(e["percentage"] for e in breakdown.values()) == pytest.approx(100.0)

def test_breakdown_falls_back_to_counts_when_total_is_zero():
    items = [
        {"transport_type": "truck", "carbon_footprint": 0},
        {"transport_type": "ship", "carbon_footprint": 0},
        {"transport_type": "ship", "carbon_footprint": None},
        {"transport_type": "rail", "carbon_footprint": 0},
    ]
    breakdown = carbon.breakdown_by_transport(items)
    assert breakdown["ship"]["percentage"] == pytest.approx(50.0)
    assert sum(e["percentage"] for e in breakdown.values()) == pytest.approx(100.0)

def test_breakdown_of_empty_input():
    assert carbon.breakdown_by_transport([]) == {}

@pytest.mark.parametrize("items", [
    [],
    [{"transport_type": "air", "carbon_footprint": 100000}],
    [{"transport_type": "rail", "carbon_footprint": -500}],
    [{"transport_type": "mystery", "carbon_footprint": 0}],
    [{"transport_type": "ship", "carbon_footprint": 1}, {"transport_type": "truck", "carbon_footprint": 9999}],
])
def test_sustainability_score_is_clamped(items):
    score = carbon.sustainability_score(items)
    assert 0 <= score <= 100

def test_sustainability_score_prefers_rail_over_air():
    rail = [{"transport_type": "rail", "carbon_footprint": 5}]
    air = [{"transport_type": "air", "carbon_footprint": 500}]
    assert carbon.sustainability_score(rail) > carbon.sustainability_score(air)
    assert carbon.sustainability_score([]) == 0

def test_shipment_score_against_baseline():
    assert carbon.shipment_score(50, "truck") == 50
    assert carbon.shipment_score(0, "rail") == 100
    assert carbon.shipment_score(5000, "air") == 0

@pytest.mark.parametrize("score,label", [
    (95, "Excellent"), (80, "Excellent"), (79, "Good"), (60, "Good"),
    (45, "Average"), (20, "Poor"), (19, "Very Poor"), (0, "Very Poor"),
])
def test_score_label(score, label):
    assert carbon.score_label(score) == label

def test_filter_shipments_by_timeframe_and_type():
    now = datetime(2024, 6, 30)
    items = [
        {"transport_type": "truck", "created_at": now - timedelta(days=5)},
        {"transport_type": "rail", "created_at": now - timedelta(days=60)},
        {"transport_type": "truck", "created_at": now - timedelta(days=200)},
        {"transport_type": "air", "created_at": now - timedelta(days=400)},
    ]
    assert len(carbon.filter_shipments(items, "all", "all", now=now)) == 4
    assert len(carbon.filter_shipments(items, "month", "all", now=now)) == 1
    assert len(carbon.filter_shipments(items, "quarter", "all", now=now)) == 2
    assert len(carbon.filter_shipments(items, "year", "truck", now=now)) == 2

def test_months_before_uses_calendar_months():
    assert carbon.months_before(datetime(2024, 5, 15, 9, 30), 1) == datetime(2024, 4, 15, 9, 30)
    assert carbon.months_before(datetime(2024, 1, 10), 3) == datetime(2023, 10, 10)
    assert carbon.months_before(datetime(2024, 3, 31), 1) == datetime(2024, 2, 29)
    assert carbon.months_before(datetime(2024, 2, 29), 12) == datetime(2023, 2, 28)

def test_month_timeframe_follows_calendar_not_thirty_days():
    now = datetime(2024, 3, 31)
    # 31 days back is still inside the calendar month window (since Feb 29)
    items = [{"transport_type": "truck", "created_at": datetime(2024, 2, 29, 12)}]
    assert len(carbon.filter_shipments(items, "month", "all", now=now)) == 1
    assert carbon.filter_shipments([{"transport_type": "truck", "created_at": datetime(2024, 2, 28)}], "month", now=now) == []

def test_carbon_report_shape():
    items = [
        {"transport_type": "truck", "carbon_footprint": 40},
        {"transport_type": "rail", "carbon_footprint": 10},
    ]
    report = carbon.carbon_report(items)
    assert report["shipment_count"] == 2
    assert report["total_footprint"] == 50
    assert report["average_footprint"] == 25
    assert report["carbon_saved"] == 15
    assert report["score_label"] == carbon.score_label(report["sustainability_score"])
