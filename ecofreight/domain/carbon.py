"""Carbon footprint estimates and sustainability scoring.

Everything here is pure arithmetic over shipment-like items: ORM rows or plain
dicts exposing ``carbon_footprint``, ``transport_type`` and ``created_at``.
"""

import calendar
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

# g CO2 per tonne-km
EMISSION_FACTORS: Dict[str, float] = {
    "truck": 62.0,
    "rail": 22.0,
    "ship": 8.0,
    "air": 602.0,
    "multi-modal": 40.0,
}

# litres per km
FUEL_CONSUMPTION_RATES: Dict[str, float] = {
    "truck": 0.35,
    "ship": 0.01,
    "rail": 0.05,
    "air": 2.8,
}

# kg CO2 a typical shipment of each mode emits; used for per-shipment scores
BASELINE_EMISSIONS: Dict[str, float] = {
    "truck": 100.0,
    "ship": 150.0,
    "rail": 50.0,
    "air": 700.0,
}

MODE_WEIGHTS: Dict[str, float] = {
    "rail": 90.0,
    "ship": 70.0,
    "multi-modal": 60.0,
    "truck": 40.0,
    "air": 20.0,
}
UNKNOWN_MODE_WEIGHT = 50.0

# Share of the fleet score contributed by the transport mix; the rest comes from average footprint
MIX_SHARE = 0.7
FOOTPRINT_BASELINE_KG = 100.0

SAVINGS_RATE = 0.3

SCORE_LABELS = (
    (80, "Excellent"),
    (60, "Good"),
    (40, "Average"),
    (20, "Poor"),
)

# Calendar months to look back
TIMEFRAMES = {
    "month": 1,
    "quarter": 3,
    "year": 12,
}


def months_before(moment: datetime, months: int) -> datetime:
    """Same day and time ``months`` calendar months earlier, clamped to the month's last day."""
    month_index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(month_index, 12)
    day = min(moment.day, calendar.monthrange(year, month + 1)[1])
    return moment.replace(year=year, month=month + 1, day=day)


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def _footprint(item: Any) -> float:
    return float(_field(item, "carbon_footprint") or 0.0)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def estimate_footprint(transport_type: str, weight_kg: Optional[float], distance_km: float = 500.0) -> float:
    """Estimate emissions in kg CO2 for moving ``weight_kg`` over ``distance_km``.

    Unknown transport types are estimated as truck freight. A missing weight
    gives a zero estimate.
    """
    factor = EMISSION_FACTORS.get(transport_type, EMISSION_FACTORS["truck"])
    tonnes = (weight_kg or 0.0) / 1000.0
    emissions = factor * tonnes * distance_km / 1000.0
    return round(emissions, 2)


def fuel_consumption(distance_km: float, transport_type: str) -> float:
    rate = FUEL_CONSUMPTION_RATES.get(transport_type, FUEL_CONSUMPTION_RATES["truck"])
    return distance_km * rate


def total_footprint(shipments: Iterable[Any]) -> float:
    return sum(_footprint(s) for s in shipments)


def average_footprint(shipments: Iterable[Any]) -> float:
    items = list(shipments)
    if not items:
        return 0.0
    return total_footprint(items) / len(items)


def estimated_savings(total: float) -> float:
    """Savings against the industry average, assumed to be a flat 30%."""
    return total * SAVINGS_RATE


def breakdown_by_transport(shipments: Iterable[Any]) -> Dict[str, Dict[str, float]]:
    """Per transport type: total footprint, shipment count and percentage share.

    Shares are taken of the total footprint. When every footprint is zero the
    shares fall back to shipment counts so they still add up to 100.
    """
    items = list(shipments)
    breakdown: Dict[str, Dict[str, float]] = {}
    for item in items:
        mode = _field(item, "transport_type") or "unknown"
        entry = breakdown.setdefault(mode, {"total": 0.0, "count": 0, "percentage": 0.0})
        entry["total"] += _footprint(item)
        entry["count"] += 1

    grand_total = sum(entry["total"] for entry in breakdown.values())
    for entry in breakdown.values():
        if grand_total > 0:
            entry["percentage"] = entry["total"] / grand_total * 100.0
        else:
            entry["percentage"] = entry["count"] / len(items) * 100.0
    return breakdown


def shipment_score(carbon_footprint: float, transport_type: str) -> int:
    baseline = BASELINE_EMISSIONS.get(transport_type, BASELINE_EMISSIONS["truck"])
    return int(_clamp(round((1 - (carbon_footprint or 0.0) / baseline) * 100)))


def transport_mix_score(shipments: Iterable[Any]) -> float:
    items = list(shipments)
    if not items:
        return 0.0
    weights = [MODE_WEIGHTS.get(_field(s, "transport_type"), UNKNOWN_MODE_WEIGHT) for s in items]
    return sum(weights) / len(weights)


def sustainability_score(shipments: Iterable[Any]) -> int:
    """Heuristic 0-100 score from the transport mix and the average footprint."""
    items = list(shipments)
    if not items:
        return 0
    mix = transport_mix_score(items)
    footprint = _clamp((1 - average_footprint(items) / FOOTPRINT_BASELINE_KG) * 100)
    return int(_clamp(round(MIX_SHARE * mix + (1 - MIX_SHARE) * footprint)))


def score_label(score: float) -> str:
    for threshold, label in SCORE_LABELS:
        if score >= threshold:
            return label
    return "Very Poor"


def filter_shipments(
    shipments: Iterable[Any],
    timeframe: str = "all",
    transport_type: str = "all",
    now: Optional[datetime] = None,
) -> List[Any]:
    items = list(shipments)
    if timeframe in TIMEFRAMES:
        cutoff = months_before(now or datetime.utcnow(), TIMEFRAMES[timeframe])
        items = [s for s in items if _field(s, "created_at") and _field(s, "created_at") >= cutoff]
    if transport_type and transport_type != "all":
        items = [s for s in items if _field(s, "transport_type") == transport_type]
    return items


def carbon_report(shipments: Iterable[Any]) -> Dict[str, Any]:
    items = list(shipments)
    total = total_footprint(items)
    score = sustainability_score(items)
    return {
        "shipment_count": len(items),
        "total_footprint": round(total, 2),
        "average_footprint": round(average_footprint(items), 2),
        "carbon_saved": round(estimated_savings(total), 2),
        "by_transport_type": breakdown_by_transport(items),
        "sustainability_score": score,
        "score_label": score_label(score),
    }
