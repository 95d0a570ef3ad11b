"""Role dashboards and the customer carbon report.

Summaries are cached under ``dashboard:`` keys and dropped on every write
that could change them.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session
from fastapi.encoders import jsonable_encoder
from ecofreight.domain.models import SHIPMENT_STATUSES, AISuggestion, Review, Shipment, User
from ecofreight.domain.carbon import carbon_report, filter_shipments, sustainability_score, score_label
from ecofreight.domain.status import status_badge
from ecofreight.infrastructure.cache import DASHBOARD_PREFIX, cache_get, cache_set
from shared.core import get_logger
from .schemas import ShipmentRead
from .shipment_service import ShipmentService

logger = get_logger(__name__)

RECENT_SHIPMENTS = 5
ACTIVE_STATUSES = ("processing", "in-transit", "delayed")

def _status_counts(db: Session, *criteria) -> dict:
    rows = db.query(Shipment.status, func.count(Shipment.id)).filter(*criteria).group_by(Shipment.status).all()
    counts = {status: 0 for status in SHIPMENT_STATUSES}
    for status, count in rows:
        counts[status] = count
    return counts

def _serialize(shipments) -> list:
    return [ShipmentRead.model_validate(s).model_dump() for s in shipments]

class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def _cached(self, key: str, build):
        full_key = f"{DASHBOARD_PREFIX}{key}"
        cached = cache_get(full_key)
        if cached is not None:
            return cached
        logger.debug(f"Dashboard cache miss for {key}")
        value = jsonable_encoder(build())
        cache_set(full_key, value)
        return value

    def manager(self) -> dict:
        return self._cached("manager", self._build_manager)

    def _build_manager(self) -> dict:
        counts = _status_counts(self.db)
        total_carbon = self.db.query(func.coalesce(func.sum(Shipment.carbon_footprint), 0.0)).scalar()
        recent = ShipmentService(self.db).list(limit=RECENT_SHIPMENTS)
        return {
            "total_shipments": sum(counts.values()),
            "status_counts": counts,
            "status_badges": {status: status_badge(status) for status in SHIPMENT_STATUSES},
            "total_carbon_footprint": round(float(total_carbon or 0.0), 2),
            "recent_shipments": _serialize(recent),
            "pending_reviews": self.db.query(Review).filter(Review.approved.is_(False)).count(),
            "open_suggestions": self.db.query(AISuggestion).filter(AISuggestion.implemented.is_(False)).count(),
        }

    def driver(self, user: User) -> dict:
        return self._cached(f"driver:{user.id}", lambda: self._build_driver(user.id))

    def _build_driver(self, driver_id: str) -> dict:
        counts = _status_counts(self.db, Shipment.assigned_driver_id == driver_id)
        active = (
            self.db.query(Shipment)
            .filter(Shipment.assigned_driver_id == driver_id, Shipment.status.in_(ACTIVE_STATUSES))
            .order_by(Shipment.estimated_arrival_date.asc())
            .all()
        )
        return {
            "assigned_shipments": sum(counts.values()),
            "status_counts": counts,
            "active_deliveries": _serialize(active),
        }

    def customer(self, user: User) -> dict:
        return self._cached(f"customer:{user.id}", lambda: self._build_customer(user.id))

    def _build_customer(self, customer_id: str) -> dict:
        shipments = ShipmentService(self.db).list(customer_id=customer_id)
        counts = {status: 0 for status in SHIPMENT_STATUSES}
        for s in shipments:
            counts[s.status] = counts.get(s.status, 0) + 1
        score = sustainability_score(shipments)
        return {
            "total_shipments": len(shipments),
            "status_counts": counts,
            "total_carbon_footprint": round(sum(s.carbon_footprint or 0.0 for s in shipments), 2),
            "sustainability_score": score,
            "score_label": score_label(score),
            "shipments": _serialize(shipments),
        }

    def carbon_report(self, customer_id: str, timeframe: str = "all", transport_type: str = "all") -> dict:
        key = f"carbon:{customer_id}:{timeframe}:{transport_type}"
        return self._cached(key, lambda: self._build_carbon_report(customer_id, timeframe, transport_type))

    def _build_carbon_report(self, customer_id: str, timeframe: str, transport_type: str) -> dict:
        shipments = ShipmentService(self.db).list(customer_id=customer_id)
        filtered = filter_shipments(shipments, timeframe=timeframe, transport_type=transport_type)
        report = carbon_report(filtered)
        report.update({
            "customer_id": customer_id,
            "timeframe": timeframe,
            "transport_type": transport_type,
            "shipments": _serialize(filtered),
        })
        return report
