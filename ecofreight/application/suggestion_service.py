"""Heuristic sustainability suggestions.

The "AI" here is a handful of fixed rules over transport type and footprint.
Distances are not stored on shipments, so cost savings use a mock distance
drawn from ``self.rng``; tests pass a seeded ``random.Random``.
"""

import random
from typing import List, Optional
from sqlalchemy.orm import Session
from fastapi import HTTPException
from ecofreight.domain.models import AISuggestion, Shipment, User
from ecofreight.domain.carbon import average_footprint, shipment_score, score_label
from ecofreight.infrastructure.cache import invalidate_dashboards
from shared.core import get_logger
from .shipment_service import ShipmentService

logger = get_logger(__name__)

MOCK_DISTANCE_RANGE = (500.0, 1500.0)
FLEET_WINDOW = 50

AIR_SHARE_THRESHOLD = 0.2
AVERAGE_FOOTPRINT_THRESHOLD = 100.0
TRUCK_COUNT_THRESHOLD = 3
DELAYED_SHARE_THRESHOLD = 0.1

class SuggestionService:
    def __init__(self, db: Session, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()

    def _mock_distance(self) -> float:
        low, high = MOCK_DISTANCE_RANGE
        return low + self.rng.random() * (high - low)

    def _save(self, suggestions: List[AISuggestion]) -> List[AISuggestion]:
        self.db.add_all(suggestions)
        self.db.commit()
        for s in suggestions:
            self.db.refresh(s)
        invalidate_dashboards()
        return suggestions

    def list(self, implemented: Optional[bool] = None, shipment_id: Optional[str] = None):
        query = self.db.query(AISuggestion)
        if implemented is not None:
            query = query.filter(AISuggestion.implemented == implemented)
        if shipment_id:
            query = query.filter(AISuggestion.shipment_id == shipment_id)
        return query.order_by(AISuggestion.created_at.desc()).all()

    def get(self, suggestion_id: str) -> AISuggestion:
        suggestion = self.db.query(AISuggestion).filter(AISuggestion.id == suggestion_id).first()
        if not suggestion:
            raise HTTPException(status_code=404, detail="Suggestion not found")
        return suggestion

    def build_for_shipment(self, shipment: Shipment, user_id: Optional[str] = None) -> List[AISuggestion]:
        footprint = shipment.carbon_footprint or 0.0
        distance = self._mock_distance()
        common = {"shipment_id": shipment.id, "user_id": user_id}
        suggestions = []

        if shipment.transport_type == "air":
            suggestions.append(AISuggestion(
                title="Switch to rail transport",
                description="Switching from air freight to rail can reduce carbon emissions by up to 70% for your route.",
                carbon_savings=footprint * 0.7,
                cost_savings=round(distance * 2.5),
                **common,
            ))
        elif shipment.transport_type == "truck":
            suggestions.append(AISuggestion(
                title="Optimize truck routes",
                description="Optimizing truck routes can save up to 25% in fuel consumption and emissions.",
                carbon_savings=footprint * 0.25,
                cost_savings=round(distance * 0.8),
                **common,
            ))
            suggestions.append(AISuggestion(
                title="Consolidate shipments",
                description="Combining multiple shipments into fewer trucks can reduce emissions and costs.",
                carbon_savings=footprint * 0.3,
                cost_savings=round(distance * 1.2),
                **common,
            ))

        suggestions.append(AISuggestion(
            title="Use eco-friendly packaging",
            description="Switching to biodegradable packaging can reduce your environmental impact.",
            carbon_savings=round(footprint * 0.1),
            cost_savings=None,
            **common,
        ))
        return suggestions

    def generate_for_shipment(self, shipment_id: str, user: Optional[User] = None) -> List[AISuggestion]:
        shipment = ShipmentService(self.db).get(shipment_id)
        suggestions = self._save(self.build_for_shipment(shipment, user.id if user else None))
        logger.info(f"Generated {len(suggestions)} suggestions for shipment {shipment.tracking_id}")
        return suggestions

    def build_fleet(self, shipments: List[Shipment], user_id: Optional[str] = None) -> List[AISuggestion]:
        """Threshold checks over a batch of recent shipments."""
        count = len(shipments)
        suggestions = []
        if count:
            air = [s for s in shipments if s.transport_type == "air"]
            trucks = [s for s in shipments if s.transport_type == "truck"]
            delayed = [s for s in shipments if s.status == "delayed"]
            average = average_footprint(shipments)

            if len(air) / count > AIR_SHARE_THRESHOLD:
                suggestions.append(AISuggestion(
                    title="Shift air freight to rail",
                    description=(
                        f"{len(air)} of your last {count} shipments went by air. "
                        "Moving eligible routes to rail can cut their emissions by up to 70%."
                    ),
                    carbon_savings=round(sum(s.carbon_footprint or 0.0 for s in air) * 0.7, 2),
                    cost_savings=None,
                    user_id=user_id,
                ))
            if average > AVERAGE_FOOTPRINT_THRESHOLD:
                suggestions.append(AISuggestion(
                    title="Consolidate shipments",
                    description=(
                        f"Average footprint is {average:.1f} kg CO2 per shipment. "
                        "Combining loads into fewer shipments lowers the total."
                    ),
                    carbon_savings=round(average * count * 0.3, 2),
                    cost_savings=None,
                    user_id=user_id,
                ))
            if len(trucks) >= TRUCK_COUNT_THRESHOLD:
                suggestions.append(AISuggestion(
                    title="Optimize truck routes",
                    description=(
                        f"{len(trucks)} recent truck shipments could share optimized routes, "
                        "saving up to 25% in fuel and emissions."
                    ),
                    carbon_savings=round(sum(s.carbon_footprint or 0.0 for s in trucks) * 0.25, 2),
                    cost_savings=None,
                    user_id=user_id,
                ))
            if len(delayed) / count > DELAYED_SHARE_THRESHOLD:
                suggestions.append(AISuggestion(
                    title="Add schedule buffers",
                    description=(
                        f"{len(delayed)} of {count} recent shipments are delayed. "
                        "Planning buffer time reduces idling and expedited re-routing."
                    ),
                    carbon_savings=None,
                    cost_savings=None,
                    user_id=user_id,
                ))

        if not suggestions:
            suggestions.append(AISuggestion(
                title="Keep up the good work",
                description="Your recent shipments are within sustainable targets. No changes recommended right now.",
                carbon_savings=0.0,
                cost_savings=None,
                user_id=user_id,
            ))
        return suggestions

    def generate_fleet_suggestions(self, user: Optional[User] = None) -> List[AISuggestion]:
        recent = ShipmentService(self.db).list(limit=FLEET_WINDOW)
        suggestions = self._save(self.build_fleet(recent, user.id if user else None))
        logger.info(f"Generated {len(suggestions)} fleet suggestions from {len(recent)} shipments")
        return suggestions

    def implement(self, suggestion_id: str) -> AISuggestion:
        suggestion = self.get(suggestion_id)
        suggestion.implemented = True
        self.db.commit()
        self.db.refresh(suggestion)
        invalidate_dashboards()
        return suggestion

    def dismiss(self, suggestion_id: str) -> None:
        suggestion = self.get(suggestion_id)
        self.db.delete(suggestion)
        self.db.commit()
        invalidate_dashboards()

    def analyze(self, shipment_id: str, user: Optional[User] = None) -> dict:
        """Generate suggestions for a shipment and summarise what they would save."""
        shipment = ShipmentService(self.db).get(shipment_id)
        suggestions = self._save(self.build_for_shipment(shipment, user.id if user else None))
        carbon_saved = sum(s.carbon_savings or 0.0 for s in suggestions)
        score = shipment_score(shipment.carbon_footprint, shipment.transport_type)
        return {
            "shipment_id": shipment.id,
            "carbon_footprint": shipment.carbon_footprint,
            "sustainability_score": score,
            "score_label": score_label(score),
            "carbon_saved": round(carbon_saved, 2),
            "fuel_saved": round(carbon_saved * 0.3, 2),
            "time_saved": round(carbon_saved * 0.2),
            "recommendations": suggestions,
        }
