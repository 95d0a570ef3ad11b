import secrets
import string
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from fastapi import HTTPException
from ecofreight.core_settings import get_settings
from ecofreight.domain.models import Shipment, ShipmentEvent, User
from ecofreight.domain.carbon import estimate_footprint
from ecofreight.domain.ledger import MockLedger, get_ledger
from ecofreight.infrastructure.cache import invalidate_dashboards
from shared.core import get_logger
from .schemas import ShipmentCreate, ShipmentUpdate

logger = get_logger(__name__)

TRACKING_ALPHABET = string.ascii_uppercase + string.digits
DRIVER_EDITABLE_FIELDS = {"status", "actual_arrival_date"}
FOOTPRINT_INPUTS = {"transport_type", "weight", "distance_km"}

def add_event(db: Session, shipment_id: str, event_type: str, data: dict, tx_hash: Optional[str] = None) -> ShipmentEvent:
    """Stage a shipment event; the caller commits."""
    event = ShipmentEvent(shipment_id=shipment_id, event_type=event_type, data=data, blockchain_tx_hash=tx_hash)
    db.add(event)
    return event

class ShipmentService:
    def __init__(self, db: Session, ledger: Optional[MockLedger] = None):
        self.db = db
        self.ledger = ledger or get_ledger()
        self.settings = get_settings()

    def _generate_tracking_id(self) -> str:
        """ECO- followed by 8 random upper-case letters and digits, unique in the table."""
        while True:
            tracking_id = "ECO-" + "".join(secrets.choice(TRACKING_ALPHABET) for _ in range(8))
            exists = self.db.query(Shipment.id).filter(Shipment.tracking_id == tracking_id).first()
            if not exists:
                return tracking_id

    def _estimate(self, transport_type: str, weight: Optional[float], distance_km: Optional[float]) -> float:
        return estimate_footprint(transport_type, weight, distance_km or self.settings.DEFAULT_DISTANCE_KM)

    def list(
        self,
        status: Optional[str] = None,
        transport_type: Optional[str] = None,
        customer_id: Optional[str] = None,
        driver_id: Optional[str] = None,
        limit: Optional[int] = None,
    ):
        query = self.db.query(Shipment)
        if status:
            query = query.filter(Shipment.status == status)
        if transport_type:
            query = query.filter(Shipment.transport_type == transport_type)
        if customer_id:
            query = query.filter(Shipment.customer_id == customer_id)
        if driver_id:
            query = query.filter(Shipment.assigned_driver_id == driver_id)
        query = query.order_by(Shipment.created_at.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def list_visible(self, user: User, **filters):
        """Customers only see their own shipments and drivers only their assignments."""
        if user.role == "customer":
            filters["customer_id"] = user.id
        elif user.role == "driver":
            filters["driver_id"] = user.id
        return self.list(**filters)

    def get(self, shipment_id: str) -> Shipment:
        shipment = self.db.query(Shipment).filter(Shipment.id == shipment_id).first()
        if not shipment:
            raise HTTPException(status_code=404, detail="Shipment not found")
        return shipment

    def get_by_tracking_id(self, tracking_id: str) -> Shipment:
        shipment = self.db.query(Shipment).filter(Shipment.tracking_id == tracking_id.strip().upper()).first()
        if not shipment:
            raise HTTPException(status_code=404, detail="Shipment not found")
        return shipment

    def ensure_can_view(self, shipment: Shipment, user: User) -> None:
        if user.role == "manager":
            return
        if user.role == "customer" and shipment.customer_id == user.id:
            return
        if user.role == "driver" and shipment.assigned_driver_id == user.id:
            return
        raise HTTPException(status_code=403, detail="Not allowed to access this shipment")

    def ensure_can_update(self, shipment: Shipment, user: User, fields: set) -> None:
        if user.role == "manager":
            return
        if user.role == "driver" and shipment.assigned_driver_id == user.id:
            if fields <= DRIVER_EDITABLE_FIELDS:
                return
            raise HTTPException(status_code=403, detail="Drivers may only update shipment status")
        raise HTTPException(status_code=403, detail="Not allowed to update this shipment")

    def create(self, data: ShipmentCreate, created_by: Optional[str] = None) -> Shipment:
        payload = data.model_dump()
        payload["carbon_footprint"] = self._estimate(data.transport_type, data.weight, data.distance_km)
        payload["tracking_id"] = self._generate_tracking_id()
        payload["status"] = "processing"

        shipment = Shipment(**payload)
        self.db.add(shipment)
        self.db.flush()  # assign id
        add_event(self.db, shipment.id, "created", {
            "tracking_id": shipment.tracking_id,
            "created_by": created_by,
            "carbon_footprint": shipment.carbon_footprint,
        })
        self.db.commit()
        logger.info(f"Shipment {shipment.tracking_id} created ({shipment.carbon_footprint} kg CO2)")

        # The shipment stands even if the ledger registration fails
        try:
            result = self.ledger.register({
                "shipment_id": shipment.id,
                "tracking_id": shipment.tracking_id,
                "origin": shipment.origin,
                "destination": shipment.destination,
                "transport_type": shipment.transport_type,
                "carbon_footprint": shipment.carbon_footprint,
            })
            shipment.blockchain_tx_hash = result["transaction_hash"]
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Ledger registration failed for shipment {shipment.id}", exc_info=True)

        invalidate_dashboards()
        self.db.refresh(shipment)
        return shipment

    def update(self, shipment_id: str, data: ShipmentUpdate, user: Optional[User] = None) -> Shipment:
        shipment = self.get(shipment_id)
        update_data = data.model_dump(exclude_unset=True)
        if user is not None:
            self.ensure_can_update(shipment, user, set(update_data))

        previous_status = shipment.status
        for key, value in update_data.items():
            setattr(shipment, key, value)

        if FOOTPRINT_INPUTS & update_data.keys():
            shipment.carbon_footprint = self._estimate(shipment.transport_type, shipment.weight, shipment.distance_km)

        new_status = update_data.get("status")
        # Any status may follow any other; only record the change
        if new_status and new_status != previous_status:
            if new_status == "delivered" and shipment.actual_arrival_date is None:
                shipment.actual_arrival_date = datetime.utcnow()
            self._record_status_change(shipment, previous_status, new_status, user)

        self.db.commit()
        self.db.refresh(shipment)
        invalidate_dashboards()
        return shipment

    def _record_status_change(self, shipment: Shipment, previous: str, new: str, user: Optional[User]) -> None:
        tx_hash = None
        try:
            result = self.ledger.update(shipment.id, status=new, metadata={"previous_status": previous})
            tx_hash = result["transaction_hash"]
            shipment.blockchain_tx_hash = tx_hash
        except Exception:
            logger.error(f"Ledger update failed for shipment {shipment.id}", exc_info=True)
        add_event(self.db, shipment.id, "status_updated", {
            "status": new,
            "previous_status": previous,
            "updated_by": user.id if user else None,
        }, tx_hash)
        logger.info(f"Shipment {shipment.tracking_id} status {previous} -> {new}")

    def delete(self, shipment_id: str) -> None:
        shipment = self.get(shipment_id)
        self.db.delete(shipment)
        self.db.commit()
        invalidate_dashboards()
        logger.info(f"Shipment {shipment_id} deleted")
