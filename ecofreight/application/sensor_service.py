from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from ecofreight.domain.models import SensorReading
from ecofreight.domain.ledger import MockLedger, get_ledger
from ecofreight.infrastructure.cache import invalidate_dashboards
from shared.core import get_logger
from .schemas import SensorReadingCreate
from .shipment_service import ShipmentService

logger = get_logger(__name__)

class SensorService:
    def __init__(self, db: Session, ledger: Optional[MockLedger] = None):
        self.db = db
        self.ledger = ledger or get_ledger()

    def list(self, shipment_id: str):
        ShipmentService(self.db).get(shipment_id)
        return (
            self.db.query(SensorReading)
            .filter(SensorReading.shipment_id == shipment_id)
            .order_by(SensorReading.timestamp.asc())
            .all()
        )

    def latest(self, shipment_id: str) -> Optional[SensorReading]:
        ShipmentService(self.db).get(shipment_id)
        return (
            self.db.query(SensorReading)
            .filter(SensorReading.shipment_id == shipment_id)
            .order_by(SensorReading.timestamp.desc())
            .first()
        )

    def add(self, shipment_id: str, data: SensorReadingCreate) -> SensorReading:
        shipment = ShipmentService(self.db).get(shipment_id)
        payload = data.model_dump()
        payload["timestamp"] = payload["timestamp"] or datetime.utcnow()
        reading = SensorReading(shipment_id=shipment.id, **payload)

        try:
            result = self.ledger.update(shipment.id, status="sensor_reading", metadata={
                "temperature": reading.temperature,
                "humidity": reading.humidity,
                "shock_detected": reading.shock_detected,
            })
            reading.blockchain_tx_hash = result["transaction_hash"]
        except Exception:
            logger.error(f"Ledger update failed for sensor reading on {shipment.id}", exc_info=True)

        self.db.add(reading)
        self.db.commit()
        self.db.refresh(reading)
        if reading.shock_detected:
            logger.warning(f"Shock detected on shipment {shipment.tracking_id}")
        invalidate_dashboards()
        return reading
