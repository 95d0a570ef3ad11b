from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ecofreight.infrastructure.db import get_db
from ecofreight.application.sensor_service import SensorService
from ecofreight.application.shipment_service import ShipmentService
from ecofreight.application.schemas import SensorReadingCreate, SensorReadingRead
from ecofreight.domain.models import User
from .deps import get_current_user, require_role

router = APIRouter(prefix="/shipments/{shipment_id}/sensors", tags=["sensors"])

def _check_access(db: Session, shipment_id: str, user: User) -> None:
    service = ShipmentService(db)
    service.ensure_can_view(service.get(shipment_id), user)

@router.get("/", response_model=list[SensorReadingRead])
def list_readings(shipment_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _check_access(db, shipment_id, user)
    return SensorService(db).list(shipment_id)

@router.get("/latest", response_model=Optional[SensorReadingRead])
def latest_reading(shipment_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _check_access(db, shipment_id, user)
    return SensorService(db).latest(shipment_id)

@router.post("/", response_model=SensorReadingRead, status_code=201)
def add_reading(
    shipment_id: str,
    payload: SensorReadingCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("manager", "driver")),
):
    _check_access(db, shipment_id, user)
    return SensorService(db).add(shipment_id, payload)
