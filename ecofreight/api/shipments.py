from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ecofreight.infrastructure.db import get_db
from ecofreight.application.shipment_service import ShipmentService
from ecofreight.application.schemas import (
    ShipmentCreate, ShipmentRead, ShipmentStatus, ShipmentUpdate, StatusUpdate, TransportType,
)
from ecofreight.domain.models import User
from .deps import get_current_user, require_role

router = APIRouter(prefix="/shipments", tags=["shipments"])

@router.get("/", response_model=list[ShipmentRead])
def list_shipments(
    status: Optional[ShipmentStatus] = None,
    transport_type: Optional[TransportType] = None,
    customer_id: Optional[str] = None,
    assigned_driver_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List shipments, newest first. Customers and drivers only see their own."""
    return ShipmentService(db).list_visible(
        user,
        status=status,
        transport_type=transport_type,
        customer_id=customer_id,
        driver_id=assigned_driver_id,
    )

@router.get("/track/{tracking_id}", response_model=ShipmentRead)
def track_shipment(tracking_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    service = ShipmentService(db)
    shipment = service.get_by_tracking_id(tracking_id)
    service.ensure_can_view(shipment, user)
    return shipment

@router.get("/{shipment_id}", response_model=ShipmentRead)
def get_shipment(shipment_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    service = ShipmentService(db)
    shipment = service.get(shipment_id)
    service.ensure_can_view(shipment, user)
    return shipment

@router.post("/", response_model=ShipmentRead, status_code=201)
def create_shipment(payload: ShipmentCreate, db: Session = Depends(get_db), user: User = Depends(require_role("manager"))):
    return ShipmentService(db).create(payload, created_by=user.id)

@router.patch("/{shipment_id}", response_model=ShipmentRead)
def update_shipment(
    shipment_id: str,
    payload: ShipmentUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("manager", "driver")),
):
    return ShipmentService(db).update(shipment_id, payload, user=user)

@router.put("/{shipment_id}/status", response_model=ShipmentRead)
def update_status(
    shipment_id: str,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("manager", "driver")),
):
    return ShipmentService(db).update(shipment_id, ShipmentUpdate(status=payload.status), user=user)

@router.delete("/{shipment_id}", status_code=204)
def delete_shipment(shipment_id: str, db: Session = Depends(get_db), user: User = Depends(require_role("manager"))):
    ShipmentService(db).delete(shipment_id)
    return None
