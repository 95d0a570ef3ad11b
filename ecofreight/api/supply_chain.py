from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ecofreight.infrastructure.db import get_db
from ecofreight.application.supply_chain_service import SupplyChainService
from ecofreight.application.shipment_service import ShipmentService
from ecofreight.application.schemas import (
    DocumentCreate, DocumentRead, EventCreate, EventRead, OwnershipTransfer, SupplyChainQuery,
)
from ecofreight.domain.models import User
from .deps import get_current_user, require_role

router = APIRouter(prefix="/supply-chain", tags=["supply-chain"])

def _check_access(db: Session, shipment_id: str, user: User, changes_status: bool = False) -> None:
    """404 for unknown shipments; drivers are limited to the shipments assigned to them."""
    service = ShipmentService(db)
    shipment = service.get(shipment_id)
    service.ensure_can_view(shipment, user)
    if changes_status:
        service.ensure_can_update(shipment, user, {"status"})

@router.get("/shipments/{shipment_id}/events", response_model=list[EventRead])
def list_events(shipment_id: str, db: Session = Depends(get_db), user: User = Depends(require_role("manager", "driver"))):
    _check_access(db, shipment_id, user)
    return SupplyChainService(db).events(shipment_id)

@router.post("/shipments/{shipment_id}/events", status_code=201)
def record_event(
    shipment_id: str,
    payload: EventCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("manager", "driver")),
):
    _check_access(db, shipment_id, user, changes_status=payload.event_type == "status_updated")
    return SupplyChainService(db).record_event(shipment_id, payload, user)

@router.get("/shipments/{shipment_id}/verify")
def verify_history(shipment_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _check_access(db, shipment_id, user)
    return SupplyChainService(db).verify_history(shipment_id)

@router.post("/shipments/{shipment_id}/transfer")
def transfer_ownership(
    shipment_id: str,
    payload: OwnershipTransfer,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("manager")),
):
    return SupplyChainService(db).transfer_ownership(shipment_id, payload)

@router.get("/shipments/{shipment_id}/documents", response_model=list[DocumentRead])
def list_documents(shipment_id: str, db: Session = Depends(get_db), user: User = Depends(require_role("manager", "driver"))):
    _check_access(db, shipment_id, user)
    return SupplyChainService(db).documents(shipment_id)

@router.post("/shipments/{shipment_id}/documents", response_model=DocumentRead, status_code=201)
def add_document(
    shipment_id: str,
    payload: DocumentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("manager", "driver")),
):
    _check_access(db, shipment_id, user)
    return SupplyChainService(db).add_document(shipment_id, payload, user)

@router.post("/query")
def query_supply_chain(payload: SupplyChainQuery, db: Session = Depends(get_db), user: User = Depends(require_role("manager"))):
    return SupplyChainService(db).query(payload)
