from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from ecofreight.infrastructure.db import get_db
from ecofreight.application.ledger_service import LedgerService
from ecofreight.application.schemas import BlockchainRequest, CarbonCreditRequest, TransactionRead
from ecofreight.domain.models import User
from .deps import get_current_user, require_role

router = APIRouter(prefix="/blockchain", tags=["blockchain"])

@router.post("/verify")
def blockchain_verify(payload: BlockchainRequest, user: User = Depends(get_current_user)):
    """Simulated verify/register/update against the mock ledger."""
    return LedgerService().handle(payload)

@router.post("/carbon-credits/{shipment_id}")
def issue_carbon_credits(
    shipment_id: str,
    payload: Optional[CarbonCreditRequest] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("manager")),
):
    return LedgerService(db).issue_carbon_credits(shipment_id, payload.sustainability_score if payload else None)

@router.get("/transactions", response_model=list[TransactionRead])
def recent_transactions(limit: int = Query(5, ge=1, le=100), user: User = Depends(get_current_user)):
    return LedgerService().recent(limit)
