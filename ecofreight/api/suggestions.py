from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ecofreight.infrastructure.db import get_db
from ecofreight.application.suggestion_service import SuggestionService
from ecofreight.application.schemas import GenerateSuggestionsRequest, SuggestionRead, SustainabilityAnalysis
from ecofreight.domain.models import User
from .deps import require_role

router = APIRouter(prefix="/suggestions", tags=["suggestions"])

@router.get("/", response_model=list[SuggestionRead])
def list_suggestions(
    implemented: Optional[bool] = None,
    shipment_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("manager")),
):
    return SuggestionService(db).list(implemented=implemented, shipment_id=shipment_id)

@router.post("/generate", response_model=list[SuggestionRead], status_code=201)
def generate_suggestions(
    payload: GenerateSuggestionsRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("manager")),
):
    """Suggestions for one shipment, or for the recent fleet when no shipment is given."""
    service = SuggestionService(db)
    if payload.shipment_id:
        return service.generate_for_shipment(payload.shipment_id, user)
    return service.generate_fleet_suggestions(user)

@router.post("/{suggestion_id}/implement", response_model=SuggestionRead)
def implement_suggestion(suggestion_id: str, db: Session = Depends(get_db), user: User = Depends(require_role("manager"))):
    return SuggestionService(db).implement(suggestion_id)

@router.delete("/{suggestion_id}", status_code=204)
def dismiss_suggestion(suggestion_id: str, db: Session = Depends(get_db), user: User = Depends(require_role("manager"))):
    SuggestionService(db).dismiss(suggestion_id)
    return None

@router.post("/analysis/{shipment_id}", response_model=SustainabilityAnalysis)
def sustainability_analysis(shipment_id: str, db: Session = Depends(get_db), user: User = Depends(require_role("manager"))):
    return SuggestionService(db).analyze(shipment_id, user)
