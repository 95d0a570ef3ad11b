from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ecofreight.infrastructure.db import get_db
from ecofreight.application.review_service import ReviewService
from ecofreight.application.schemas import ReviewCreate, ReviewRead
from ecofreight.domain.models import User
from .deps import get_current_user, require_role

router = APIRouter(prefix="/reviews", tags=["reviews"])

@router.get("/", response_model=list[ReviewRead])
def list_reviews(
    approved: Optional[bool] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("manager")),
):
    return ReviewService(db).list(approved=approved)

@router.get("/shipment/{shipment_id}", response_model=list[ReviewRead])
def shipment_reviews(shipment_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    # Only moderated reviews are public
    approved = None if user.role == "manager" else True
    return ReviewService(db).list_for_shipment(shipment_id, approved=approved)

@router.post("/", response_model=ReviewRead)
def submit_review(payload: ReviewCreate, db: Session = Depends(get_db), user: User = Depends(require_role("customer"))):
    """Create or replace the caller's review of a shipment."""
    return ReviewService(db).submit(payload, user)

@router.post("/{review_id}/approve", response_model=ReviewRead)
def approve_review(review_id: str, db: Session = Depends(get_db), user: User = Depends(require_role("manager"))):
    return ReviewService(db).approve(review_id)

@router.delete("/{review_id}", status_code=204)
def delete_review(review_id: str, db: Session = Depends(get_db), user: User = Depends(require_role("manager"))):
    ReviewService(db).delete(review_id)
    return None
