from typing import Optional
from sqlalchemy.orm import Session
from fastapi import HTTPException
from ecofreight.domain.models import Review, User
from ecofreight.domain.ledger import MockLedger, get_ledger
from ecofreight.infrastructure.cache import invalidate_dashboards
from shared.core import get_logger
from .schemas import ReviewCreate
from .shipment_service import ShipmentService

logger = get_logger(__name__)

class ReviewService:
    def __init__(self, db: Session, ledger: Optional[MockLedger] = None):
        self.db = db
        self.ledger = ledger or get_ledger()

    def list(self, approved: Optional[bool] = None):
        query = self.db.query(Review)
        if approved is not None:
            query = query.filter(Review.approved == approved)
        return query.order_by(Review.created_at.desc()).all()

    def list_for_shipment(self, shipment_id: str, approved: Optional[bool] = None):
        query = self.db.query(Review).filter(Review.shipment_id == shipment_id)
        if approved is not None:
            query = query.filter(Review.approved == approved)
        return query.order_by(Review.created_at.desc()).all()

    def get(self, review_id: str) -> Review:
        review = self.db.query(Review).filter(Review.id == review_id).first()
        if not review:
            raise HTTPException(status_code=404, detail="Review not found")
        return review

    def submit(self, data: ReviewCreate, user: User) -> Review:
        """Create the user's review of a shipment, or replace it if one exists."""
        shipments = ShipmentService(self.db)
        shipment = shipments.get(data.shipment_id)
        shipments.ensure_can_view(shipment, user)

        review = (
            self.db.query(Review)
            .filter(Review.shipment_id == shipment.id, Review.user_id == user.id)
            .first()
        )
        if review is None:
            review = Review(shipment_id=shipment.id, user_id=user.id)
            self.db.add(review)
        review.rating = data.rating
        review.comment = data.comment
        # Edited reviews go back through moderation
        review.approved = False

        try:
            result = self.ledger.update(shipment.id, status="review_submitted", metadata={
                "user_id": user.id,
                "rating": data.rating,
            })
            review.blockchain_tx_hash = result["transaction_hash"]
        except Exception:
            logger.error(f"Ledger update failed for review on {shipment.id}", exc_info=True)

        self.db.commit()
        self.db.refresh(review)
        logger.info(f"Review by {user.id} on shipment {shipment.id} saved (rating {data.rating})")
        invalidate_dashboards()
        return review

    def approve(self, review_id: str) -> Review:
        review = self.get(review_id)
        review.approved = True
        self.db.commit()
        self.db.refresh(review)
        invalidate_dashboards()
        return review

    def delete(self, review_id: str) -> None:
        review = self.get(review_id)
        self.db.delete(review)
        self.db.commit()
        invalidate_dashboards()
