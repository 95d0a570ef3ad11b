from typing import Optional
from sqlalchemy.orm import Session
from fastapi import HTTPException
from ecofreight.domain.carbon import shipment_score
from ecofreight.domain.ledger import CarbonCreditError, MockLedger, get_ledger
from shared.core import get_logger
from .schemas import BlockchainRequest
from .shipment_service import ShipmentService, add_event

logger = get_logger(__name__)

class LedgerService:
    def __init__(self, db: Optional[Session] = None, ledger: Optional[MockLedger] = None):
        self.db = db
        self.ledger = ledger or get_ledger()

    def handle(self, request: BlockchainRequest) -> dict:
        """Dispatch a verify/register/update call; anything else is a 400."""
        logger.info(f"Blockchain operation: {request.operation}")
        if request.operation == "verify" and request.hash:
            return self.ledger.verify(request.hash)
        if request.operation == "register" and request.shipment_data:
            return self.ledger.register(request.shipment_data)
        if request.operation == "update" and request.shipment_id:
            return self.ledger.update(request.shipment_id, status=request.status, metadata=request.metadata)
        logger.warning(f"Rejected blockchain operation {request.operation!r}")
        raise HTTPException(status_code=400, detail="Invalid operation or missing parameters")

    def issue_carbon_credits(self, shipment_id: str, score: Optional[int] = None) -> dict:
        shipment = ShipmentService(self.db, ledger=self.ledger).get(shipment_id)
        if score is None:
            score = shipment_score(shipment.carbon_footprint, shipment.transport_type)
        try:
            result = self.ledger.issue_carbon_credits(shipment.id, score)
        except CarbonCreditError as e:
            logger.warning(f"Carbon credits refused for shipment {shipment.id}: {e}")
            raise HTTPException(status_code=400, detail=str(e))

        add_event(self.db, shipment.id, "carbon_credits_issued", {
            "credits_issued": result["tokens"],
            "sustainability_score": score,
        }, result["transaction_hash"])
        self.db.commit()
        logger.info(f"{result['tokens']} carbon credits issued for shipment {shipment.id}")
        return {"shipment_id": shipment.id, "sustainability_score": score, **result}

    def recent(self, limit: int = 5):
        return [tx.to_dict() for tx in self.ledger.recent(limit)]
