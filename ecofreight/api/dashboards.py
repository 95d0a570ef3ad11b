from typing import Literal, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ecofreight.infrastructure.db import get_db
from ecofreight.application.dashboard_service import DashboardService
from ecofreight.domain.models import User
from .deps import get_current_user, require_role

router = APIRouter(prefix="/dashboards", tags=["dashboards"])

Timeframe = Literal["all", "month", "quarter", "year"]
TransportFilter = Literal["all", "truck", "rail", "ship", "air", "multi-modal"]

@router.get("/manager")
def manager_dashboard(db: Session = Depends(get_db), user: User = Depends(require_role("manager"))):
    return DashboardService(db).manager()

@router.get("/driver")
def driver_dashboard(db: Session = Depends(get_db), user: User = Depends(require_role("driver"))):
    return DashboardService(db).driver(user)

@router.get("/customer")
def customer_dashboard(db: Session = Depends(get_db), user: User = Depends(require_role("customer"))):
    return DashboardService(db).customer(user)

@router.get("/carbon-report")
def carbon_report(
    timeframe: Timeframe = "all",
    transport_type: TransportFilter = "all",
    customer_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Carbon report for the caller, or for any customer when a manager asks."""
    if user.role == "manager":
        target = customer_id or user.id
    elif user.role == "customer":
        if customer_id and customer_id != user.id:
            raise HTTPException(status_code=403, detail="Not allowed to view this report")
        target = user.id
    else:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return DashboardService(db).carbon_report(target, timeframe=timeframe, transport_type=transport_type)
