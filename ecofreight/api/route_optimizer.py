from fastapi import APIRouter, Depends
from ecofreight.application.route_service import RouteService
from .deps import get_current_user

router = APIRouter(prefix="/routes", tags=["routes"], dependencies=[Depends(get_current_user)])

@router.get("/")
def list_routes():
    return RouteService().list()

@router.get("/{route_id}")
def get_route(route_id: str, optimized: bool = False):
    return RouteService().get(route_id, optimized=optimized)

@router.post("/{route_id}/optimize")
def optimize_route(route_id: str):
    """Swap in the pre-authored optimized variant and report the savings."""
    return RouteService().optimize(route_id)
