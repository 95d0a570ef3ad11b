import copy
from fastapi import HTTPException
from ecofreight.domain.route_catalog import ROUTES, OPTIMIZED_ROUTES, route_savings
from shared.core import get_logger

logger = get_logger(__name__)

class RouteService:
    def list(self):
        return [copy.deepcopy(route) for route in ROUTES.values()]

    def get(self, route_id: str, optimized: bool = False) -> dict:
        catalog = OPTIMIZED_ROUTES if optimized else ROUTES
        route = catalog.get(route_id)
        if route is None:
            raise HTTPException(status_code=404, detail="Route not found")
        return copy.deepcopy(route)

    def optimize(self, route_id: str) -> dict:
        optimized = self.get(route_id, optimized=True)
        savings = route_savings(route_id)
        logger.info(f"Route {route_id} optimized: {savings['time_saved_minutes']} min saved")
        return {"route": optimized, "savings": savings}
