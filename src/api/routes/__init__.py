"""API route modules."""

from src.api.routes.boms import router as boms_router
from src.api.routes.health import router as health_router
from src.api.routes.items import router as items_router
from src.api.routes.productions import router as productions_router
from src.api.routes.stock import router as stock_router
from src.api.routes.warehouses import router as warehouses_router

__all__ = [
    "health_router",
    "items_router",
    "warehouses_router",
    "stock_router",
    "boms_router",
    "productions_router",
]
