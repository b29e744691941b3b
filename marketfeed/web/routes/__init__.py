"""
Web API routes
"""

from marketfeed.web.metrics import router as metrics_router
from marketfeed.web.routes.data_routes import router as data_router
from marketfeed.web.routes.health_routes import router as health_router

__all__ = ["data_router", "health_router", "metrics_router"]
