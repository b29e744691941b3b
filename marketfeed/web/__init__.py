"""
Web API module - FastAPI service
"""

from marketfeed.web.app import create_app
from marketfeed.web.models import APIResponse, ErrorResponse
from marketfeed.web.routes import data_router, health_router, metrics_router

__all__ = ["create_app", "data_router", "health_router", "metrics_router", "APIResponse", "ErrorResponse"]
