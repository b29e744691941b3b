"""Web helper functions."""

from fastapi import Request

from marketfeed.core.client import MarketFeedClient


def get_request_id(request: Request) -> str | None:
    """Read the X-Request-ID header."""
    return request.headers.get("X-Request-ID")


def get_client(request: Request) -> MarketFeedClient:
    """Client stored on the application state."""
    return request.app.state.marketfeed_client
