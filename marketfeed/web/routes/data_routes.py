"""
Market data API routes
Quotes, bar series, watchlists, search and cache control
"""

from fastapi import APIRouter, HTTPException, Query, Request

from marketfeed.core.models import Market, TimeRange
from marketfeed.web.models import APIResponse
from marketfeed.web.utils import get_client, get_request_id

router = APIRouter()


def _parse_market(value: str) -> Market:
    try:
        return Market.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _parse_range(value: str) -> TimeRange:
    try:
        return TimeRange.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/quote/{symbol}", response_model=APIResponse)
async def get_quote(
    request: Request,
    symbol: str,
    market: str = Query("IDX", description="Market (IDX, US, CRYPTO)"),
) -> APIResponse:
    """
    Latest quote for a symbol

    - **symbol**: ticker such as BBCA, AAPL or BTC-USD
    - **market**: IDX, US or CRYPTO
    """
    quote = await get_client(request).get_quote(symbol, _parse_market(market))
    return APIResponse(
        success=True,
        data=quote.model_dump(mode="json"),
        message=f"Quote for {quote.symbol} ({quote.source.value})",
        request_id=get_request_id(request),
    )


@router.get("/bars/{symbol}", response_model=APIResponse)
async def get_bars(
    request: Request,
    symbol: str,
    market: str = Query("IDX", description="Market (IDX, US, CRYPTO)"),
    time_range: str = Query("1M", alias="range", description="Range (1D, 5D, 1M, 3M, 6M, YTD, 1Y, 5Y)"),
) -> APIResponse:
    """
    OHLCV bars for a symbol over a logical range
    """
    series = await get_client(request).get_bars(symbol, _parse_market(market), _parse_range(time_range))
    return APIResponse(
        success=True,
        data=series.model_dump(mode="json"),
        message=f"{len(series)} bars for {series.symbol}",
        request_id=get_request_id(request),
    )


@router.get("/watchlist", response_model=APIResponse)
async def get_watchlist(
    request: Request,
    symbols: str | None = Query(None, description="Comma separated symbols; trending names when omitted"),
    market: str = Query("IDX", description="Market (IDX, US, CRYPTO)"),
) -> APIResponse:
    """
    Quotes enriched with company names and sectors
    """
    client = get_client(request)
    requested = [symbol.strip() for symbol in (symbols or "").split(",") if symbol.strip()]
    tickers = await client.get_watchlist(requested or client.trending(), _parse_market(market))
    return APIResponse(
        success=True,
        data=[ticker.model_dump(mode="json") for ticker in tickers],
        message=f"{len(tickers)} tickers",
        request_id=get_request_id(request),
    )


@router.get("/search", response_model=APIResponse)
async def search(
    request: Request,
    q: str = Query(..., min_length=1, description="Part of a symbol or company name"),
) -> APIResponse:
    """
    Search the symbol directory (at most 10 matches)
    """
    tickers = await get_client(request).search(q)
    return APIResponse(
        success=True,
        data=[ticker.model_dump(mode="json") for ticker in tickers],
        message=f"{len(tickers)} matches for '{q}'",
        request_id=get_request_id(request),
    )


@router.post("/cache/clear", response_model=APIResponse)
async def clear_cache(request: Request) -> APIResponse:
    """
    Drop every cached quote and bar series
    """
    await get_client(request).clear_cache()
    return APIResponse(success=True, data=None, message="Cache cleared", request_id=get_request_id(request))
