"""Services module - acquisition pipeline and market metadata."""

from marketfeed.core.services.calendars import CalendarProvider, ExchangeCalendar, builtin_calendars
from marketfeed.core.services.fetchers import BarFetcher, QuoteFetcher
from marketfeed.core.services.live import LiveCandleSimulator
from marketfeed.core.services.profiles import InstrumentProfile, ProfileRegistry, normalize_symbol
from marketfeed.core.services.subscriptions import Subscription, SubscriptionManager
from marketfeed.core.services.symbols import SymbolDirectory, SymbolInfo
from marketfeed.core.services.synthesizer import Synthesizer

__all__ = [
    "BarFetcher",
    "CalendarProvider",
    "ExchangeCalendar",
    "InstrumentProfile",
    "LiveCandleSimulator",
    "ProfileRegistry",
    "QuoteFetcher",
    "Subscription",
    "SubscriptionManager",
    "SymbolDirectory",
    "SymbolInfo",
    "Synthesizer",
    "builtin_calendars",
    "normalize_symbol",
]
