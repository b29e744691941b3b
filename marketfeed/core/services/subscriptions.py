"""Periodic quote polling with cancellable subscriptions."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from marketfeed.core.data.cache import CacheKey, CacheStrategy
from marketfeed.core.logging import get_logger, log_context
from marketfeed.core.models import Market, Quote
from marketfeed.core.services.fetchers import QuoteFetcher
from marketfeed.core.services.profiles import normalize_symbol

logger = get_logger(__name__)

UpdateCallback = Callable[[Quote], Any]


class Subscription:
    """Handle of one polling task. Calling it cancels the subscription.

    Cancelling is idempotent and may happen from any thread; a quote that
    arrives after cancellation is discarded.
    """

    def __init__(self, symbol: str, market: Market, loop: asyncio.AbstractEventLoop):
        self.symbol = symbol
        self.market = market
        self._loop = loop
        self._active = True
        self._task: asyncio.Task[None] | None = None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._cancel_task()
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._cancel_task)

    __call__ = cancel

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def __repr__(self) -> str:
        return f"Subscription(symbol={self.symbol!r}, market={self.market.value!r}, active={self._active})"


class SubscriptionManager:
    """Polls the quote fetcher for subscribed symbols."""

    def __init__(
        self,
        fetcher: QuoteFetcher,
        cache: CacheStrategy,
        interval: float = 15.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.fetcher = fetcher
        self.cache = cache
        self.interval = interval
        self._sleep = sleep
        self._subscriptions: set[Subscription] = set()

    @property
    def subscriptions(self) -> list[Subscription]:
        return [subscription for subscription in self._subscriptions if subscription.active]

    def subscribe(
        self,
        symbol: str,
        on_update: UpdateCallback,
        market: Market | str = Market.IDX,
        interval: float | None = None,
    ) -> Subscription:
        """Start polling ``symbol``; the first poll runs immediately.

        Must be called from a running event loop. ``on_update`` may be a
        plain function or a coroutine function.
        """
        loop = asyncio.get_running_loop()
        subscription = Subscription(normalize_symbol(symbol), Market.parse(market), loop)
        task = loop.create_task(
            self._run(subscription, on_update, interval if interval is not None else self.interval),
            name=f"marketfeed-subscription-{subscription.symbol}",
        )
        subscription._task = task
        self._subscriptions.add(subscription)
        task.add_done_callback(lambda _: self._subscriptions.discard(subscription))
        return subscription

    async def close(self) -> None:
        """Cancel every subscription and wait for the polling tasks to finish."""
        subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.cancel()
        tasks = [subscription.task for subscription in subscriptions if subscription.task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, subscription: Subscription, on_update: UpdateCallback, interval: float) -> None:
        with log_context(symbol=subscription.symbol):
            while subscription.active:
                await self._poll(subscription, on_update)
                if not subscription.active:
                    break
                await self._sleep(interval)

    async def _poll(self, subscription: Subscription, on_update: UpdateCallback) -> None:
        await self.cache.delete(CacheKey.quote(subscription.symbol, subscription.market))
        try:
            quote = await self.fetcher.get_quote(subscription.symbol, subscription.market)
        except Exception:
            logger.exception("Price update for {} failed", subscription.symbol)
            return

        if not subscription.active:
            logger.debug("Discarding quote for cancelled subscription {}", subscription.symbol)
            return

        try:
            result = on_update(quote)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Subscriber callback for {} raised", subscription.symbol)


__all__ = ["Subscription", "SubscriptionManager", "UpdateCallback"]
