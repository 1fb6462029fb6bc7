"""Collector turning the Bybit order book stream into book events."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Iterable, Iterator, List

from hayate.bybit import BYBIT_ENDPOINT, BybitClient, BybitOrderBookUpdate
from hayate.common import OrderEntry, Side
from hayate.engine import Collector
from hayate.events import OrderBookDelta, OrderBookUpdate

logger = logging.getLogger(__name__)

_END = object()


def _entries(side: Side, raw_entries: Iterable[List[str]]) -> Iterator[OrderEntry]:
    """Yield valid [price, size] entries, skipping short or malformed ones."""
    for raw in raw_entries:
        if len(raw) < 2:
            continue
        price, size = raw[-2], raw[-1]
        try:
            yield OrderEntry.create(side, price, size)
        except ValueError:
            continue


def convert_update(update: BybitOrderBookUpdate) -> OrderBookDelta:
    """Turn a Bybit order book message into a delta event."""
    return OrderBookDelta(
        OrderBookUpdate(
            symbol=update.data.symbol,
            updated_at=update.timestamp,
            bids=list(_entries(Side.BID, update.data.bids)),
            asks=list(_entries(Side.ASK, update.data.asks)),
        )
    )


class BybitCollector(Collector[OrderBookDelta]):
    """Streams order book events from Bybit."""

    def __init__(self, url: str = BYBIT_ENDPOINT) -> None:
        self.url = url

    async def event_stream(self) -> AsyncIterator[OrderBookDelta]:
        """Start the client and return the stream of its book events."""
        queue: asyncio.Queue = asyncio.Queue()
        client = BybitClient(queue, url=self.url)

        async def run_client() -> None:
            try:
                await client.connect()
            except Exception as exc:
                logger.error("Failed to connect to Bybit WebSocket: %s", exc)
            finally:
                queue.put_nowait(_END)

        task = asyncio.create_task(run_client())
        return self._events(queue, task)

    @staticmethod
    async def _events(
        queue: asyncio.Queue, task: asyncio.Task
    ) -> AsyncIterator[OrderBookDelta]:
        try:
            while True:
                message = await queue.get()
                if message is _END:
                    return
                if isinstance(message, BybitOrderBookUpdate):
                    yield convert_update(message)
        finally:
            if not task.done():
                task.cancel()