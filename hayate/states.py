"""States fed by order book and trade events."""

from __future__ import annotations

from typing import Optional

from hayate.engine import State
from hayate.events import (
    OrderBookDelta,
    OrderBookEvent,
    OrderBookSnapshot,
    TradeExecuted,
)
from hayate.orderbook import OrderBook
from hayate.position import Position


class OrderBookState(State[OrderBookEvent]):
    """Keeps a local order book in step with book events."""

    def __init__(self, book: OrderBook) -> None:
        self.book = book

    def name(self) -> str:
        return "orderbook"

    async def sync(self) -> None:
        """Nothing to fetch; the book starts from events alone."""

    def process_event(self, event: OrderBookEvent) -> None:
        if isinstance(event, OrderBookSnapshot):
            self.book.add_orders(event.update.bids)
            self.book.add_orders(event.update.asks)
        elif isinstance(event, OrderBookDelta):
            self.book.remove_orders(event.update.bids)
            self.book.remove_orders(event.update.asks)
        else:
            raise TypeError(f"unsupported order book event: {type(event).__name__}")


class PositionState(State[TradeExecuted]):
    """Keeps the bot's net position in step with its fills."""

    def __init__(self, position: Optional[Position] = None) -> None:
        self.position = position if position is not None else Position()

    def name(self) -> str:
        return "position"

    async def sync(self) -> None:
        """Nothing to fetch; the position starts flat."""

    def process_event(self, event: TradeExecuted) -> None:
        if not isinstance(event, TradeExecuted):
            raise TypeError(f"unsupported trade event: {type(event).__name__}")
        order = event.to_order_entry()
        if not self.position.is_open():
            self.position = Position.from_order(order, event.timestamp)
        else:
            self.position.update(order, event.timestamp)