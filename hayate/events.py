"""Events flowing from collectors to states."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from hayate.common import OrderEntry, Side
from hayate.fixed import Decimal


@dataclass
class OrderBookUpdate:
    """Order book levels for one symbol at one moment."""

    symbol: str
    updated_at: int
    bids: List[OrderEntry] = field(default_factory=list)
    asks: List[OrderEntry] = field(default_factory=list)


@dataclass
class OrderBookSnapshot:
    """A full order book image."""

    update: OrderBookUpdate


@dataclass
class OrderBookDelta:
    """An incremental order book change."""

    update: OrderBookUpdate


OrderBookEvent = Union[OrderBookSnapshot, OrderBookDelta]


@dataclass
class TradeExecuted:
    """A fill of one of the bot's own orders."""

    symbol: str
    price: Decimal
    size: Decimal
    side: Side
    is_maker: bool
    order_id: str
    trade_id: str
    timestamp: int

    def to_order_entry(self) -> OrderEntry:
        return OrderEntry(self.side, self.price, self.size)


BotTradeEvent = TradeExecuted