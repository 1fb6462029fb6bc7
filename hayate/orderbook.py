"""Aggregated price-level order book with bounded depth."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from sortedcontainers import SortedDict

from hayate.common import OrderEntry, Side
from hayate.fixed import Decimal


class OrderBookError(Exception):
    """Raised when a removal does not match the book."""


def _add_level(levels: SortedDict, price: Decimal, size: Decimal) -> None:
    existing = levels.get(price)
    levels[price] = size if existing is None else existing + size


def _remove_level(levels: SortedDict, price: Decimal, size: Decimal, label: str) -> None:
    existing = levels.get(price)
    if existing is None:
        raise OrderBookError(f"{label} not found for price: {price}")
    if existing < size:
        raise OrderBookError("Size to remove exceeds existing size")
    remaining = existing - size
    if remaining == Decimal.ZERO:
        del levels[price]
    else:
        levels[price] = remaining


class OrderBook:
    """Bids and asks keyed by price, holding the total size at each level."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        self._bids: SortedDict = SortedDict()
        self._asks: SortedDict = SortedDict()

    def __repr__(self) -> str:
        return (
            f"OrderBook(bids={dict(self._bids)!r}, asks={dict(self._asks)!r}, "
            f"max_depth={self.max_depth})"
        )

    def best_bid(self) -> Optional[Decimal]:
        return self._bids.peekitem(-1)[0] if self._bids else None

    def best_ask(self) -> Optional[Decimal]:
        return self._asks.peekitem(0)[0] if self._asks else None

    def best_price(self, side: Side) -> Optional[Decimal]:
        return self.best_bid() if side is Side.BID else self.best_ask()

    def mid_price(self) -> Optional[Decimal]:
        best_bid = self.best_bid()
        best_ask = self.best_ask()
        if best_bid is None or best_ask is None:
            return None
        return (best_bid + best_ask) / Decimal.from_int(2)

    def bids(self) -> Mapping[Decimal, Decimal]:
        """Read-only view of bid levels, ascending by price."""
        return MappingProxyType(self._bids)

    def asks(self) -> Mapping[Decimal, Decimal]:
        """Read-only view of ask levels, ascending by price."""
        return MappingProxyType(self._asks)

    def bids_depth(self) -> int:
        return len(self._bids)

    def asks_depth(self) -> int:
        return len(self._asks)

    def add_order(self, order: OrderEntry) -> None:
        if order.side is Side.BID:
            self.add_bid(order.price, order.size)
        else:
            self.add_ask(order.price, order.size)

    def add_orders(self, orders: Iterable[OrderEntry]) -> None:
        for order in orders:
            self.add_order(order)

    def remove_order(self, order: OrderEntry) -> None:
        if order.side is Side.BID:
            self.remove_bid(order.price, order.size)
        else:
            self.remove_ask(order.price, order.size)

    def remove_orders(self, orders: Iterable[OrderEntry]) -> None:
        for order in orders:
            self.remove_order(order)

    def add_bid(self, price: Decimal, size: Decimal) -> None:
        _add_level(self._bids, price, size)
        self._trim_bids()

    def add_ask(self, price: Decimal, size: Decimal) -> None:
        _add_level(self._asks, price, size)
        self._trim_asks()

    def remove_bid(self, price: Decimal, size: Decimal) -> None:
        _remove_level(self._bids, price, size, "Bid")

    def remove_ask(self, price: Decimal, size: Decimal) -> None:
        _remove_level(self._asks, price, size, "Ask")

    def add_bids(self, bids: Iterable[Tuple[Decimal, Decimal]]) -> None:
        for price, size in bids:
            self.add_bid(price, size)

    def add_asks(self, asks: Iterable[Tuple[Decimal, Decimal]]) -> None:
        for price, size in asks:
            self.add_ask(price, size)

    def remove_bids(self, bids: Iterable[Tuple[Decimal, Decimal]]) -> None:
        for price, size in bids:
            self.remove_bid(price, size)
        self._trim_bids()

    def remove_asks(self, asks: Iterable[Tuple[Decimal, Decimal]]) -> None:
        for price, size in asks:
            self.remove_ask(price, size)
        self._trim_asks()

    def _trim_bids(self) -> None:
        while len(self._bids) > self.max_depth:
            self._bids.popitem(0)

    def _trim_asks(self) -> None:
        while len(self._asks) > self.max_depth:
            self._asks.popitem(-1)