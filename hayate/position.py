"""A single net position built up from fills."""

from __future__ import annotations

from dataclasses import dataclass

from hayate.common import OrderEntry, Side
from hayate.fixed import Decimal


@dataclass
class Position:
    """Net position with a volume-weighted entry price."""

    side: Side = Side.BID
    size: Decimal = Decimal.ZERO
    entry_price: Decimal = Decimal.ZERO
    opened_at: int = 0
    updated_at: int = 0

    @classmethod
    def from_order(cls, order: OrderEntry, timestamp: int) -> Position:
        return cls(order.side, order.size, order.price, timestamp, timestamp)

    def update(self, order: OrderEntry, timestamp: int) -> None:
        """Apply a fill: grow, reduce, close or flip the position."""
        if not self.is_open():
            self.side = order.side
            self.size = order.size
            self.entry_price = order.price
            self.opened_at = timestamp
            self.updated_at = timestamp
            return

        if order.side == self.side:
            new_size = self.size + order.size
            self.entry_price = (
                self.entry_price * self.size + order.price * order.size
            ) / new_size
            self.size = new_size
        elif self.size > order.size:
            self.size -= order.size
        elif self.size == order.size:
            self.size = Decimal.ZERO
            self.entry_price = Decimal.ZERO
        else:
            self.side = order.side
            self.entry_price = order.price
            self.size = order.size - self.size

        self.updated_at = timestamp

    def is_open(self) -> bool:
        return self.size > Decimal.ZERO

    def current_value(self, current_price: Decimal) -> Decimal:
        if self.is_open():
            return current_price * self.size
        return Decimal.ZERO

    def unrealized_pnl(self, current_price: Decimal) -> Decimal:
        if not self.is_open():
            return Decimal.ZERO
        if self.side is Side.BID:
            per_unit = current_price - self.entry_price
        else:
            per_unit = self.entry_price - current_price
        return per_unit * self.size