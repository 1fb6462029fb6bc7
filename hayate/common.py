"""Order sides and order entries."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from hayate.fixed import Decimal

_Convertible = Union[Decimal, int, float, str]


class Side(enum.Enum):
    """Side of the book an order rests on."""

    BID = "bid"
    ASK = "ask"

    def opposite(self) -> Side:
        return Side.ASK if self is Side.BID else Side.BID


@dataclass(frozen=True)
class OrderEntry:
    """A price level quantity on one side of the book."""

    side: Side
    price: Decimal
    size: Decimal

    @classmethod
    def create(cls, side: Side, price: _Convertible, size: _Convertible) -> OrderEntry:
        """Build an entry converting price and size to Decimal."""
        try:
            price_value = Decimal.coerce(price)
        except (ValueError, ArithmeticError, TypeError) as exc:
            raise ValueError("Invalid price conversion") from exc
        try:
            size_value = Decimal.coerce(size)
        except (ValueError, ArithmeticError, TypeError) as exc:
            raise ValueError("Invalid size conversion") from exc
        return cls(side, price_value, size_value)