from hayate.common import OrderEntry, Side
from hayate.events import (
    OrderBookDelta,
    OrderBookSnapshot,
    OrderBookUpdate,
    TradeExecuted,
)
from hayate.fixed import Decimal


def _trade(side):
    return TradeExecuted(
        symbol="BTCUSDT",
        price=Decimal.from_int(100),
        size=Decimal.from_float(1.5),
        side=side,
        is_maker=True,
        order_id="order-1",
        trade_id="trade-1",
        timestamp=1622547800,
    )


def test_trade_to_order_entry_keeps_fields():
    entry = _trade(Side.ASK).to_order_entry()
    assert entry == OrderEntry(Side.ASK, Decimal.from_int(100), Decimal.from_float(1.5))


def test_trade_to_order_entry_side_follows_trade():
    assert _trade(Side.BID).to_order_entry().side is Side.BID
    assert _trade(Side.ASK).to_order_entry().side is Side.ASK


def test_update_defaults_to_empty_levels():
    update = OrderBookUpdate(symbol="BTCUSDT", updated_at=5)
    assert update.bids == []
    assert update.asks == []
    other = OrderBookUpdate(symbol="BTCUSDT", updated_at=5)
    other.bids.append(OrderEntry.create(Side.BID, 1, 1))
    assert update.bids == []


def test_snapshot_and_delta_wrap_update():
    bid = OrderEntry.create(Side.BID, 99, 2)
    update = OrderBookUpdate(symbol="ETHUSDT", updated_at=7, bids=[bid])
    snapshot = OrderBookSnapshot(update)
    delta = OrderBookDelta(update)
    assert snapshot.update.bids == [bid]
    assert delta.update.symbol == "ETHUSDT"
    assert snapshot != delta