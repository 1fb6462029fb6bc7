# hayate

An asyncio toolkit for building small event-driven trading bots.

## What is in it

- `hayate.fixed.Decimal`: a signed fixed-point number that keeps six fractional
  digits. Use it for prices and sizes.
- `hayate.common`: `Side` (`BID` or `ASK`, with `opposite()`) and `OrderEntry`.
- `hayate.events`: `OrderBookUpdate`, `OrderBookSnapshot`, `OrderBookDelta` and
  `TradeExecuted`.
- `hayate.orderbook.OrderBook`: a price-level book with a depth limit.
- `hayate.position.Position`: a net position with a volume-weighted entry price
  and unrealised PnL.
- `hayate.engine`: the abstract roles `Collector`, `State`, `Bot` and
  `Executor`, and `run_bot`, which connects them.
- `hayate.states`: `OrderBookState` and `PositionState`.
- `hayate.httpclient`: `HttpClient`, a JSON-over-HTTP client bound to a base
  URL, together with `parse_response` and `HttpError`.
- `hayate.wsclient`: `WsClient` and the `WsHandler` callbacks.
- `hayate.bybit`: message types for the Bybit public spot order book stream,
  plus `parse_message`, `BybitWsHandler`, `BybitClient` and the `hayate-bybit`
  command.
- `hayate.collector`: `BybitCollector` and `convert_update`, which turn Bybit
  messages into `OrderBookDelta` events.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Fixed-point numbers

```python
from hayate.fixed import Decimal

price = Decimal.parse("123.456789")
size = Decimal.from_float(1.5)
print(price * size)                                      # 185.185183
print(Decimal.from_int(100) / Decimal.from_float(0.5))   # 200.000000
```

`Decimal.coerce` accepts a `Decimal`, an `int`, a `float` or a `str`.

- `parse` cuts off any digits after the sixth fractional digit.
- `from_float` rounds to six places.
- Multiplication and division truncate their results.
- Division by zero raises `ZeroDivisionError`.
- A value out of range raises `ValueError` or `OverflowError`.

## Order book and positions

```python
from hayate.common import OrderEntry, Side
from hayate.fixed import Decimal
from hayate.orderbook import OrderBook
from hayate.position import Position

book = OrderBook(5)
book.add_orders([
    OrderEntry.create(Side.BID, 100, 1.0),
    OrderEntry.create(Side.ASK, 101, 1.0),
])
print(book.best_bid(), book.best_ask())   # 100.000000 101.000000
print(book.mid_price())                   # 100.500000

position = Position.from_order(OrderEntry.create(Side.BID, 100, 2.0), 1622547800)
print(position.unrealized_pnl(Decimal.from_int(110)))  # 20.000000
```

Each side of the book holds at most `max_depth` price levels:

- When bids go past that limit, the lowest bids are dropped.
- When asks go past that limit, the highest asks are dropped.

`remove_bid` and `remove_ask` raise `OrderBookError` in two cases: the price
level does not exist, or the size to remove is larger than the size at that
level. A level whose size falls to zero is removed.

`Position.update` applies a fill. A fill on the same side grows the position and
re-averages the entry price. A fill on the opposite side either reduces the
position, closes it, or flips it to the other side.

## Running a bot

To run a bot:

1. Subclass `Collector`, `State`, `Bot` and `Executor` from `hayate.engine`.
2. From inside a running event loop, call
   `run_bot(bot_cls, collectors, states, executors)`.
3. It constructs the bot as `bot_cls(states)` and starts every role as an
   asyncio task. The tasks are returned in this order: executors, states, the
   bot, collectors.

Once running, the roles work as follows:

- Every event from a collector goes to every state.
- The bot's `evaluate()` runs every `interval()` milliseconds.
- Every action it returns goes to every executor.
- States stop once all collectors have finished.

Two states come built in:

- `OrderBookState` adds the levels of an `OrderBookSnapshot` to its book and
  removes the levels of an `OrderBookDelta` from it.
- `PositionState` applies each `TradeExecuted` to its `Position`.

## Watching the Bybit order book

```
hayate-bybit
```

This connects to the Bybit public spot stream and subscribes to the BTCUSDT
order book with a depth of 50. It logs every message it receives. Press Ctrl+C
to stop it.

## What it does not do

- It ships no trading strategy and no executor that places orders. You supply
  the `Bot` and `Executor` subclasses.
- `OrderBookState.sync` and `PositionState.sync` fetch nothing. Both states start
  empty or flat and are built from events only.
- The Bybit client always subscribes to BTCUSDT at a depth of 50.
- `convert_update` turns every Bybit book message into an `OrderBookDelta`,
  including messages that are snapshots.
- There is no bot command. `hayate-bybit` only watches the stream.