"""Bybit public order book stream: message types and WebSocket client."""

from __future__ import annotations

import argparse
import asyncio
import enum
import json
import logging
import signal
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

from hayate.wsclient import Message, MessageKind, WsClient, WsHandler

logger = logging.getLogger(__name__)

BYBIT_ENDPOINT = "wss://stream.bybit.com/v5/public/spot"

_U64_MAX = 2**64 - 1


def _get(obj: Mapping[str, Any], key: str) -> Any:
    if key not in obj:
        raise ValueError(f"missing field `{key}`")
    return obj[key]


def _string(obj: Mapping[str, Any], key: str) -> str:
    value = _get(obj, key)
    if not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string")
    return value


def _boolean(obj: Mapping[str, Any], key: str) -> bool:
    value = _get(obj, key)
    if not isinstance(value, bool):
        raise ValueError(f"field `{key}` must be a boolean")
    return value


def _u64(obj: Mapping[str, Any], key: str) -> int:
    value = _get(obj, key)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U64_MAX:
        raise ValueError(f"field `{key}` must be an unsigned 64-bit integer")
    return value


def _entries(obj: Mapping[str, Any], key: str) -> List[List[str]]:
    value = _get(obj, key)
    if not isinstance(value, list) or not all(
        isinstance(entry, list) and all(isinstance(item, str) for item in entry)
        for entry in value
    ):
        raise ValueError(f"field `{key}` must be a list of string lists")
    return [list(entry) for entry in value]


def _mapping(value: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{label} must be an object")
    return value


class BybitOrderBookDataType(enum.Enum):
    SNAPSHOT = "snapshot"
    DELTA = "delta"


@dataclass
class BybitOrderBookData:
    """Order book levels; each entry is [price, size] as strings."""

    symbol: str
    bids: List[List[str]]
    asks: List[List[str]]
    update_id: int
    sequence: int

    @classmethod
    def from_json(cls, obj: Any) -> BybitOrderBookData:
        obj = _mapping(obj, "data")
        return cls(
            symbol=_string(obj, "s"),
            bids=_entries(obj, "b"),
            asks=_entries(obj, "a"),
            update_id=_u64(obj, "u"),
            sequence=_u64(obj, "seq"),
        )


@dataclass
class BybitOrderBookUpdate:
    """A snapshot or delta pushed on an orderbook topic."""

    topic: str
    timestamp: int
    data_type: BybitOrderBookDataType
    data: BybitOrderBookData
    correlated_timestamp: int

    @classmethod
    def from_json(cls, obj: Any) -> BybitOrderBookUpdate:
        obj = _mapping(obj, "message")
        try:
            data_type = BybitOrderBookDataType(_string(obj, "type"))
        except ValueError as exc:
            raise ValueError(f"unknown data type: {exc}") from exc
        return cls(
            topic=_string(obj, "topic"),
            timestamp=_u64(obj, "ts"),
            data_type=data_type,
            data=BybitOrderBookData.from_json(_get(obj, "data")),
            correlated_timestamp=_u64(obj, "cts"),
        )


@dataclass
class SubscriptionAck:
    """Reply to a subscribe request."""

    success: bool
    message: str
    connection_id: str
    request_id: Optional[str]
    operation: str

    @classmethod
    def from_json(cls, obj: Any) -> SubscriptionAck:
        obj = _mapping(obj, "message")
        request_id = obj.get("req_id")
        if request_id is not None and not isinstance(request_id, str):
            raise ValueError("field `req_id` must be a string")
        return cls(
            success=_boolean(obj, "success"),
            message=_string(obj, "ret_msg"),
            connection_id=_string(obj, "conn_id"),
            request_id=request_id,
            operation=_string(obj, "op"),
        )


BybitMessage = Union[SubscriptionAck, BybitOrderBookUpdate]


def parse_message(text: str) -> BybitMessage:
    """Decode a stream message as a subscription ack or an order book update."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Failed to parse message: {exc}") from exc
    for parser in (SubscriptionAck.from_json, BybitOrderBookUpdate.from_json):
        try:
            return parser(payload)
        except ValueError:
            continue
    raise ValueError("data did not match any variant of BybitMessage")


class BybitWsHandler(WsHandler):
    """Subscribes to the order book topic and forwards parsed messages."""

    depth = 50
    symbol = "BTCUSDT"

    def __init__(self, update_sender: "asyncio.Queue[BybitMessage]") -> None:
        self.msg_sender = update_sender
        self.ws_sender: Optional[asyncio.Queue[Message]] = None

    async def on_open(self, sender: "asyncio.Queue[Message]") -> None:
        topic = f"orderbook.{self.depth}.{self.symbol}"
        subscribe = json.dumps(
            {"args": [topic], "op": "subscribe", "req_id": "test"},
            separators=(",", ":"),
        )
        sender.put_nowait(Message.text(subscribe))
        logger.info("Subscribed to orderbook updates for %s", self.symbol)
        self.ws_sender = sender

    async def on_message(self, message: Message) -> None:
        if self.ws_sender is None:
            raise RuntimeError("WebSocket received message before open")
        if message.kind is MessageKind.TEXT:
            logger.info("Received text message: %s", message.data)
            parsed = parse_message(message.data)
            logger.info("Parsed message: %r", parsed)
            self.msg_sender.put_nowait(parsed)
        elif message.kind is MessageKind.PING:
            logger.info("Received ping: %r", message.data)
            self.ws_sender.put_nowait(Message.pong(message.data))
        elif message.kind is MessageKind.CLOSE:
            logger.info("WebSocket connection closed")
            await self.on_close()
        else:
            logger.warning("Received unsupported message type: %r", message)
            raise ValueError("Unsupported message type received")

    async def on_close(self) -> None:
        logger.info("Bybit Websocket connection closed")
        self.ws_sender = None


class BybitClient:
    """WebSocket client for the Bybit spot order book stream."""

    def __init__(
        self,
        update_sender: "asyncio.Queue[BybitMessage]",
        shutdown: Optional[asyncio.Event] = None,
        url: str = BYBIT_ENDPOINT,
    ) -> None:
        self.handler = BybitWsHandler(update_sender)
        self._inner = WsClient(url, self.handler, shutdown)

    async def connect(self) -> None:
        await self._inner.connect()


async def _run_until_interrupted() -> None:
    updates: asyncio.Queue[BybitMessage] = asyncio.Queue()
    shutdown = asyncio.Event()
    client = BybitClient(updates, shutdown)

    async def run_client() -> None:
        try:
            await client.connect()
        except Exception as exc:
            logger.error("Failed to connect to Bybit WebSocket: %s", exc)

    handle = asyncio.create_task(run_client())
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, shutdown.set)
    except (NotImplementedError, RuntimeError):
        pass

    await shutdown.wait()
    logger.info("Shutting down Bybit client...")
    try:
        await handle
    except Exception as exc:
        logger.error("Error while waiting for Bybit client: %s", exc)
    else:
        logger.info("Bybit client shutdown successfully.")


def main(argv: Optional[List[str]] = None) -> int:
    """Stream Bybit order book updates until interrupted."""
    parser = argparse.ArgumentParser(
        prog="hayate-bybit",
        description="Stream Bybit order book updates until interrupted.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(_run_until_interrupted())
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    return 0