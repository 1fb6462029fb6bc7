"""WebSocket client that drives a handler until the peer closes or shutdown."""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

logger = logging.getLogger(__name__)


class MessageKind(enum.Enum):
    TEXT = "text"
    BINARY = "binary"
    PING = "ping"
    PONG = "pong"
    CLOSE = "close"


@dataclass(frozen=True)
class Message:
    """One WebSocket message or control frame."""

    kind: MessageKind
    data: Union[str, bytes] = b""

    @classmethod
    def text(cls, data: str) -> Message:
        return cls(MessageKind.TEXT, data)

    @classmethod
    def binary(cls, data: bytes) -> Message:
        return cls(MessageKind.BINARY, data)

    @classmethod
    def ping(cls, data: bytes = b"") -> Message:
        return cls(MessageKind.PING, data)

    @classmethod
    def pong(cls, data: bytes = b"") -> Message:
        return cls(MessageKind.PONG, data)

    @classmethod
    def close(cls) -> Message:
        return cls(MessageKind.CLOSE)


class WsHandler(ABC):
    """Callbacks for a WebSocket connection."""

    @abstractmethod
    async def on_open(self, sender: "asyncio.Queue[Message]") -> None:
        """Called once connected; messages put on sender are written out."""

    @abstractmethod
    async def on_message(self, message: Message) -> None:
        """Called for each incoming message."""

    @abstractmethod
    async def on_close(self) -> None:
        """Called after the connection loop ends."""


async def _write_outbound(ws, outbound: "asyncio.Queue[Message]") -> None:
    while True:
        message = await outbound.get()
        try:
            if message.kind in (MessageKind.TEXT, MessageKind.BINARY):
                await ws.send(message.data)
            elif message.kind is MessageKind.PING:
                await ws.ping(message.data)
            elif message.kind is MessageKind.PONG:
                await ws.pong(message.data)
            else:
                await ws.close()
        except Exception as exc:
            logger.error("Error sending message: %s", exc)
            break


class WsClient:
    """Connects to a URL and feeds messages to a handler."""

    def __init__(
        self,
        url: str,
        handler: WsHandler,
        shutdown: Optional[asyncio.Event] = None,
    ) -> None:
        self.url = url
        self.handler = handler
        self.shutdown = shutdown if shutdown is not None else asyncio.Event()

    async def connect(self) -> None:
        """Run the connection until the server closes, an error, or shutdown."""
        async with websockets.connect(self.url) as ws:
            outbound: asyncio.Queue[Message] = asyncio.Queue()
            writer = asyncio.create_task(_write_outbound(ws, outbound))
            try:
                await self.handler.on_open(outbound)
                await self._read_loop(ws)
            finally:
                writer.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await writer

        try:
            await self.handler.on_close()
        except Exception as exc:
            logger.error("Error during close: %s", exc)
        else:
            logger.info("WebSocket client closed gracefully.")

    async def _read_loop(self, ws) -> None:
        shutdown_wait = asyncio.create_task(self.shutdown.wait())
        try:
            while True:
                receive = asyncio.create_task(ws.recv())
                done, _ = await asyncio.wait(
                    {receive, shutdown_wait}, return_when=asyncio.FIRST_COMPLETED
                )
                if receive not in done:
                    receive.cancel()
                    with contextlib.suppress(asyncio.CancelledError, Exception):
                        await receive
                    logger.info("WebSocket client shutdown initiated.")
                    return
                try:
                    raw = receive.result()
                except ConnectionClosedOK:
                    logger.info("WebSocket client closed by server.")
                    return
                except ConnectionClosed as exc:
                    logger.error("WebSocket error: %s", exc)
                    return
                except Exception as exc:
                    logger.error("WebSocket error: %s", exc)
                    return
                message = (
                    Message.text(raw) if isinstance(raw, str) else Message.binary(raw)
                )
                try:
                    await self.handler.on_message(message)
                except Exception as exc:
                    logger.error("Error handling message: %s", exc)
                    return
        finally:
            shutdown_wait.cancel()