"""Collector, state, bot and executor roles and the loop that wires them."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, AsyncIterator, Deque, Generic, Iterable, List, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E")
A = TypeVar("A")

CHANNEL_CAPACITY = 1024


class Collector(ABC, Generic[E]):
    """Produces a stream of events."""

    @abstractmethod
    async def event_stream(self) -> AsyncIterator[E]:
        """Return an async iterator of events."""


class State(ABC, Generic[E]):
    """Keeps a view of the world up to date from events."""

    @abstractmethod
    def name(self) -> str:
        """Name used in logs."""

    @abstractmethod
    async def sync(self) -> None:
        """Bring the state up to date before events are applied."""

    @abstractmethod
    def process_event(self, event: E) -> None:
        """Apply one event."""


class Bot(ABC, Generic[A]):
    """Decides on actions from the shared states."""

    def __init__(self, states: Iterable[Any]) -> None:
        self.states = list(states)

    @abstractmethod
    def interval(self) -> int:
        """Milliseconds between evaluations."""

    @abstractmethod
    def evaluate(self) -> List[A]:
        """Return the actions to take now."""


class Executor(ABC, Generic[A]):
    """Carries out actions."""

    @abstractmethod
    async def execute(self, action: A) -> None:
        """Carry out one action."""


class _ChannelError(Exception):
    pass


class _ChannelClosed(_ChannelError):
    pass


class _ChannelLagged(_ChannelError):
    pass


class _NoReceivers(Exception):
    pass


class _Receiver:
    def __init__(self, channel: _Broadcast) -> None:
        self._channel = channel
        self._buffer: Deque[Any] = deque()
        self._ready = asyncio.Event()
        self._lagged = False
        self._closed = False

    def _push(self, item: Any) -> None:
        if len(self._buffer) >= self._channel.capacity:
            self._buffer.popleft()
            self._lagged = True
        self._buffer.append(item)
        self._ready.set()

    def _close(self) -> None:
        self._closed = True
        self._ready.set()

    async def recv(self) -> Any:
        while True:
            if self._lagged:
                self._lagged = False
                raise _ChannelLagged()
            if self._buffer:
                return self._buffer.popleft()
            if self._closed:
                raise _ChannelClosed()
            self._ready.clear()
            await self._ready.wait()

    def unsubscribe(self) -> None:
        self._channel.unsubscribe(self)


class _Broadcast:
    """Bounded fan-out channel; slow receivers lose the oldest items."""

    def __init__(self, capacity: int, senders: int) -> None:
        self.capacity = capacity
        self._senders = senders
        self._receivers: List[_Receiver] = []
        self._closed = senders == 0

    def subscribe(self) -> _Receiver:
        receiver = _Receiver(self)
        if self._closed:
            receiver._close()
        self._receivers.append(receiver)
        return receiver

    def unsubscribe(self, receiver: _Receiver) -> None:
        if receiver in self._receivers:
            self._receivers.remove(receiver)

    def send(self, item: Any) -> None:
        if not self._receivers:
            raise _NoReceivers("channel has no receivers")
        for receiver in self._receivers:
            receiver._push(item)

    def release_sender(self) -> None:
        self._senders -= 1
        if self._senders <= 0 and not self._closed:
            self._closed = True
            for receiver in self._receivers:
                receiver._close()


async def _run_executor(executor: Executor, actions: _Receiver) -> None:
    logger.info("Starting Executor...")
    try:
        while True:
            try:
                action = await actions.recv()
            except _ChannelError:
                break
            try:
                await executor.execute(action)
            except Exception as exc:
                logger.error("Error executing action: %s", exc)
                break
            logger.info("Action executed successfully.")
    finally:
        actions.unsubscribe()
    logger.info("Executor finished.")


async def _run_state(state: State, events: _Receiver) -> None:
    logger.info("Starting State")
    try:
        await state.sync()
        logger.info("State %s synced.", state.name())
        while True:
            try:
                event = await events.recv()
            except _ChannelError:
                logger.info("Event channel closed, stopping state.")
                break
            try:
                state.process_event(event)
            except Exception as exc:
                logger.error("Error processing event: %s", exc)
                break
    finally:
        events.unsubscribe()
    logger.info("State finished.")


async def _run_bot(bot: Bot, actions: _Broadcast) -> None:
    logger.info("Starting Bot...")
    try:
        interval = bot.interval()
        if interval <= 0:
            raise ValueError("bot interval must be positive")
        period = interval / 1000
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            delay = next_tick - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            else:
                await asyncio.sleep(0)
            next_tick += period
            try:
                decided = bot.evaluate()
            except Exception as exc:
                logger.error("Error evaluating bot: %s", exc)
                continue
            for action in decided:
                try:
                    actions.send(action)
                except _NoReceivers as exc:
                    logger.error("Error sending action: %s", exc)
                    continue
                logger.info("Action sent successfully.")
    finally:
        actions.release_sender()


async def _run_collector(collector: Collector, events: _Broadcast) -> None:
    logger.info("Starting Collector...")
    try:
        stream = await collector.event_stream()
        async for event in stream:
            try:
                events.send(event)
            except _NoReceivers:
                break
    finally:
        events.release_sender()
    logger.info("Collector finished.")


def run_bot(
    bot_cls: Any,
    collectors: Iterable[Collector],
    states: Iterable[State],
    executors: Iterable[Executor],
) -> List[asyncio.Task]:
    """Start every role as a task on the running loop.

    Tasks are returned in this order: executors, states, the bot, collectors.
    States stop once every collector has finished.
    """
    states = list(states)
    collectors = list(collectors)
    bot = bot_cls(states)

    event_channel = _Broadcast(CHANNEL_CAPACITY, senders=len(collectors))
    action_channel = _Broadcast(CHANNEL_CAPACITY, senders=1)

    tasks: List[asyncio.Task] = []
    for executor in executors:
        tasks.append(
            asyncio.create_task(_run_executor(executor, action_channel.subscribe()))
        )
    for state in states:
        tasks.append(asyncio.create_task(_run_state(state, event_channel.subscribe())))
    tasks.append(asyncio.create_task(_run_bot(bot, action_channel)))
    for collector in collectors:
        tasks.append(asyncio.create_task(_run_collector(collector, event_channel)))
    return tasks