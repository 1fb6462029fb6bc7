import asyncio
import json

import pytest
import websockets

from hayate.bybit import (
    BybitClient,
    BybitOrderBookDataType,
    BybitOrderBookUpdate,
    BybitWsHandler,
    SubscriptionAck,
    main,
    parse_message,
)
from hayate.wsclient import Message

SUBSCRIBE = '{"args":["orderbook.50.BTCUSDT"],"op":"subscribe","req_id":"test"}'

UPDATE = {
    "topic": "orderbook.50.BTCUSDT",
    "ts": 1672304484978,
    "type": "snapshot",
    "data": {
        "s": "BTCUSDT",
        "b": [["16493.50", "0.006"], ["16493.00", "0.100"]],
        "a": [["16611.00", "0.029"]],
        "u": 18521288,
        "seq": 7961638724,
    },
    "cts": 1672304484976,
}

ACK = {
    "success": True,
    "ret_msg": "",
    "conn_id": "conn-1",
    "req_id": "test",
    "op": "subscribe",
}


def test_parse_order_book_update():
    message = parse_message(json.dumps(UPDATE))
    assert isinstance(message, BybitOrderBookUpdate)
    assert message.topic == UPDATE["topic"]
    assert message.timestamp == UPDATE["ts"]
    assert message.correlated_timestamp == UPDATE["cts"]
    assert message.data_type is BybitOrderBookDataType.SNAPSHOT
    assert message.data.symbol == "BTCUSDT"
    assert message.data.bids == UPDATE["data"]["b"]
    assert message.data.asks == UPDATE["data"]["a"]
    assert message.data.update_id == UPDATE["data"]["u"]
    assert message.data.sequence == UPDATE["data"]["seq"]


def test_parse_delta_type():
    delta = dict(UPDATE, type="delta")
    assert parse_message(json.dumps(delta)).data_type is BybitOrderBookDataType.DELTA


def test_parse_subscription_ack():
    message = parse_message(json.dumps(ACK))
    assert message == SubscriptionAck(True, "", "conn-1", "test", "subscribe")


def test_parse_ack_without_request_id():
    ack = {key: value for key, value in ACK.items() if key != "req_id"}
    assert parse_message(json.dumps(ack)).request_id is None


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        json.dumps({"op": "subscribe"}),
        json.dumps(dict(UPDATE, type="partial")),
        json.dumps(dict(UPDATE, ts=-1)),
    ],
)
def test_parse_rejects_bad_messages(text):
    with pytest.raises(ValueError):
        parse_message(text)


@pytest.mark.asyncio
async def test_on_open_sends_subscription():
    handler = BybitWsHandler(asyncio.Queue())
    sender = asyncio.Queue()
    await handler.on_open(sender)
    assert sender.get_nowait() == Message.text(SUBSCRIBE)
    assert handler.ws_sender is sender


@pytest.mark.asyncio
async def test_message_before_open_fails():
    handler = BybitWsHandler(asyncio.Queue())
    with pytest.raises(RuntimeError):
        await handler.on_message(Message.text(json.dumps(ACK)))


@pytest.mark.asyncio
async def test_text_is_forwarded_and_ping_answered():
    updates = asyncio.Queue()
    handler = BybitWsHandler(updates)
    sender = asyncio.Queue()
    await handler.on_open(sender)
    sender.get_nowait()

    await handler.on_message(Message.text(json.dumps(UPDATE)))
    forwarded = updates.get_nowait()
    assert forwarded.data.symbol == "BTCUSDT"

    await handler.on_message(Message.ping(b"abc"))
    assert sender.get_nowait() == Message.pong(b"abc")


@pytest.mark.asyncio
async def test_close_and_unsupported_messages():
    handler = BybitWsHandler(asyncio.Queue())
    sender = asyncio.Queue()
    await handler.on_open(sender)
    with pytest.raises(ValueError):
        await handler.on_message(Message.binary(b"\x00"))
    await handler.on_message(Message.close())
    assert handler.ws_sender is None


@pytest.mark.asyncio
async def test_invalid_text_raises():
    handler = BybitWsHandler(asyncio.Queue())
    await handler.on_open(asyncio.Queue())
    with pytest.raises(ValueError):
        await handler.on_message(Message.text("{}"))


@pytest.mark.asyncio
async def test_client_subscribes_and_receives_updates():
    received = []

    async def server(ws):
        received.append(await ws.recv())
        await ws.send(json.dumps(ACK))
        await ws.send(json.dumps(UPDATE))

    updates = asyncio.Queue()
    async with websockets.serve(server, "127.0.0.1", 0) as srv:
        port = srv.sockets[0].getsockname()[1]
        client = BybitClient(updates, url=f"ws://127.0.0.1:{port}")
        await asyncio.wait_for(client.connect(), 5)

    assert received == [SUBSCRIBE]
    assert isinstance(updates.get_nowait(), SubscriptionAck)
    assert updates.get_nowait().timestamp == UPDATE["ts"]
    assert updates.empty()


def test_main_help_exits_cleanly():
    with pytest.raises(SystemExit) as info:
        main(["--help"])
    assert info.value.code == 0