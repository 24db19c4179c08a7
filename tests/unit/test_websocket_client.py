"""
Unit Tests for the Bitso WebSocket Channel Manager

Uses an in-memory FakeConnection (see conftest.py); no network access.

Tests:
- Subscribe frame format and ack passthrough
- Keep-alive and ack filtering in read()
- Data frames arriving before the ack are returned later, in order
- Channel classification and Decimal decoding
- Unknown channel / malformed frames
- Peer close, explicit close, closed-session use
- Concurrent use of one session rejected
"""

import asyncio
import json
from decimal import Decimal

import pytest

from bitso.errors import BitsoErrorCode, TransportError, WebSocketProtocolError
from bitso.exchange import websocket_client
from bitso.exchange.websocket_client import (
    BitsoWebSocket,
    ConnectionState,
    decode_frame,
    subscribe_request,
)
from bitso.schemas.books import Book, Subscription
from bitso.schemas.websocket import DiffOrdersMessage, OrdersMessage, TradesMessage

from conftest import (
    KEEP_ALIVE,
    TRADES_ACK,
    diff_orders_frame,
    orders_frame,
    trades_frame,
)


# =============================================================================
# Frame Helpers
# =============================================================================

def test_subscribe_request_format():
    assert subscribe_request(Subscription.DIFF_ORDERS, Book.ETH_MXN) == (
        '{"action":"subscribe","book":"eth_mxn","type":"diff-orders"}'
    )


def test_decode_frame_parses_floats_as_decimal():
    frame = decode_frame('{"type":"trades","x":0.1}')
    assert frame["x"] == Decimal("0.1")


@pytest.mark.parametrize("text", ["not json", "[1, 2]", '"ka"', ""])
def test_decode_frame_rejects_non_objects(text):
    with pytest.raises(WebSocketProtocolError) as exc_info:
        decode_frame(text)
    assert exc_info.value.error_code == BitsoErrorCode.WS_MALFORMED_FRAME


# =============================================================================
# Subscribe / Read
# =============================================================================

class TestSubscribeAndRead:

    @pytest.mark.asyncio
    async def test_subscribe_sends_request_and_returns_ack(self, fake_connection_factory):
        connection = fake_connection_factory([KEEP_ALIVE, TRADES_ACK])
        socket = BitsoWebSocket(connection)

        ack = await socket.subscribe(Subscription.TRADES, Book.BTC_MXN)

        assert ack == TRADES_ACK
        assert json.loads(connection.sent[0]) == {
            "action": "subscribe", "book": "btc_mxn", "type": "trades"
        }

    @pytest.mark.asyncio
    async def test_subscribe_returns_non_ok_ack_verbatim(self, fake_connection_factory):
        failed_ack = '{"action":"subscribe","response":"error","type":"trades"}'
        socket = BitsoWebSocket(fake_connection_factory([failed_ack]))

        assert await socket.subscribe(Subscription.TRADES, Book.BTC_MXN) == failed_ack

    @pytest.mark.asyncio
    async def test_read_skips_keep_alive_and_ack(self, fake_connection_factory):
        socket = BitsoWebSocket(
            fake_connection_factory([KEEP_ALIVE, TRADES_ACK, trades_frame()])
        )

        response = await socket.read()

        assert isinstance(response, TradesMessage)
        assert response.book == Book.BTC_MXN
        assert response.channel == Subscription.TRADES
        assert response.payload[0].i == 1
        assert response.payload[0].r == Decimal("7000.50")

    @pytest.mark.asyncio
    async def test_frames_before_ack_are_kept_in_order(self, fake_connection_factory):
        socket = BitsoWebSocket(fake_connection_factory([
            trades_frame(tid=1),
            KEEP_ALIVE,
            trades_frame(tid=2),
            TRADES_ACK,
            trades_frame(tid=3),
        ]))

        ack = await socket.subscribe(Subscription.TRADES, Book.BTC_MXN)
        tids = [(await socket.read()).payload[0].i for _ in range(3)]

        assert ack == TRADES_ACK
        assert tids == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_each_channel_classified(self, fake_connection_factory):
        socket = BitsoWebSocket(fake_connection_factory([
            trades_frame(), diff_orders_frame(sequence=7), orders_frame(book="eth_mxn"),
        ]))

        trades = await socket.read()
        diff = await socket.read()
        orders = await socket.read()

        assert isinstance(trades, TradesMessage)
        assert isinstance(diff, DiffOrdersMessage)
        assert diff.sequence == 7
        assert diff.payload[0].o == "abc"
        assert isinstance(orders, OrdersMessage)
        assert orders.book == Book.ETH_MXN
        assert orders.payload.bids[0].v == Decimal("700")
        assert orders.payload.asks == []

    @pytest.mark.asyncio
    async def test_bytes_frames_decoded(self, fake_connection_factory):
        socket = BitsoWebSocket(fake_connection_factory([trades_frame().encode("utf-8")]))
        assert isinstance(await socket.read(), TradesMessage)

    @pytest.mark.asyncio
    async def test_async_iteration(self, fake_connection_factory):
        socket = BitsoWebSocket(fake_connection_factory([trades_frame(tid=1), trades_frame(tid=2)]))

        received = []
        async for response in socket:
            received.append(response.payload[0].i)
            if len(received) == 2:
                await socket.close()

        assert received == [1, 2]


# =============================================================================
# Protocol Errors
# =============================================================================

class TestProtocolErrors:

    @pytest.mark.asyncio
    async def test_unknown_channel(self, fake_connection_factory):
        socket = BitsoWebSocket(fake_connection_factory(['{"type":"ticker","book":"btc_mxn"}']))

        with pytest.raises(WebSocketProtocolError) as exc_info:
            await socket.read()

        assert exc_info.value.error_code == BitsoErrorCode.WS_UNKNOWN_CHANNEL
        assert "ticker" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_discriminator(self, fake_connection_factory):
        socket = BitsoWebSocket(fake_connection_factory(['{"book":"btc_mxn"}']))

        with pytest.raises(WebSocketProtocolError) as exc_info:
            await socket.read()

        assert exc_info.value.error_code == BitsoErrorCode.WS_UNKNOWN_CHANNEL

    @pytest.mark.asyncio
    async def test_invalid_payload(self, fake_connection_factory):
        socket = BitsoWebSocket(fake_connection_factory(
            ['{"type":"trades","book":"btc_mxn","payload":[{"i":"x"}]}']
        ))

        with pytest.raises(WebSocketProtocolError) as exc_info:
            await socket.read()

        assert exc_info.value.error_code == BitsoErrorCode.WS_MALFORMED_FRAME
        assert exc_info.value.frame_snippet.startswith('{"type":"trades"')

    @pytest.mark.asyncio
    async def test_session_usable_after_protocol_error(self, fake_connection_factory):
        socket = BitsoWebSocket(fake_connection_factory(["garbage", trades_frame()]))

        with pytest.raises(WebSocketProtocolError):
            await socket.read()

        assert isinstance(await socket.read(), TradesMessage)


# =============================================================================
# Lifecycle
# =============================================================================

class TestLifecycle:

    @pytest.mark.asyncio
    async def test_peer_close_surfaces_and_closes_session(self, fake_connection_factory):
        connection = fake_connection_factory()
        connection.push_peer_close()
        socket = BitsoWebSocket(connection)

        with pytest.raises(WebSocketProtocolError) as exc_info:
            await socket.read()

        assert exc_info.value.error_code == BitsoErrorCode.WS_CLOSED
        assert socket.state == ConnectionState.CLOSED

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, fake_connection_factory):
        connection = fake_connection_factory()
        socket = BitsoWebSocket(connection)

        await socket.close()
        await socket.close()

        assert connection.close_calls == 1
        assert socket.state == ConnectionState.CLOSED

    @pytest.mark.asyncio
    async def test_use_after_close_rejected(self, fake_connection_factory):
        socket = BitsoWebSocket(fake_connection_factory([trades_frame()]))
        await socket.close()

        with pytest.raises(WebSocketProtocolError) as exc_info:
            await socket.read()
        assert exc_info.value.error_code == BitsoErrorCode.WS_CLOSED

        with pytest.raises(WebSocketProtocolError):
            await socket.subscribe(Subscription.TRADES, Book.BTC_MXN)

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, fake_connection_factory):
        connection = fake_connection_factory()

        async with BitsoWebSocket(connection) as socket:
            assert socket.is_connected

        assert connection.close_calls == 1
        assert not socket.is_connected

    @pytest.mark.asyncio
    async def test_disconnected_session_rejected(self):
        socket = BitsoWebSocket(None)

        assert socket.state == ConnectionState.DISCONNECTED
        with pytest.raises(WebSocketProtocolError):
            await socket.read()

    @pytest.mark.asyncio
    async def test_connect_failure_is_transport_error(self):
        with pytest.raises(TransportError) as exc_info:
            await BitsoWebSocket.connect("ws://127.0.0.1:1")

        assert exc_info.value.error_code == BitsoErrorCode.WS_CONNECT_FAIL

    @pytest.mark.asyncio
    async def test_connect_timeout_is_transport_error(self, monkeypatch):
        async def timing_out_connect(*args, **kwargs):
            raise asyncio.TimeoutError()

        monkeypatch.setattr(websocket_client.websockets, "connect", timing_out_connect)

        with pytest.raises(TransportError) as exc_info:
            await BitsoWebSocket.connect("wss://ws.bitso.test")

        assert exc_info.value.error_code == BitsoErrorCode.WS_CONNECT_FAIL
        assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)


# =============================================================================
# Single Consumer
# =============================================================================

class TestConcurrentUse:

    @pytest.mark.asyncio
    async def test_second_reader_rejected(self, fake_connection_factory):
        connection = fake_connection_factory()
        socket = BitsoWebSocket(connection)

        first = asyncio.create_task(socket.read())
        await asyncio.sleep(0)

        with pytest.raises(WebSocketProtocolError) as exc_info:
            await socket.read()
        assert exc_info.value.error_code == BitsoErrorCode.WS_CONCURRENT_USE

        connection.push(trades_frame(tid=9))
        response = await asyncio.wait_for(first, timeout=1)
        assert response.payload[0].i == 9

    @pytest.mark.asyncio
    async def test_subscribe_during_read_rejected(self, fake_connection_factory):
        connection = fake_connection_factory()
        socket = BitsoWebSocket(connection)

        reader = asyncio.create_task(socket.read())
        await asyncio.sleep(0)

        with pytest.raises(WebSocketProtocolError) as exc_info:
            await socket.subscribe(Subscription.ORDERS, Book.BTC_MXN)
        assert exc_info.value.error_code == BitsoErrorCode.WS_CONCURRENT_USE
        assert connection.sent == []

        reader.cancel()
        with pytest.raises(asyncio.CancelledError):
            await reader

    @pytest.mark.asyncio
    async def test_cancelled_read_releases_session(self, fake_connection_factory):
        connection = fake_connection_factory()
        socket = BitsoWebSocket(connection)

        reader = asyncio.create_task(socket.read())
        await asyncio.sleep(0)
        reader.cancel()
        with pytest.raises(asyncio.CancelledError):
            await reader

        connection.push(trades_frame())
        assert isinstance(await socket.read(), TradesMessage)
