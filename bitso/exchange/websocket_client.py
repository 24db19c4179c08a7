"""
============================================================================
Bitso Exchange Client
WebSocket Channel Manager - Market-Data Subscriptions
============================================================================

One persistent WebSocket connection multiplexing the three Bitso
market-data channels (trades, diff-orders, orders).

STATE MACHINE:
    DISCONNECTED --connect()--> CONNECTED --close()--> CLOSED

There is no reconnect state. Any transport error surfaces to the caller,
who rebuilds the session and reissues every subscription.

FRAME HANDLING:
    - Keep-alive frames ({"type": "ka"}) are discarded
    - Subscription echoes ({"action": "subscribe", ...}) are discarded by read()
    - Every other frame is classified by its "type" key and fully decoded
    - Frames are handed out strictly in arrival order

SINGLE CONSUMER:
    subscribe() and read() share one stream cursor. A session must be
    driven by one task at a time; a second concurrent caller gets
    BITSO-WS-005. Use MarketDataStream to fan out to many tasks.

ERROR CODES:
    - BITSO-WS-001: Connection/transport failure
    - BITSO-WS-002: Unknown channel discriminator
    - BITSO-WS-003: Malformed frame
    - BITSO-WS-004: Session closed
    - BITSO-WS-005: Concurrent use of one session

See: https://bitso.com/api_info#websocket-api
============================================================================
"""

import asyncio
from collections import deque
from contextlib import contextmanager
from decimal import Decimal
from enum import Enum
from typing import Any, Deque, Dict, Iterator, Optional
import json
import logging

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException
from pydantic import ValidationError

from bitso.config import DEFAULT_WEBSOCKET_URL
from bitso.errors import (
    BitsoErrorCode,
    TransportError,
    WebSocketProtocolError,
    body_snippet,
)
from bitso.observability.metrics import FRAME_ACK, FRAME_KEEPALIVE, record_ws_frame
from bitso.schemas.books import Book, Subscription
from bitso.schemas.websocket import RESPONSE_MODELS, Response

# Configure module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# websockets keep-alive pings (Bitso sends its own "ka" frames as well)
PING_INTERVAL_SECONDS = 20
PING_TIMEOUT_SECONDS = 20

KEEP_ALIVE_TYPE = "ka"
SUBSCRIBE_ACTION = "subscribe"


class ConnectionState(Enum):
    """WebSocket session lifecycle."""
    DISCONNECTED = "DISCONNECTED"
    CONNECTED = "CONNECTED"
    CLOSED = "CLOSED"


# =============================================================================
# Frame Helpers
# =============================================================================

def subscribe_request(subscription: Subscription, book: Book) -> str:
    """Subscribe frame: {"action":"subscribe","book":"<book>","type":"<channel>"}."""
    return json.dumps(
        {
            "action": SUBSCRIBE_ACTION,
            "book": Book(book).value,
            "type": Subscription(subscription).value,
        },
        separators=(',', ':'),
    )


def decode_frame(text: str) -> Dict[str, Any]:
    """
    Parse one frame into a JSON object, with numbers as Decimal.

    Raises:
        WebSocketProtocolError: If the frame is not a JSON object (BITSO-WS-003)
    """
    try:
        frame = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise WebSocketProtocolError(
            f"{BitsoErrorCode.WS_MALFORMED_FRAME}: Frame is not valid JSON: {e}",
            error_code=BitsoErrorCode.WS_MALFORMED_FRAME,
            frame=text,
        ) from e

    if not isinstance(frame, dict):
        raise WebSocketProtocolError(
            f"{BitsoErrorCode.WS_MALFORMED_FRAME}: Frame is not a JSON object",
            error_code=BitsoErrorCode.WS_MALFORMED_FRAME,
            frame=text,
        )
    return frame


def is_keep_alive(frame: Dict[str, Any]) -> bool:
    return frame.get("type") == KEEP_ALIVE_TYPE


def is_subscription_echo(frame: Dict[str, Any]) -> bool:
    return frame.get("action") == SUBSCRIBE_ACTION


def classify_frame(frame: Dict[str, Any], text: str = "") -> Response:
    """
    Classify a data frame by its "type" key and decode the matching model.

    Raises:
        WebSocketProtocolError: Unknown channel (BITSO-WS-002) or decode
            failure (BITSO-WS-003)
    """
    discriminator = frame.get("type")
    try:
        channel = Subscription.from_channel(discriminator)
    except ValueError as e:
        raise WebSocketProtocolError(
            f"{BitsoErrorCode.WS_UNKNOWN_CHANNEL}: {e}",
            error_code=BitsoErrorCode.WS_UNKNOWN_CHANNEL,
            frame=text,
        ) from e

    try:
        response = RESPONSE_MODELS[channel].model_validate(frame)
    except ValidationError as e:
        raise WebSocketProtocolError(
            f"{BitsoErrorCode.WS_MALFORMED_FRAME}: Cannot decode {channel.value} "
            f"frame: {e}",
            error_code=BitsoErrorCode.WS_MALFORMED_FRAME,
            frame=text,
        ) from e

    record_ws_frame(channel.value)
    return response


# =============================================================================
# BitsoWebSocket
# =============================================================================

class BitsoWebSocket:
    """
    Bitso market-data WebSocket session.

    Example Usage:
        socket = await BitsoWebSocket.connect()
        await socket.subscribe(Subscription.ORDERS, Book.BTC_MXN)

        for book in Book:
            for channel in Subscription:
                await socket.subscribe(channel, book)

        async for response in socket:
            if isinstance(response, TradesMessage):
                ...

    The constructor takes an already-open connection (anything with async
    send(), recv() and close()); connect() opens one with websockets.
    """

    def __init__(self, connection: Any, url: str = DEFAULT_WEBSOCKET_URL):
        self._connection = connection
        self.url = url
        self._state = ConnectionState.CONNECTED if connection is not None else ConnectionState.DISCONNECTED
        self._in_use = False
        # Data frames that arrived while subscribe() was awaiting its ack
        self._deferred: Deque[str] = deque()

    @classmethod
    async def connect(cls, url: str = DEFAULT_WEBSOCKET_URL) -> "BitsoWebSocket":
        """
        Open one WebSocket connection to the market-data endpoint.

        Raises:
            TransportError: If the handshake does not complete (BITSO-WS-001)
        """
        logger.info(f"[BITSO-WS] Connecting | url={url}")

        try:
            connection = await websockets.connect(
                url,
                ping_interval=PING_INTERVAL_SECONDS,
                ping_timeout=PING_TIMEOUT_SECONDS,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            logger.error(
                f"[{BitsoErrorCode.WS_CONNECT_FAIL}] Connection failed | "
                f"url={url} | error={type(e).__name__}: {e}"
            )
            raise TransportError(
                f"{BitsoErrorCode.WS_CONNECT_FAIL}: Cannot connect to {url}: {e}",
                error_code=BitsoErrorCode.WS_CONNECT_FAIL,
            ) from e

        logger.info(f"[BITSO-WS] Connected | url={url}")
        return cls(connection, url=url)

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def subscribe(self, subscription: Subscription, book: Book) -> str:
        """
        Subscribe to one channel for one book.

        Keep-alives are skipped while waiting for the ack. Data frames that
        arrive first are kept, in order, for the next read() calls.

        Returns:
            Raw ack text, verbatim. The caller decides whether it is a success.

        Raises:
            WebSocketProtocolError: Closed session, concurrent use, malformed frame
            TransportError: Network failure
        """
        with self._exclusive("subscribe"):
            request = subscribe_request(subscription, book)
            await self._send(request)

            logger.info(
                f"[BITSO-WS] Subscribe sent | "
                f"channel={Subscription(subscription).value} | book={Book(book).value}"
            )

            while True:
                text = await self._recv_text()
                frame = decode_frame(text)

                if is_keep_alive(frame):
                    record_ws_frame(FRAME_KEEPALIVE)
                    continue

                if is_subscription_echo(frame):
                    record_ws_frame(FRAME_ACK)
                    logger.debug(f"[BITSO-WS] Subscribe ack | frame={body_snippet(text)}")
                    return text

                self._deferred.append(text)
                logger.debug(
                    f"[BITSO-WS] Data frame before ack deferred | "
                    f"pending={len(self._deferred)}"
                )

    async def read(self) -> Response:
        """
        Return the next classified data frame.

        Raises:
            WebSocketProtocolError: Unknown channel, malformed frame, closed
                session, concurrent use
            TransportError: Network failure
        """
        with self._exclusive("read"):
            while True:
                if self._deferred:
                    text = self._deferred.popleft()
                else:
                    text = await self._recv_text()

                frame = decode_frame(text)

                if is_keep_alive(frame):
                    record_ws_frame(FRAME_KEEPALIVE)
                    continue
                if is_subscription_echo(frame):
                    record_ws_frame(FRAME_ACK)
                    continue

                return classify_frame(frame, text)

    async def close(self) -> None:
        """
        Send a close frame and release the connection. Idempotent.

        Raises:
            TransportError: If the close handshake fails
        """
        if self._state != ConnectionState.CONNECTED:
            self._state = ConnectionState.CLOSED
            return

        self._state = ConnectionState.CLOSED
        self._deferred.clear()

        try:
            await self._connection.close()
        except (OSError, WebSocketException) as e:
            raise TransportError(
                f"{BitsoErrorCode.WS_CONNECT_FAIL}: Close failed: {e}",
                error_code=BitsoErrorCode.WS_CONNECT_FAIL,
            ) from e
        finally:
            self._connection = None

        logger.info(f"[BITSO-WS] Closed | url={self.url}")

    # ------------------------------------------------------------------
    # Async protocols
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "BitsoWebSocket":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False

    def __aiter__(self) -> "BitsoWebSocket":
        return self

    async def __anext__(self) -> Response:
        if self._state != ConnectionState.CONNECTED:
            raise StopAsyncIteration
        return await self.read()

    # ------------------------------------------------------------------
    # Internal Methods
    # ------------------------------------------------------------------

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        """Reject closed sessions and a second concurrent caller."""
        if self._state != ConnectionState.CONNECTED:
            raise WebSocketProtocolError(
                f"{BitsoErrorCode.WS_CLOSED}: Cannot {operation} on a "
                f"{self._state.value.lower()} session",
                error_code=BitsoErrorCode.WS_CLOSED,
            )
        if self._in_use:
            logger.error(
                f"[{BitsoErrorCode.WS_CONCURRENT_USE}] Concurrent {operation} rejected"
            )
            raise WebSocketProtocolError(
                f"{BitsoErrorCode.WS_CONCURRENT_USE}: Another task is already using "
                f"this session; {operation} must not run concurrently",
                error_code=BitsoErrorCode.WS_CONCURRENT_USE,
            )

        self._in_use = True
        try:
            yield
        finally:
            self._in_use = False

    async def _send(self, text: str) -> None:
        try:
            await self._connection.send(text)
        except ConnectionClosed as e:
            raise self._closed_by_peer(e) from e
        except (OSError, WebSocketException) as e:
            raise TransportError(
                f"{BitsoErrorCode.WS_CONNECT_FAIL}: Send failed: {e}",
                error_code=BitsoErrorCode.WS_CONNECT_FAIL,
            ) from e

    async def _recv_text(self) -> str:
        try:
            message = await self._connection.recv()
        except ConnectionClosed as e:
            raise self._closed_by_peer(e) from e
        except (OSError, WebSocketException) as e:
            raise TransportError(
                f"{BitsoErrorCode.WS_CONNECT_FAIL}: Receive failed: {e}",
                error_code=BitsoErrorCode.WS_CONNECT_FAIL,
            ) from e

        if isinstance(message, bytes):
            try:
                return message.decode("utf-8")
            except UnicodeDecodeError as e:
                raise WebSocketProtocolError(
                    f"{BitsoErrorCode.WS_MALFORMED_FRAME}: Binary frame is not UTF-8",
                    error_code=BitsoErrorCode.WS_MALFORMED_FRAME,
                ) from e
        return message

    def _closed_by_peer(self, error: ConnectionClosed) -> WebSocketProtocolError:
        """Record a peer close; returns the BITSO-WS-004 error to raise."""
        self._state = ConnectionState.CLOSED
        self._connection = None
        self._deferred.clear()
        logger.warning(
            f"[{BitsoErrorCode.WS_CLOSED}] Connection closed by peer | "
            f"url={self.url} | reason={error}"
        )
        return WebSocketProtocolError(
            f"{BitsoErrorCode.WS_CLOSED}: Connection closed: {error}",
            error_code=BitsoErrorCode.WS_CLOSED,
        )


__all__ = [
    "BitsoWebSocket",
    "ConnectionState",
    "subscribe_request",
    "decode_frame",
    "classify_frame",
    "is_keep_alive",
    "is_subscription_echo",
    "KEEP_ALIVE_TYPE",
    "SUBSCRIBE_ACTION",
]
