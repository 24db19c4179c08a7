"""
Shared fixtures for the Bitso client test suite.

- FakeConnection: in-memory stand-in for a websockets connection
- Canned market-data frames for every channel
- httpx.MockTransport helpers for the REST layer
"""

import asyncio
import json
from typing import Callable, List, Union

import httpx
import pytest
from websockets.exceptions import ConnectionClosedError

from bitso.config import ClientConfig, Credentials


# =============================================================================
# Canned Frames
# =============================================================================

KEEP_ALIVE = '{"type":"ka"}'

TRADES_ACK = '{"action":"subscribe","response":"ok","time":1550000000000,"type":"trades"}'


def trades_frame(tid: int = 1, book: str = "btc_mxn") -> str:
    return json.dumps({
        "type": "trades",
        "book": book,
        "payload": [{"i": tid, "a": "0.1", "r": "7000.50", "v": "700.05", "t": 0}],
    })


def diff_orders_frame(sequence: int = 2, book: str = "btc_mxn") -> str:
    return json.dumps({
        "type": "diff-orders",
        "book": book,
        "sequence": sequence,
        "payload": [{"d": 1453, "r": "7000", "t": 1, "o": "abc", "s": "open"}],
    })


def orders_frame(book: str = "btc_mxn") -> str:
    return json.dumps({
        "type": "orders",
        "book": book,
        "payload": {
            "bids": [{"r": "7000", "a": "0.1", "v": "700", "t": 1, "d": 1453}],
            "asks": [],
        },
    })


# =============================================================================
# Fake WebSocket Connection
# =============================================================================

class FakeConnection:
    """
    Queue-backed connection with async send(), recv() and close().

    Exceptions pushed onto the inbox are raised by recv() in order.
    """

    def __init__(self, frames=()):
        self.sent: List[str] = []
        self.close_calls = 0
        self._inbox: "asyncio.Queue[Union[str, bytes, BaseException]]" = asyncio.Queue()
        for frame in frames:
            self.push(frame)

    def push(self, frame: Union[str, bytes, BaseException]) -> None:
        self._inbox.put_nowait(frame)

    def push_peer_close(self) -> None:
        self.push(ConnectionClosedError(None, None))

    async def send(self, text: str) -> None:
        self.sent.append(text)

    async def recv(self) -> Union[str, bytes]:
        item = await self._inbox.get()
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def fake_connection_factory() -> Callable[..., FakeConnection]:
    return FakeConnection


# =============================================================================
# REST Fixtures
# =============================================================================

API_KEY = "test_api_key_12345"
API_SECRET = "test_api_secret_abcdef"


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(api_key=API_KEY, api_secret=API_SECRET)


@pytest.fixture
def config(credentials) -> ClientConfig:
    return ClientConfig(base_url="https://api.bitso.test", credentials=credentials)


@pytest.fixture
def public_config() -> ClientConfig:
    return ClientConfig(base_url="https://api.bitso.test")


class RecordingTransport:
    """Records every request and answers with a fixed response."""

    def __init__(self, status_code: int = 200, body: str = '{"success": true, "payload": {}}'):
        self.status_code = status_code
        self.body = body
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recording_transport_factory() -> Callable[..., RecordingTransport]:
    return RecordingTransport
