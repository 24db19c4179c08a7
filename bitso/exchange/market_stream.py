"""
============================================================================
Bitso Exchange Client
Market Data Stream - Single-Owner Fan-Out
============================================================================

A supervising task owns one BitsoWebSocket and distributes every
classified Response to any number of subscriber tasks over asyncio
queues. This is the supported way to consume one session from several
tasks (the session itself is single-consumer).

DELIVERY:
    - Each subscriber receives matching responses in arrival order
    - A full subscriber queue applies backpressure to the read loop
    - A read failure is delivered to every subscriber and stops the pump
    - stop() releases every waiting subscriber with BITSO-WS-004
    - No resubscription: the owner rebuilds the session after a failure

============================================================================
"""

import asyncio
import logging
from typing import FrozenSet, Iterable, List, Optional, Union

from bitso.errors import BitsoErrorCode, WebSocketProtocolError
from bitso.exchange.websocket_client import BitsoWebSocket
from bitso.schemas.books import Book, Subscription
from bitso.schemas.websocket import Response

# Configure module logger
logger = logging.getLogger(__name__)


DEFAULT_MAX_QUEUE_SIZE = 1000

_Item = Union[Response, BaseException]


class StreamSubscriber:
    """
    One consumer of a MarketDataStream.

    Example Usage:
        subscriber = stream.listen(channels=[Subscription.TRADES])
        async for response in subscriber:
            print(response.book, response.payload)
    """

    def __init__(
        self,
        channels: Optional[Iterable[Subscription]] = None,
        books: Optional[Iterable[Book]] = None,
        max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE
    ):
        self.channels: Optional[FrozenSet[Subscription]] = (
            frozenset(channels) if channels is not None else None
        )
        self.books: Optional[FrozenSet[Book]] = (
            frozenset(books) if books is not None else None
        )
        self._queue: "asyncio.Queue[_Item]" = asyncio.Queue(maxsize=max_queue_size)
        self._error: Optional[BaseException] = None

    def matches(self, response: Response) -> bool:
        if self.channels is not None and response.channel not in self.channels:
            return False
        if self.books is not None and response.book not in self.books:
            return False
        return True

    async def _deliver(self, item: _Item) -> None:
        await self._queue.put(item)

    def _fail(self, error: BaseException) -> None:
        """Deliver a terminal error without waiting on a full queue."""
        self._error = error
        try:
            self._queue.put_nowait(error)
        except asyncio.QueueFull:
            # get() re-raises self._error once the queue drains
            pass

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def get(self) -> Response:
        """
        Next matching response.

        Raises:
            BitsoError: The error that stopped the stream
        """
        if self._error is not None and self._queue.empty():
            raise self._error

        item = await self._queue.get()
        if isinstance(item, BaseException):
            raise item
        return item

    def __aiter__(self) -> "StreamSubscriber":
        return self

    async def __anext__(self) -> Response:
        return await self.get()


class MarketDataStream:
    """
    Supervising owner of one BitsoWebSocket.

    Example Usage:
        socket = await BitsoWebSocket.connect()
        stream = MarketDataStream(socket)
        await stream.subscribe(Subscription.TRADES, Book.BTC_MXN)

        trades = stream.listen(channels=[Subscription.TRADES])
        stream.start()
        ...
        await stream.stop()
    """

    def __init__(self, socket: BitsoWebSocket, max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE):
        self._socket = socket
        self._max_queue_size = max_queue_size
        self._subscribers: List[StreamSubscriber] = []
        self._task: Optional["asyncio.Task[None]"] = None
        self._error: Optional[BaseException] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def error(self) -> Optional[BaseException]:
        """Error that stopped the pump, if any."""
        return self._error

    async def subscribe(self, subscription: Subscription, book: Book) -> str:
        """
        Subscribe before start(); returns the raw ack text.

        Raises:
            RuntimeError: If the pump is already running
        """
        if self._task is not None:
            raise RuntimeError("subscribe() must be called before start()")
        return await self._socket.subscribe(subscription, book)

    def listen(
        self,
        channels: Optional[Iterable[Subscription]] = None,
        books: Optional[Iterable[Book]] = None
    ) -> StreamSubscriber:
        """Register a subscriber; None means every channel / every book."""
        subscriber = StreamSubscriber(channels, books, self._max_queue_size)
        if self._error is not None:
            subscriber._fail(self._error)
        self._subscribers.append(subscriber)
        return subscriber

    def start(self) -> None:
        """Start the read loop on the running event loop."""
        if self._task is not None:
            raise RuntimeError("MarketDataStream already started")
        self._task = asyncio.create_task(self._pump())
        logger.info(
            f"[BITSO-STREAM] Started | subscribers={len(self._subscribers)}"
        )

    async def stop(self) -> None:
        """
        Cancel the read loop and close the socket.

        Subscribers still waiting in get() are released with BITSO-WS-004.
        """
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        if self._error is None:
            self._error = WebSocketProtocolError(
                f"{BitsoErrorCode.WS_CLOSED}: Market data stream stopped",
                error_code=BitsoErrorCode.WS_CLOSED,
            )
            for subscriber in self._subscribers:
                subscriber._fail(self._error)

        await self._socket.close()
        logger.info(f"[BITSO-STREAM] Stopped | subscribers={len(self._subscribers)}")

    async def __aenter__(self) -> "MarketDataStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.stop()
        return False

    async def _pump(self) -> None:
        delivered = 0
        while True:
            try:
                response = await self._socket.read()
            except Exception as e:
                self._error = e
                logger.error(
                    f"[{getattr(e, 'error_code', 'BITSO-STREAM')}] Market data stream stopped | "
                    f"delivered={delivered} | error={type(e).__name__}: {e}"
                )
                for subscriber in self._subscribers:
                    subscriber._fail(e)
                return

            for subscriber in self._subscribers:
                if subscriber.matches(response):
                    await subscriber._deliver(response)
            delivered += 1


__all__ = [
    "MarketDataStream",
    "StreamSubscriber",
    "DEFAULT_MAX_QUEUE_SIZE",
]
