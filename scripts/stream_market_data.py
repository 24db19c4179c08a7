#!/usr/bin/env python3
# ============================================================================
# Bitso Exchange Client
# Market Data Stream - WebSocket Channel Monitor
# ============================================================================
#
# Purpose: Subscribe to every channel for one book and print each update
#
# Usage:
#   python3 scripts/stream_market_data.py [book]
#
# Stops on Ctrl+C or when the connection fails (no reconnect).
#
# ============================================================================

import os
import sys
import asyncio
import logging

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bitso import BitsoError, BitsoWebSocket, Book, ClientConfig, MarketDataStream
from bitso.schemas import DiffOrdersMessage, OrdersMessage, Subscription, TradesMessage


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(name)s | %(message)s'
)
logger = logging.getLogger("stream_market_data")


def describe(response) -> str:
    if isinstance(response, TradesMessage):
        trades = ", ".join(f"{t.a}@{t.r}" for t in response.payload)
        return f"trades      {response.book} | {trades}"
    if isinstance(response, DiffOrdersMessage):
        return f"diff-orders {response.book} | seq={response.sequence} | changes={len(response.payload)}"
    if isinstance(response, OrdersMessage):
        best_bid = response.payload.bids[0].r if response.payload.bids else None
        best_ask = response.payload.asks[0].r if response.payload.asks else None
        return f"orders      {response.book} | bid={best_bid} | ask={best_ask}"
    return repr(response)


async def main(book: Book) -> int:
    config = ClientConfig.from_environment()

    try:
        socket = await BitsoWebSocket.connect(config.websocket_url)
    except BitsoError as e:
        logger.error(f"[{e.error_code}] {e}")
        return 1

    async with MarketDataStream(socket) as stream:
        try:
            for channel in Subscription:
                ack = await stream.subscribe(channel, book)
                logger.info(f"[STREAM] Subscribed | channel={channel} | ack={ack}")

            subscriber = stream.listen(books=[book])
            stream.start()

            async for response in subscriber:
                print(describe(response))
        except BitsoError as e:
            logger.error(f"[{e.error_code}] Stream ended: {e}")
            return 1

    return 0


if __name__ == "__main__":
    selected = Book.from_symbol(sys.argv[1]) if len(sys.argv) > 1 else Book.BTC_MXN
    try:
        sys.exit(asyncio.run(main(selected)))
    except KeyboardInterrupt:
        print("\nStopped")
