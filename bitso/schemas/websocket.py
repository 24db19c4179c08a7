"""
============================================================================
Bitso Exchange Client
WebSocket Schemas - Market-Data Channel Messages
============================================================================

Inbound data frames are JSON objects keyed by a "type" discriminator:

    trades:       {"type": "trades", "book": "btc_mxn",
                   "payload": [{"i": 1, "a": "0.1", "r": "7000", "v": "700"}]}
    diff-orders:  {"type": "diff-orders", "book": "btc_mxn", "sequence": 2,
                   "payload": [{"d": 1453, "r": "7000", "t": 1, "o": "abc", "s": "open"}]}
    orders:       {"type": "orders", "book": "btc_mxn",
                   "payload": {"bids": [{"r": "7000", "a": "0.1", "v": "700",
                                          "t": 1, "d": 1453}], "asks": []}}

ZERO-FLOAT MANDATE
------------------
Rates, amounts and values decode to decimal.Decimal.

See: https://bitso.com/api_info#websocket-api
============================================================================
"""

from decimal import Decimal
from typing import List, Optional, Union, Dict, Type

from pydantic import BaseModel, ConfigDict, Field

from bitso.schemas.books import Book, Subscription


class _Frame(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


# ------------------------------- Trades -------------------------------------

class TradesPayload(_Frame):
    """One executed trade."""
    # A unique number identifying the transaction
    i: int
    # Amount
    a: Decimal
    # Rate
    r: Decimal
    # Value
    v: Decimal
    # Maker side: 0 buy, 1 sell
    t: Optional[int] = None
    mo: Optional[str] = None
    to: Optional[str] = None


class TradesMessage(_Frame):
    type_field: str = Field(alias="type")
    book: Book
    payload: List[TradesPayload]

    @property
    def channel(self) -> Subscription:
        return Subscription.TRADES


# ------------------------------- DiffOrders ---------------------------------

class DiffOrdersPayload(_Frame):
    """One order-book change."""
    # Unix timestamp (milliseconds)
    d: int
    # Rate
    r: Decimal
    # 0 indicates buy 1 indicates sell
    t: int
    # Order ID
    o: str
    # Order status ("open", "cancelled", "completed")
    s: str
    a: Optional[Decimal] = None
    v: Optional[Decimal] = None


class DiffOrdersMessage(_Frame):
    type_field: str = Field(alias="type")
    book: Book
    sequence: int
    payload: List[DiffOrdersPayload]

    @property
    def channel(self) -> Subscription:
        return Subscription.DIFF_ORDERS


# ------------------------------- Orders -------------------------------------

class BidAsk(_Frame):
    # Rate
    r: Decimal
    # Amount
    a: Decimal
    # Value
    v: Decimal
    # 0 indicates buy 1 indicates sell
    t: int
    # Unix timestamp (milliseconds)
    d: int


class OrdersPayload(_Frame):
    bids: List[BidAsk] = Field(default_factory=list)
    asks: List[BidAsk] = Field(default_factory=list)


class OrdersMessage(_Frame):
    type_field: str = Field(alias="type")
    book: Book
    payload: OrdersPayload

    @property
    def channel(self) -> Subscription:
        return Subscription.ORDERS


# Classified inbound frame
Response = Union[TradesMessage, DiffOrdersMessage, OrdersMessage]

RESPONSE_MODELS: Dict[Subscription, Type[BaseModel]] = {
    Subscription.TRADES: TradesMessage,
    Subscription.DIFF_ORDERS: DiffOrdersMessage,
    Subscription.ORDERS: OrdersMessage,
}


__all__ = [
    "TradesPayload",
    "TradesMessage",
    "DiffOrdersPayload",
    "DiffOrdersMessage",
    "BidAsk",
    "OrdersPayload",
    "OrdersMessage",
    "Response",
    "RESPONSE_MODELS",
]
