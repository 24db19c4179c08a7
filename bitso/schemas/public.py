"""
============================================================================
Bitso Exchange Client
Public REST Schemas - Market Data Payloads
============================================================================

Payload models for the unauthenticated endpoints:
- /v3/available_books/
- /v3/ticker/
- /v3/order_book/
- /v3/trades/

Bitso sends numeric values as JSON strings; they decode to Decimal.
Unknown fields are ignored so new API fields do not break decoding.
============================================================================
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class AvailableBook(_Payload):
    """Order placement limits for one book."""
    book: str
    minimum_amount: Optional[Decimal] = None
    maximum_amount: Optional[Decimal] = None
    minimum_price: Optional[Decimal] = None
    maximum_price: Optional[Decimal] = None
    minimum_value: Optional[Decimal] = None
    maximum_value: Optional[Decimal] = None


class Ticker(_Payload):
    book: str
    volume: Optional[Decimal] = None
    high: Optional[Decimal] = None
    last: Optional[Decimal] = None
    low: Optional[Decimal] = None
    vwap: Optional[Decimal] = None
    ask: Optional[Decimal] = None
    bid: Optional[Decimal] = None
    created_at: Optional[str] = None


class OrderBookEntry(_Payload):
    book: Optional[str] = None
    price: Decimal
    amount: Decimal
    # Present only for non-aggregated books
    oid: Optional[str] = None


class OrderBook(_Payload):
    asks: List[OrderBookEntry] = Field(default_factory=list)
    bids: List[OrderBookEntry] = Field(default_factory=list)
    updated_at: Optional[str] = None
    sequence: Optional[str] = None


class Trade(_Payload):
    book: str
    created_at: Optional[str] = None
    amount: Decimal
    maker_side: Optional[str] = None
    price: Decimal
    tid: int


__all__ = [
    "AvailableBook",
    "Ticker",
    "OrderBookEntry",
    "OrderBook",
    "Trade",
]
