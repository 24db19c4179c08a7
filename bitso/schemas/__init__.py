# ============================================================================
# Bitso Exchange Client
# Schemas Module - Typed Payloads
# ============================================================================
#
# Components:
#   - Book / Subscription: closed symbol and channel sets
#   - ResponseEnvelope: {success, payload} wrapper for REST bodies
#   - Public / private REST payload models
#   - WebSocket channel messages (Response union)
#
# ============================================================================

from bitso.schemas.books import Book, Subscription
from bitso.schemas.envelope import ResponseEnvelope, ErrorEnvelope, ErrorDetail
from bitso.schemas.public import (
    AvailableBook,
    Ticker,
    OrderBookEntry,
    OrderBook,
    Trade,
)
from bitso.schemas.private import (
    AccountStatus,
    Balance,
    Balances,
    BookFee,
    Fees,
    Order,
    PlacedOrder,
    UserTrade,
    BalanceUpdate,
    LedgerEntry,
    Withdrawal,
    Funding,
)
from bitso.schemas.websocket import (
    TradesPayload,
    TradesMessage,
    DiffOrdersPayload,
    DiffOrdersMessage,
    BidAsk,
    OrdersPayload,
    OrdersMessage,
    Response,
    RESPONSE_MODELS,
)

__all__ = [
    # Enums
    'Book',
    'Subscription',
    # Envelopes
    'ResponseEnvelope',
    'ErrorEnvelope',
    'ErrorDetail',
    # Public
    'AvailableBook',
    'Ticker',
    'OrderBookEntry',
    'OrderBook',
    'Trade',
    # Private
    'AccountStatus',
    'Balance',
    'Balances',
    'BookFee',
    'Fees',
    'Order',
    'PlacedOrder',
    'UserTrade',
    'BalanceUpdate',
    'LedgerEntry',
    'Withdrawal',
    'Funding',
    # WebSocket
    'TradesPayload',
    'TradesMessage',
    'DiffOrdersPayload',
    'DiffOrdersMessage',
    'BidAsk',
    'OrdersPayload',
    'OrdersMessage',
    'Response',
    'RESPONSE_MODELS',
]
