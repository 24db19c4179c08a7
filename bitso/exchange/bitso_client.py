# ============================================================================
# Bitso Exchange Client
# Bitso API Client - Typed Endpoint Wrappers
# ============================================================================
#
# Purpose: One method per Bitso v3 endpoint, built on RestDispatcher
#
# MANDATE:
#   - Every wrapper returns ResponseEnvelope[Model]
#   - Monetary inputs are sent as strings (no floats on the wire)
#   - Private wrappers fail with BITSO-SEC-001 before any request
#     when credentials are missing
#
# ============================================================================

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import httpx

from bitso.config import ClientConfig
from bitso.exchange.rest_dispatcher import ApiType, RestDispatcher
from bitso.schemas.books import Book
from bitso.schemas.envelope import ResponseEnvelope
from bitso.schemas.private import (
    AccountStatus,
    Balances,
    Fees,
    Funding,
    LedgerEntry,
    Order,
    PlacedOrder,
    UserTrade,
    Withdrawal,
)
from bitso.schemas.public import AvailableBook, OrderBook, Ticker, Trade

logger = logging.getLogger(__name__)


BookLike = Union[Book, str]
Amount = Union[Decimal, str, int]


# ============================================================================
# Request Parameters
# ============================================================================

def _wire_value(value: Any) -> Any:
    """Decimals and enums go over the wire as plain strings."""
    if isinstance(value, (Decimal, Book)):
        return str(value)
    return value


def _compact(params: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: _wire_value(value) for key, value in params.items() if value is not None}


@dataclass
class OptionalParams:
    """
    Pagination parameters shared by list endpoints.

    sort is "asc" or "desc"; marker is the id to start after.
    """
    marker: Optional[str] = None
    sort: Optional[str] = None
    limit: Optional[int] = None

    def to_params(self) -> Dict[str, Any]:
        return _compact(asdict(self))


@dataclass
class OrderParams:
    """
    Order sizing for place_order().

    Exactly one of major/minor is normally set; price is required for
    limit orders and stop for stop orders (Bitso validates this).
    """
    major: Optional[Amount] = None
    minor: Optional[Amount] = None
    price: Optional[Amount] = None
    stop: Optional[Amount] = None
    time_in_force: Optional[str] = None
    origin_id: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        return _compact(asdict(self))


def _merge(base: Dict[str, Any], params: Optional[OptionalParams]) -> Dict[str, Any]:
    if params is not None:
        base.update(params.to_params())
    return base


# ============================================================================
# Client
# ============================================================================

class BitsoClient:
    """
    Bitso v3 REST client.

    Example Usage:
        async with BitsoClient(ClientConfig.from_environment()) as bitso:
            ticker = await bitso.get_ticker(Book.BTC_MXN)
            print(ticker.payload.last)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.rest = RestDispatcher(config, http_client=http_client)

    @property
    def config(self) -> ClientConfig:
        return self.rest.config

    @property
    def is_authenticated(self) -> bool:
        return self.config.is_authenticated

    async def aclose(self) -> None:
        await self.rest.aclose()

    async def __aenter__(self) -> "BitsoClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.aclose()
        return False

    # ------------------------------------------------------------------
    # Public endpoints
    # ------------------------------------------------------------------

    async def get_available_books(self) -> ResponseEnvelope[List[AvailableBook]]:
        return await self.rest.call_model("GET", "/v3/available_books/", List[AvailableBook])

    async def get_ticker(self, book: BookLike) -> ResponseEnvelope[Ticker]:
        return await self.rest.call_model(
            "GET", "/v3/ticker/", Ticker, payload={"book": str(book)}
        )

    async def get_order_book(
        self,
        book: BookLike,
        aggregate: bool = True
    ) -> ResponseEnvelope[OrderBook]:
        """
        Order book for one book.

        With aggregate=False each entry carries its order id (oid).
        """
        payload = {"book": str(book), "aggregate": "true" if aggregate else "false"}
        return await self.rest.call_model("GET", "/v3/order_book/", OrderBook, payload=payload)

    async def get_trades(
        self,
        book: BookLike,
        params: Optional[OptionalParams] = None
    ) -> ResponseEnvelope[List[Trade]]:
        return await self.rest.call_model(
            "GET", "/v3/trades/", List[Trade], payload=_merge({"book": str(book)}, params)
        )

    # ------------------------------------------------------------------
    # Private endpoints: account
    # ------------------------------------------------------------------

    async def get_account_status(self) -> ResponseEnvelope[AccountStatus]:
        return await self.rest.call_model(
            "GET", "/v3/account_status/", AccountStatus, api_type=ApiType.PRIVATE
        )

    async def get_account_balance(self) -> ResponseEnvelope[Balances]:
        return await self.rest.call_model(
            "GET", "/v3/balance/", Balances, api_type=ApiType.PRIVATE
        )

    async def get_fees(self) -> ResponseEnvelope[Fees]:
        return await self.rest.call_model("GET", "/v3/fees/", Fees, api_type=ApiType.PRIVATE)

    async def get_ledger(
        self,
        params: Optional[OptionalParams] = None
    ) -> ResponseEnvelope[List[LedgerEntry]]:
        return await self.rest.call_model(
            "GET", "/v3/ledger/", List[LedgerEntry],
            payload=_merge({}, params), api_type=ApiType.PRIVATE
        )

    async def get_withdrawals(
        self,
        params: Optional[OptionalParams] = None
    ) -> ResponseEnvelope[List[Withdrawal]]:
        return await self.rest.call_model(
            "GET", "/v3/withdrawals/", List[Withdrawal],
            payload=_merge({}, params), api_type=ApiType.PRIVATE
        )

    async def get_fundings(
        self,
        params: Optional[OptionalParams] = None
    ) -> ResponseEnvelope[List[Funding]]:
        return await self.rest.call_model(
            "GET", "/v3/fundings/", List[Funding],
            payload=_merge({}, params), api_type=ApiType.PRIVATE
        )

    # ------------------------------------------------------------------
    # Private endpoints: trading
    # ------------------------------------------------------------------

    async def get_open_orders(
        self,
        book: Optional[BookLike] = None,
        params: Optional[OptionalParams] = None
    ) -> ResponseEnvelope[List[Order]]:
        payload = _merge({"book": str(book) if book is not None else None}, params)
        return await self.rest.call_model(
            "GET", "/v3/open_orders/", List[Order], payload=payload, api_type=ApiType.PRIVATE
        )

    async def lookup_orders(self, oids: Iterable[str]) -> ResponseEnvelope[List[Order]]:
        """
        Look up one or more orders by id.

        Raises:
            ValueError: If oids is empty
        """
        oid_list = list(oids)
        if not oid_list:
            raise ValueError("lookup_orders() requires at least one order id")
        return await self.rest.call_model(
            "GET", f"/v3/orders/{'-'.join(oid_list)}/", List[Order], api_type=ApiType.PRIVATE
        )

    async def cancel_order(self, oid: str) -> ResponseEnvelope[List[str]]:
        """Cancel one order; payload lists the cancelled ids."""
        logger.info(f"[BITSO-CLIENT] Cancel order | oid={oid}")
        return await self.rest.call_model(
            "DELETE", f"/v3/orders/{oid}/", List[str], api_type=ApiType.PRIVATE
        )

    async def cancel_all_orders(self) -> ResponseEnvelope[List[str]]:
        logger.info("[BITSO-CLIENT] Cancel all open orders")
        return await self.rest.call_model(
            "DELETE", "/v3/orders/all/", List[str], api_type=ApiType.PRIVATE
        )

    async def place_order(
        self,
        book: BookLike,
        side: str,
        order_type: str,
        params: Optional[OrderParams] = None
    ) -> ResponseEnvelope[PlacedOrder]:
        """
        Place a market, limit or stop order.

        Args:
            book: Order book, e.g. Book.BTC_MXN
            side: "buy" or "sell"
            order_type: "market" or "limit"
            params: Sizing / price / time-in-force

        Returns:
            Envelope whose payload carries the new order id
        """
        payload: Dict[str, Any] = {"book": str(book), "side": side, "type": order_type}
        if params is not None:
            payload.update(params.to_params())

        logger.info(
            f"[BITSO-CLIENT] Place order | book={payload['book']} | side={side} | "
            f"type={order_type} | major={payload.get('major')} | "
            f"minor={payload.get('minor')} | price={payload.get('price')}"
        )
        return await self.rest.call_model(
            "POST", "/v3/orders/", PlacedOrder, payload=payload, api_type=ApiType.PRIVATE
        )

    async def get_user_trades(
        self,
        book: Optional[BookLike] = None,
        params: Optional[OptionalParams] = None
    ) -> ResponseEnvelope[List[UserTrade]]:
        payload = _merge({"book": str(book) if book is not None else None}, params)
        return await self.rest.call_model(
            "GET", "/v3/user_trades/", List[UserTrade], payload=payload, api_type=ApiType.PRIVATE
        )

    # ------------------------------------------------------------------
    # Private endpoints: withdrawals
    # ------------------------------------------------------------------

    async def crypto_withdrawal(
        self,
        currency: str,
        amount: Amount,
        address: str,
        max_fee: Optional[Amount] = None,
        destination_tag: Optional[str] = None
    ) -> ResponseEnvelope[Withdrawal]:
        payload = _compact({
            "currency": currency,
            "amount": amount,
            "address": address,
            "max_fee": max_fee,
            "destination_tag": destination_tag,
        })
        logger.info(
            f"[BITSO-CLIENT] Crypto withdrawal | currency={currency} | amount={payload['amount']}"
        )
        return await self.rest.call_model(
            "POST", "/v3/crypto_withdrawal/", Withdrawal, payload=payload, api_type=ApiType.PRIVATE
        )

    async def spei_withdrawal(
        self,
        amount: Amount,
        recipient_given_names: str,
        recipient_family_names: str,
        clabe: str,
        notes_ref: Optional[str] = None,
        numeric_ref: Optional[str] = None
    ) -> ResponseEnvelope[Withdrawal]:
        """SPEI (MXN bank transfer) withdrawal to a CLABE account."""
        payload = _compact({
            "amount": amount,
            "recipient_given_names": recipient_given_names,
            "recipient_family_names": recipient_family_names,
            "clabe": clabe,
            "notes_ref": notes_ref,
            "numeric_ref": numeric_ref,
        })
        logger.info(f"[BITSO-CLIENT] SPEI withdrawal | amount={payload['amount']}")
        return await self.rest.call_model(
            "POST", "/v3/spei_withdrawal/", Withdrawal, payload=payload, api_type=ApiType.PRIVATE
        )


__all__ = ["BitsoClient", "OptionalParams", "OrderParams"]
