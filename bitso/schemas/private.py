"""
============================================================================
Bitso Exchange Client
Private REST Schemas - Account, Orders and Funding Payloads
============================================================================

Payload models for authenticated endpoints. Fields that Bitso documents as
optional, or that vary by currency/network, are Optional. Free-form
"details" objects stay as dictionaries.

See: https://bitso.com/api_info#private-endpoints
============================================================================
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


# =============================================================================
# Account
# =============================================================================

class AccountStatus(_Payload):
    client_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: str
    daily_limit: Optional[Decimal] = None
    daily_remaining: Optional[Decimal] = None
    monthly_limit: Optional[Decimal] = None
    monthly_remaining: Optional[Decimal] = None
    cash_deposit_allowance: Optional[Decimal] = None
    cellphone_number: Optional[str] = None
    cellphone_number_stored: Optional[str] = None
    email_stored: Optional[str] = None
    official_id: Optional[str] = None
    proof_of_residency: Optional[str] = None
    signed_contract: Optional[str] = None
    origin_of_funds: Optional[str] = None


class Balance(_Payload):
    currency: str
    total: Decimal
    locked: Decimal
    available: Decimal


class Balances(_Payload):
    balances: List[Balance] = Field(default_factory=list)

    def get(self, currency: str) -> Optional[Balance]:
        """Balance for one currency code, case-insensitive."""
        currency = currency.lower()
        for balance in self.balances:
            if balance.currency.lower() == currency:
                return balance
        return None


class BookFee(_Payload):
    book: str
    fee_decimal: Optional[Decimal] = None
    fee_percent: Optional[Decimal] = None
    taker_fee_decimal: Optional[Decimal] = None
    maker_fee_decimal: Optional[Decimal] = None


class Fees(_Payload):
    fees: List[BookFee] = Field(default_factory=list)
    withdrawal_fees: Dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Orders and Trades
# =============================================================================

class Order(_Payload):
    oid: str
    book: str
    original_amount: Optional[Decimal] = None
    unfilled_amount: Optional[Decimal] = None
    original_value: Optional[Decimal] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    price: Optional[Decimal] = None
    side: str
    status: str
    type: str
    origin_id: Optional[str] = None
    time_in_force: Optional[str] = None


class PlacedOrder(_Payload):
    oid: str


class UserTrade(_Payload):
    book: str
    major: Decimal
    minor: Decimal
    price: Decimal
    side: str
    tid: int
    oid: str
    fees_amount: Optional[Decimal] = None
    fees_currency: Optional[str] = None
    created_at: Optional[str] = None
    maker_side: Optional[str] = None


# =============================================================================
# Ledger and Funding
# =============================================================================

class BalanceUpdate(_Payload):
    currency: str
    amount: Decimal


class LedgerEntry(_Payload):
    eid: str
    operation: str
    created_at: Optional[str] = None
    balance_updates: List[BalanceUpdate] = Field(default_factory=list)
    details: Dict[str, Any] = Field(default_factory=dict)


class Withdrawal(_Payload):
    wid: str
    status: str
    created_at: Optional[str] = None
    currency: str
    method: Optional[str] = None
    amount: Decimal
    details: Dict[str, Any] = Field(default_factory=dict)


class Funding(_Payload):
    fid: str
    status: str
    created_at: Optional[str] = None
    currency: str
    method: Optional[str] = None
    amount: Decimal
    details: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "AccountStatus",
    "Balance",
    "Balances",
    "BookFee",
    "Fees",
    "Order",
    "PlacedOrder",
    "UserTrade",
    "BalanceUpdate",
    "LedgerEntry",
    "Withdrawal",
    "Funding",
]
