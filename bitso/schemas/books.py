"""
============================================================================
Bitso Exchange Client
Books and Channels - Closed Symbol Sets
============================================================================

Both enumerations carry their canonical wire string as the enum value and
reject unknown strings with a ValueError instead of defaulting.

See: https://bitso.com/api_info#available-books
============================================================================
"""

from enum import Enum


class Subscription(str, Enum):
    """The three Bitso WebSocket market-data channels."""
    TRADES = "trades"
    DIFF_ORDERS = "diff-orders"
    ORDERS = "orders"

    @classmethod
    def from_channel(cls, channel: str) -> "Subscription":
        """
        Reverse lookup from the wire name.

        Raises:
            ValueError: If the channel is not one of the three known kinds
        """
        try:
            return cls(channel)
        except ValueError:
            raise ValueError(f"Unknown Bitso channel: {channel!r}") from None

    def __str__(self) -> str:
        return self.value


class Book(str, Enum):
    """Tradable Bitso order books."""
    BTC_MXN = "btc_mxn"
    ETH_BTC = "eth_btc"
    ETH_ARS = "eth_ars"
    ETH_MXN = "eth_mxn"
    XRP_BTC = "xrp_btc"
    XRP_MXN = "xrp_mxn"
    LTC_BTC = "ltc_btc"
    LTC_MXN = "ltc_mxn"
    BCH_BTC = "bch_btc"
    BCH_MXN = "bch_mxn"
    TUSD_BTC = "tusd_btc"
    TUSD_MXN = "tusd_mxn"
    MANA_BTC = "mana_btc"
    MANA_MXN = "mana_mxn"
    BAT_BTC = "bat_btc"
    BAT_MXN = "bat_mxn"
    BTC_ARS = "btc_ars"
    BTC_DAI = "btc_dai"
    DAI_MXN = "dai_mxn"
    BTC_USD = "btc_usd"
    XRP_USD = "xrp_usd"
    ETH_USD = "eth_usd"
    DAI_ARS = "dai_ars"
    BTC_BRL = "btc_brl"

    @classmethod
    def from_symbol(cls, symbol: str) -> "Book":
        """
        Reverse lookup from the wire symbol (e.g. "btc_mxn").

        Raises:
            ValueError: If the symbol is not a known book
        """
        try:
            return cls(symbol)
        except ValueError:
            raise ValueError(f"Unknown Bitso book: {symbol!r}") from None

    @property
    def major(self) -> str:
        """Base currency code (e.g. "btc")."""
        return self.value.split("_", 1)[0]

    @property
    def minor(self) -> str:
        """Quote currency code (e.g. "mxn")."""
        return self.value.split("_", 1)[1]

    def __str__(self) -> str:
        return self.value


__all__ = ["Subscription", "Book"]
