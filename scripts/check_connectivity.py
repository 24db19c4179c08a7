"""
============================================================================
Bitso Exchange Client
Bitso Connectivity Check - REST Link Verification
============================================================================

Input Constraints: Optional .env configuration (BITSO_API_KEY / BITSO_API_SECRET)
Side Effects: Read-only API calls to Bitso

PURPOSE
-------
Verify REST connectivity with public market data. When credentials are
configured, also verify request signing by fetching account balances.

EXECUTION
---------
    python scripts/check_connectivity.py [book]

============================================================================
"""

import sys
import asyncio
import logging
from pathlib import Path
from decimal import Decimal

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bitso import BitsoClient, BitsoError, Book, ClientConfig


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(name)s | %(message)s'
)


async def main(book: Book) -> int:
    print("=" * 60)
    print("BITSO CONNECTIVITY CHECK")
    print("=" * 60)

    config = ClientConfig.from_environment()

    async with BitsoClient(config) as bitso:
        print(f"\n   Base URL: {config.base_url}")
        print(f"   Mode:     {'AUTHENTICATED' if bitso.is_authenticated else 'PUBLIC ONLY'}")
        print("-" * 60)

        try:
            ticker = (await bitso.get_ticker(book)).payload
        except BitsoError as e:
            print(f"\n[{e.error_code}] Ticker request failed: {e}")
            return 1

        print(f"\nTICKER {book}")
        print(f"   Last:   {ticker.last}")
        print(f"   Bid:    {ticker.bid}")
        print(f"   Ask:    {ticker.ask}")
        print(f"   Volume: {ticker.volume}")

        if not bitso.is_authenticated:
            print("\nConfigure BITSO_API_KEY and BITSO_API_SECRET to check private endpoints")
            return 0

        try:
            balances = (await bitso.get_account_balance()).payload
        except BitsoError as e:
            print(f"\n[{e.error_code}] Balance request failed: {e}")
            return 1

        print(f"\nBALANCES FOR {book}")
        print("-" * 60)
        for currency in (book.major, book.minor):
            balance = balances.get(currency)
            if balance is None:
                print(f"   {currency.upper():>6}: no balance reported")
            else:
                print(f"   {currency.upper():>6}: {balance.available} available / {balance.total} total")

        others = [
            b for b in balances.balances
            if b.currency.lower() not in (book.major, book.minor) and b.total > Decimal("0")
        ]
        if others:
            print("\n   Other currencies:")
            for balance in others:
                print(f"   {balance.currency.upper():>6}: {balance.available} available / {balance.total} total")

    print("\nCONNECTIVITY CHECK COMPLETE")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    selected = Book.from_symbol(sys.argv[1]) if len(sys.argv) > 1 else Book.BTC_MXN
    sys.exit(asyncio.run(main(selected)))
