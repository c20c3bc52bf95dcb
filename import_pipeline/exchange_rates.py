"""
Exchange rate fetcher for converting foreign-currency expenses
Quotes come from a public JSON endpoint and are cached as the owner's setting
"""

from typing import Optional

import requests

from database.config import EXCHANGE_RATE_URL
from database.store import LedgerStore


class ExchangeRateFetcher:
    """Fetch and cache the local-per-foreign exchange rate"""

    QUOTE_FIELD = "venta"

    def __init__(self, store: LedgerStore, owner_id: str, url: str = EXCHANGE_RATE_URL):
        self.store = store
        self.owner_id = owner_id
        self.url = url

    def get_rate(self) -> float:
        """Current rate stored for the owner (default when never set)"""
        return self.store.get_exchange_rate(self.owner_id)

    def set_rate(self, rate: float) -> float:
        self.store.set_exchange_rate(self.owner_id, rate)
        return self.get_rate()

    def refresh(self) -> float:
        """
        Update the stored rate from the quote endpoint

        Returns:
            The fetched rate, or the stored one when the API is unavailable
        """
        rate = self._fetch_from_api()

        if rate:
            print(f"✅ Exchange rate updated: {rate:,.2f}")
            return self.set_rate(rate)

        stored = self.get_rate()
        print(f"⚠️  Rate not available, keeping {stored:,.2f}")
        return stored

    def _fetch_from_api(self) -> Optional[float]:
        """Fetch rate from the quote endpoint"""
        try:
            response = requests.get(self.url, timeout=5)

            if response.status_code == 200:
                data = response.json()
                rate = float(data[self.QUOTE_FIELD])
                if rate > 0:
                    return rate

        except Exception as e:
            print(f"API error for {self.url}: {e}")

        return None
