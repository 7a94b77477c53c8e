"""SOL/USD price sources for fee computation"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Protocol

import httpx

from .errors import PriceUnavailable

logger = logging.getLogger(__name__)

COINGECKO_URL = 'https://api.coingecko.com/api/v3/simple/price'


class PriceFeed(Protocol):
    def get_unit_price(self) -> int:
        """Price of one SOL in US cents"""
        ...


def to_minor_units(price) -> int:
    """Round a decimal USD price to integer cents, half up"""
    if isinstance(price, bool):
        raise PriceUnavailable(f"Price is not numeric: {price!r}")
    try:
        cents = (Decimal(str(price)) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as e:
        raise PriceUnavailable(f"Price is not numeric: {price!r}") from e
    if not cents.is_finite() or cents <= 0:
        raise PriceUnavailable(f"Price must be positive, got {price!r}")
    return int(cents)


class CoinGeckoPriceFeed:
    """Reads the SOL/USD price from the CoinGecko simple price endpoint"""

    def __init__(
        self,
        url: str = COINGECKO_URL,
        coin_id: str = 'solana',
        currency: str = 'usd',
        timeout: float = 10,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url
        self.coin_id = coin_id
        self.currency = currency
        self.timeout = timeout
        self._transport = transport

    def get_unit_price(self) -> int:
        params = {'ids': self.coin_id, 'vs_currencies': self.currency}
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(self.url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise PriceUnavailable(f"Failed to fetch {self.coin_id} price: {e}") from e
        except ValueError as e:
            raise PriceUnavailable(f"Price feed returned invalid JSON: {e}") from e

        try:
            price = data[self.coin_id][self.currency]
        except (KeyError, TypeError) as e:
            raise PriceUnavailable(
                f"Price feed response missing {self.coin_id}.{self.currency}"
            ) from e

        cents = to_minor_units(price)
        logger.debug("Fetched %s price: %s cents", self.coin_id, cents)
        return cents


class FixedPriceFeed:
    """Always returns the same price. For tests and reproducible fees."""

    def __init__(self, unit_price: int):
        self.unit_price = unit_price

    def get_unit_price(self) -> int:
        return self.unit_price


def resolve_unit_price(override: Optional[int] = None, feed: Optional[PriceFeed] = None) -> int:
    """Use the caller's price if given, otherwise ask the feed once"""
    if override is not None:
        return override
    if feed is None:
        raise PriceUnavailable("No unit price supplied and no price feed configured")
    return feed.get_unit_price()
