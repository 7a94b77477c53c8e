"""Tests for the price feeds"""

import httpx
import pytest

from dao_sdk.errors import PriceUnavailable
from dao_sdk.oracle import (
    CoinGeckoPriceFeed,
    FixedPriceFeed,
    resolve_unit_price,
    to_minor_units,
)


def feed_returning(handler):
    return CoinGeckoPriceFeed(transport=httpx.MockTransport(handler))


def test_reads_nested_price_in_cents():
    seen = {}

    def handler(request):
        seen['params'] = dict(request.url.params)
        return httpx.Response(200, json={'solana': {'usd': 100.5}})

    assert feed_returning(handler).get_unit_price() == 10050
    assert seen['params'] == {'ids': 'solana', 'vs_currencies': 'usd'}


@pytest.mark.parametrize('price,cents', [
    (100, 10000),
    (123.455, 12346),
    (0.994, 99),
    ('42.1', 4210),
])
def test_to_minor_units_rounds_half_up(price, cents):
    assert to_minor_units(price) == cents


@pytest.mark.parametrize('price', [None, 'abc', 0, -3.2, True, float('nan')])
def test_to_minor_units_rejects(price):
    with pytest.raises(PriceUnavailable):
        to_minor_units(price)


@pytest.mark.parametrize('response', [
    httpx.Response(500, text='upstream down'),
    httpx.Response(200, text='not json'),
    httpx.Response(200, json={'bitcoin': {'usd': 1}}),
    httpx.Response(200, json={'solana': {}}),
    httpx.Response(200, json=['solana']),
    httpx.Response(200, json={'solana': {'usd': 'n/a'}}),
])
def test_bad_responses_raise_price_unavailable(response):
    with pytest.raises(PriceUnavailable):
        feed_returning(lambda request: response).get_unit_price()


def test_transport_error_raises_price_unavailable():
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    with pytest.raises(PriceUnavailable):
        feed_returning(handler).get_unit_price()


def test_no_retry_on_failure():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    with pytest.raises(PriceUnavailable):
        feed_returning(handler).get_unit_price()
    assert len(calls) == 1


def test_resolve_prefers_override():
    class ExplodingFeed:
        def get_unit_price(self):
            raise AssertionError('feed should not be called')

    assert resolve_unit_price(1234, ExplodingFeed()) == 1234


def test_resolve_uses_feed():
    assert resolve_unit_price(None, FixedPriceFeed(9999)) == 9999


def test_resolve_without_source():
    with pytest.raises(PriceUnavailable):
        resolve_unit_price()
