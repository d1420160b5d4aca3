import json

import pytest
import requests

from optiontrade.brokers.robinhood import RobinhoodClient
from optiontrade.brokers.session import TokenSession
from optiontrade.models.instrument import OptionInstrument

LONG_URL = "https://api.robinhood.com/options/instruments/aaaa-long/"
SHORT_URL = "https://api.robinhood.com/options/instruments/bbbb-short/"


class FakeHttp:
    """requests.Session 대역: 고정 응답을 돌려주고 호출을 기록"""

    def __init__(self, status=200, body=None, raw=None, exc=None):
        self.status = status
        self.body = body
        self.raw = raw
        self.exc = exc
        self.calls = []

    def request(self, method, url, headers=None, json=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "headers": headers, "json": json, "timeout": timeout}
        )
        if self.exc is not None:
            raise self.exc
        r = requests.Response()
        r.status_code = self.status
        r.encoding = "utf-8"
        r._content = self.raw if self.raw is not None else _dumps(self.body)
        return r


def _dumps(body):
    return json.dumps(body).encode("utf-8")


@pytest.fixture
def session():
    return TokenSession(auth_token="tok-123", account_number="5QR12345")


@pytest.fixture
def long_leg():
    return OptionInstrument(url=LONG_URL, chain_symbol="SPY", type="call", strike_price=450.0)


@pytest.fixture
def short_leg():
    return OptionInstrument(url=SHORT_URL, chain_symbol="SPY", type="call", strike_price=455.0)


@pytest.fixture
def make_client():
    def _make(**kw):
        http = FakeHttp(**kw)
        return RobinhoodClient(session=http), http

    return _make


@pytest.fixture
def params(long_leg, short_leg):
    return dict(
        side="sell",
        order_type="limit",
        price=1.5,
        time_in_force="gfd",
        long_leg=long_leg,
        short_leg=short_leg,
        quantity=2,
    )
