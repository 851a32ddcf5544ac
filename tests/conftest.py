import json
from urllib.parse import parse_qsl, urlsplit

import pytest
import requests

from tradetracker.config import ProxyConfig
from tradetracker.exchanges.binance import BinanceFuturesAPI
from tradetracker.settings import Endpoints


API_KEY = 'test-api-key-0123456789'
API_SECRET = 'test-api-secret-abcdefghij'


def make_trade(symbol: str, trade_id: int, time: int, **extra) -> dict:
    trade = {'symbol': symbol, 'id': trade_id, 'time': time, 'side': 'BUY', 'price': '1.0', 'qty': '1'}
    trade.update(extra)
    return trade


class FakeResponse(object):

    def __init__(self, data=None, status_code: int = 200, text: str = None,
                 content_type: str = 'application/json', reason: str = 'OK'):
        self.status_code = status_code
        self.reason = reason
        self.text = text if text is not None else json.dumps(data)
        self.headers = {'Content-Type': content_type}
        self.request = None

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f'{self.status_code} {self.reason}', response=self)


class FakeExchange(object):
    """Stands in for ``requests.Session``. Routes GETs by path to canned data, a ``FakeResponse``,
    an exception to raise, or a callable taking the query params and returning any of those.
    """

    def __init__(self):
        self.calls = []
        self.handlers = {}

    def route(self, path: str, handler):
        self.handlers[path] = handler
        return self

    def get(self, url, headers=None, timeout=None, **kwargs):
        parts = urlsplit(url)
        params = dict(parse_qsl(parts.query))
        self.calls.append({'path': parts.path, 'params': params, 'headers': headers or {}, 'url': url})

        if parts.path not in self.handlers:
            return FakeResponse({'code': -1, 'msg': 'unknown path'}, status_code=404, reason='Not Found')
        result = self.handlers[parts.path]
        if callable(result):
            result = result(params)
        if isinstance(result, Exception):
            raise result
        if isinstance(result, FakeResponse):
            return result
        return FakeResponse(result)

    def calls_to(self, path: str) -> list:
        return [c for c in self.calls if c['path'] == path]


class TradeHistory(object):
    """A ``/fapi/v1/userTrades`` handler backed by a list of trades. Returns the newest ``limit``
    trades of the symbol between ``startTime`` and ``endTime``, oldest first.
    """

    def __init__(self, trades, fail_when=None):
        self.trades = list(trades)
        self.fail_when = fail_when

    def __call__(self, params):
        if self.fail_when and self.fail_when(params):
            return FakeResponse({'code': -1003, 'msg': 'Too many requests'}, status_code=429,
                                reason='Too Many Requests')
        start, end = int(params['startTime']), int(params['endTime'])
        matching = sorted((t for t in self.trades
                           if t['symbol'] == params['symbol'] and start <= t['time'] <= end),
                          key=lambda t: t['time'])
        return matching[-int(params['limit']):]


@pytest.fixture
def public_dir(tmp_path):
    path = tmp_path/'public'
    path.mkdir()
    (path/'binance-tracker.html').write_text('<html><body>tracker</body></html>')
    (path/'script.js').write_text('console.log("tracker");')
    return path


@pytest.fixture
def config(public_dir):
    return ProxyConfig(api_key=API_KEY, api_secret=API_SECRET, public_dir=public_dir, sync_clock=False)


@pytest.fixture
def unconfigured(public_dir):
    return ProxyConfig(public_dir=public_dir, sync_clock=False)


@pytest.fixture
def exchange():
    return FakeExchange()


@pytest.fixture
def api(config, exchange):
    return BinanceFuturesAPI.from_config(config, session=exchange)


@pytest.fixture
def positions():
    return [
        {'symbol': 'SYMBOLA', 'positionAmt': '1.5'},
        {'symbol': 'SYMBOLB', 'positionAmt': '-2'},
        {'symbol': 'SYMBOLC', 'positionAmt': '0.000'},
        {'symbol': 'PUMPUSDT', 'positionAmt': '100'},
    ]


@pytest.fixture
def with_positions(exchange, positions):
    exchange.route(Endpoints.POSITION_RISK, positions)
    return exchange
