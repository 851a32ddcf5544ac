import re
from urllib.parse import parse_qsl

import pytest

from tradetracker.exchanges.signer import Signer, canonical_query, sign


# Example from the exchange's API documentation
DOCS_SECRET = 'NhqPtmdSJYdKjVHjA7PZj4Mge3R5YNiP1e3UZjInClVN65XAbvqqM6A7H5fATj0j'
DOCS_QUERY = ('symbol=LTCBTC&side=BUY&type=LIMIT&timeInForce=GTC&quantity=1&price=0.1'
              '&recvWindow=5000&timestamp=1499827319559')
DOCS_SIGNATURE = 'c8db56825ae71d6d79447849e617115f4a920fa2acdcab2b053c4b2838bd6b71'


def test_sign_matches_documented_example():
    assert sign(DOCS_QUERY, DOCS_SECRET) == DOCS_SIGNATURE


def test_signature_is_lowercase_hex_sha256():
    signature = sign('a=1&b=2', 'secret')
    assert re.fullmatch(r'[0-9a-f]{64}', signature)


def test_canonical_query_sorts_keys():
    assert canonical_query({'symbol': 'BTCUSDT', 'limit': 5, 'endTime': 10}) == \
        'endTime=10&limit=5&symbol=BTCUSDT'


def test_canonical_query_sorts_by_code_point():
    # Uppercase sorts before lowercase
    assert canonical_query({'b': 1, 'B': 2, 'a': 3}) == 'B=2&a=3&b=1'


def test_canonical_query_percent_encodes_values():
    query = canonical_query({'note': "a b/c&d=e", 'keep': "-_.!~*'()"})
    assert query == "keep=-_.!~*'()&note=a%20b%2Fc%26d%3De"


@pytest.mark.parametrize('params', [
    {},
    {'symbol': 'BTCUSDT'},
    {'symbol': 'ETHUSDT', 'startTime': 1700000000000, 'endTime': 1700604800000, 'limit': 1000},
    {'fromId': '12345', 'limit': '25', 'Zeta': 'z', 'alpha': 'a'},
])
def test_signing_is_deterministic(params):
    signer = Signer('secret')
    first = signer.sign_request('/fapi/v1/userTrades', params, timestamp=1700000000000)
    second = signer.sign_request('/fapi/v1/userTrades', dict(params), timestamp=1700000000000)
    assert first.signature == second.signature
    assert first.query_string == second.query_string


@pytest.mark.parametrize('params', [
    {'symbol': 'BTCUSDT', 'limit': 10},
    {'z': 1, 'y': 2, 'x': 3, 'recvWindowX': 4, 'Timestamp': 5},
])
def test_signed_query_keys_are_sorted(params):
    signed = Signer('secret').sign_request('/fapi/v2/account', params, timestamp=1)
    keys = [k for k, _ in parse_qsl(signed.query_string)]
    assert keys == sorted(keys)
    assert 'timestamp' in keys and 'recvWindow' in keys


def test_sign_request_merges_timestamp_and_recv_window():
    signed = Signer('secret', recv_window=10000).sign_request('/fapi/v2/account', {}, timestamp=42)
    assert signed.params == {'timestamp': '42', 'recvWindow': '10000'}
    assert signed.query_string == 'recvWindow=10000&timestamp=42'
    assert signed.signature == sign('recvWindow=10000&timestamp=42', 'secret')


def test_sign_request_applies_clock_offset():
    signer = Signer('secret', clock=lambda: 1000)
    assert signer.sign_request('/p', offset=250).timestamp == 1250
    assert signer.sign_request('/p', offset=-1000).timestamp == 0


def test_signed_url_appends_signature_last():
    signed = Signer('secret').sign_request('/fapi/v1/userTrades', {'limit': 25}, timestamp=7)
    url = signed.url('https://fapi.binance.com')
    assert url == ('https://fapi.binance.com/fapi/v1/userTrades?limit=25&recvWindow=10000&timestamp=7'
                   '&signature=' + signed.signature)


def test_different_secrets_give_different_signatures():
    a = Signer('secret-a').sign_request('/p', {'x': 1}, timestamp=1)
    b = Signer('secret-b').sign_request('/p', {'x': 1}, timestamp=1)
    assert a.signature != b.signature
