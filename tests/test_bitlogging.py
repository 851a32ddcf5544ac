import io
import json
import logging

import pytest

from tradetracker import bitlogging
from tradetracker.bitlogging import JSONFormatter
from tradetracker.bitlogging.filters import SecretRedactingFilter


class ListHandler(logging.Handler):

    def __init__(self):
        super(ListHandler, self).__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    handler = ListHandler()
    logger = logging.getLogger('tradetracker.tests')
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    yield handler
    logger.removeHandler(handler)


def test_adapter_formats_message_from_event_data(captured):
    log = bitlogging.getLogger('tradetracker.tests')
    log.info('Fetched {count} trades for {symbol}', event_name='aggregate.slice',
             event_data={'count': 3, 'symbol': 'BTCUSDT'})

    record, = captured.records
    assert record.getMessage() == 'Fetched 3 trades for BTCUSDT'
    assert record.event_name == 'aggregate.slice'
    assert record.event_data == {'count': 3, 'symbol': 'BTCUSDT'}


def test_adapter_leaves_message_alone_when_data_is_missing(captured):
    log = bitlogging.getLogger('tradetracker.tests')
    log.warning('Unfilled {placeholder}')

    record, = captured.records
    assert record.getMessage() == 'Unfilled {placeholder}'
    assert record.event_name == ''


def test_adapter_respects_level(captured):
    logging.getLogger('tradetracker.tests').setLevel(logging.WARNING)
    bitlogging.getLogger('tradetracker.tests').debug('hidden')
    assert captured.records == []


def test_redacting_filter_scrubs_secrets_and_signatures():
    redactor = SecretRedactingFilter(['my-secret', ''])
    record = logging.LogRecord('x', logging.INFO, __file__, 1,
                               'GET /fapi/v2/account?timestamp=1&signature=%s with %s',
                               ('abcdef0123', 'my-secret'), None)

    assert redactor.filter(record)
    assert record.getMessage() == 'GET /fapi/v2/account?timestamp=1&signature=*** with ***'


def test_json_formatter_emits_event_fields():
    record = logging.LogRecord('tradetracker.server', logging.INFO, __file__, 1, 'ready', (), None)
    record.event_name = 'server.init'
    record.event_data = {'network': 'testnet', 'symbols': ('A', 'B')}

    payload = json.loads(JSONFormatter().format(record))

    assert payload['event_name'] == 'server.init'
    assert payload['event_data'] == {'network': 'testnet', 'symbols': ['A', 'B']}
    assert payload['message'] == 'ready'
    assert payload['level'] == 'INFO'


def test_json_log_lines_carry_no_signatures_or_secrets():
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(SecretRedactingFilter(['my-secret']))
    logger = logging.getLogger('tradetracker.tests.json')
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    url = 'https://fapi.binance.com/fapi/v1/userTrades?timestamp=1&signature=deadbeefcafe1234'
    event_data = {'error': f'Max retries exceeded with url: {url}', 'nested': [{'secret': 'my-secret'}]}

    try:
        log = bitlogging.getLogger('tradetracker.tests.json')
        log.warning('Request failed: {error}', event_name='exchange_api.request_error', event_data=event_data)
        try:
            raise ConnectionError(url)
        except ConnectionError:
            log.exception('Aggregation failed', event_name='aggregator.error', event_data={'url': url})
    finally:
        logger.removeHandler(handler)

    lines = stream.getvalue().splitlines()
    assert len(lines) == 2
    assert 'deadbeefcafe1234' not in stream.getvalue()
    assert 'my-secret' not in stream.getvalue()
    assert json.loads(lines[0])['event_data']['nested'] == [{'secret': '***'}]
    assert 'signature=***' in json.loads(lines[1])['exc_info']
    assert 'deadbeefcafe1234' in event_data['error']
