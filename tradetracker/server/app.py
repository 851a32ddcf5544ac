from typing import Optional

import requests
from flask import Flask, Response, current_app, jsonify, request, send_from_directory

from tradetracker import bitlogging
from tradetracker.aggregator import TradeAggregator, default_window, parse_window
from tradetracker.config import ProxyConfig
from tradetracker.exchanges import get_exchange
from tradetracker.exchanges.errors import NotFound, TrackerError
from tradetracker.settings import Defaults
from tradetracker.utils import clamp, parse_int


log = bitlogging.getLogger(__name__)


_FALSE_FLAGS = ('', '0', 'false', 'no', 'off')
API_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE']


def wants_aggregate(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() not in _FALSE_FLAGS


def parse_limit(value: Optional[str]) -> int:
    limit = parse_int(value) or Defaults.TRADES_LIMIT
    return clamp(limit, Defaults.MIN_LIMIT, Defaults.MAX_LIMIT)


def _api():
    return current_app.extensions['tracker']['api']


def _config() -> ProxyConfig:
    return current_app.config['TRACKER']


def account():
    return jsonify(_api().account())


def positions():
    return jsonify(_api().position_risk())


def trades():
    """Recent trades, or every trade in a window when ``startTime``, ``endTime`` or ``aggregate``
    is given.

    ``aggregate`` counts as off when it is empty, ``0``, ``false``, ``no`` or ``off``, so
    ``aggregate=false`` takes the fast path. Any other value aggregates.
    """
    args = request.args
    limit = parse_limit(args.get('limit'))
    window = parse_window(args)
    aggregate = wants_aggregate(args.get('aggregate'))

    if window is None and not aggregate:
        return jsonify(_api().recent_trades(limit, from_id=args.get('fromId')))

    aggregator = TradeAggregator(_api(), max_workers=current_app.extensions['tracker']['workers'])
    return jsonify(aggregator.aggregate(window or default_window()))


def config_summary():
    return jsonify(_config().summary())


def api_not_found(path: str = ''):
    raise NotFound()


def static_asset(filename: str = Defaults.DASHBOARD_DOCUMENT):
    return send_from_directory(str(_config().public_dir), filename)


def preflight():
    if request.method == 'OPTIONS':
        resp = Response(status=200)
        resp.headers['Access-Control-Allow-Methods'] = 'GET, OPTIONS'
        resp.headers['Access-Control-Allow-Headers'] = 'Content-Type'
        return resp
    return None


def add_cors_headers(resp: Response) -> Response:
    resp.headers['Access-Control-Allow-Origin'] = '*'
    log.debug('{method} {path} -> {status}', event_name='server.request',
              event_data={'method': request.method, 'path': request.path, 'status': resp.status_code})
    return resp


def handle_tracker_error(error: TrackerError):
    log.warning('{path} failed with {status}: {error}', event_name='server.error',
                event_data={'path': request.path, 'status': error.status_code, 'error': error.message})
    resp = jsonify(error.to_dict())
    resp.status_code = error.status_code
    return resp


def create_app(config: ProxyConfig = None, session: requests.Session = None, workers: int = 1) -> Flask:
    """Builds the proxy application.

    :param config: credentials and settings, read from the environment if omitted
    :param session: ``requests.Session`` used for every exchange call
    :param workers: number of symbols fetched concurrently when aggregating trades
    """
    config = config or ProxyConfig.from_env()

    app = Flask(__name__, static_folder=None)
    app.config['TRACKER'] = config
    app.extensions['tracker'] = {'api': get_exchange(config, session=session), 'workers': workers}

    app.add_url_rule('/api/account', 'account', account)
    app.add_url_rule('/api/positions', 'positions', positions)
    app.add_url_rule('/api/trades', 'trades', trades)
    app.add_url_rule('/api/config', 'config', config_summary)
    app.add_url_rule('/api', 'api_root', api_not_found, methods=API_METHODS)
    app.add_url_rule('/api/', 'api_root_slash', api_not_found, methods=API_METHODS)
    app.add_url_rule('/api/<path:path>', 'api_not_found', api_not_found, methods=API_METHODS)
    app.add_url_rule('/', 'index', static_asset)
    app.add_url_rule('/<path:filename>', 'static_asset', static_asset)

    app.before_request(preflight)
    app.after_request(add_cors_headers)
    app.register_error_handler(TrackerError, handle_tracker_error)

    log.info('Proxy ready ({network}, credentials configured: {has_config}, key: {masked_key})',
             event_name='server.init',
             event_data={'network': 'testnet' if config.use_testnet else 'mainnet',
                         'has_config': config.has_credentials, 'masked_key': config.masked_key})
    return app
