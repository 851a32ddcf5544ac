from pathlib import Path


PACKAGE_DIR = Path(__file__).resolve().parent
LOG_CONFIG_FILE = PACKAGE_DIR/'log_config.yaml'


MAINNET_URL = 'https://fapi.binance.com'
TESTNET_URL = 'https://testnet.binancefuture.com'


class Endpoints(object):
    SERVER_TIME = '/fapi/v1/time'
    ACCOUNT = '/fapi/v2/account'
    POSITION_RISK = '/fapi/v2/positionRisk'
    USER_TRADES = '/fapi/v1/userTrades'


class EnvVars(object):
    API_KEY = 'BINANCE_API_KEY'
    SECRET_KEY = 'BINANCE_SECRET_KEY'
    USE_TESTNET = 'USE_TESTNET'
    DENYLIST = 'TRACKER_SYMBOL_DENYLIST'
    PUBLIC_DIR = 'TRACKER_PUBLIC_DIR'
    SYNC_CLOCK = 'TRACKER_SYNC_CLOCK'
    LOG_CONFIG = 'TRACKER_LOG_CONFIG'


DAY_MS = 24 * 60 * 60 * 1000


class Defaults(object):
    API_KEY_HEADER = 'X-MBX-APIKEY'
    DASHBOARD_DOCUMENT = 'binance-tracker.html'
    HTTP_TIMEOUT = 20
    LOOKBACK_MS = 30 * DAY_MS
    MAX_LIMIT = 1000
    MAX_PAGES_PER_SLICE = 10
    MAX_SLICE_MS = 7 * DAY_MS
    MIN_LIMIT = 1
    PAGE_SIZE = 1000
    PUBLIC_DIR = 'public'
    RECV_WINDOW = 10000
    SERVER_PORT = 8788
    SYMBOL_DENYLIST = ('PUMPUSDT',)
    TRADES_LIMIT = 25
