from typing import Dict, List, Optional

import requests
from requests.exceptions import RequestException

from tradetracker import bitlogging
from tradetracker.exchanges.base import BaseExchangeAPI
from tradetracker.exchanges.errors import ConfigurationError
from tradetracker.exchanges.signer import Signer
from tradetracker.exchanges.types import Account, ClockOffset, Position, Trade
from tradetracker.settings import MAINNET_URL, Defaults, Endpoints
from tradetracker.utils import now_ms

from .formatter import BinanceFormatter


log = bitlogging.getLogger(__name__)


class BinanceFuturesAPI(BaseExchangeAPI):
    """Signed, read-only access to the USD-M futures REST API."""

    def __init__(self,
                 api_key: Optional[str],
                 api_secret: Optional[str],
                 base_url: str = MAINNET_URL,
                 denylist=Defaults.SYMBOL_DENYLIST,
                 sync_clock: bool = True,
                 session: requests.Session = None,
                 timeout: int = Defaults.HTTP_TIMEOUT):
        super(BinanceFuturesAPI, self).__init__('binance')
        self.base_url = base_url
        self.formatter = BinanceFormatter(denylist)
        self.sync_clock = sync_clock
        self._api_key = api_key
        self._signer = Signer(api_secret) if api_secret else None
        self._session = session or requests.Session()
        self._timeout = timeout

    @classmethod
    def from_config(cls, config, session: requests.Session = None) -> 'BinanceFuturesAPI':
        return cls(config.api_key, config.api_secret,
                   base_url=config.base_url,
                   denylist=config.symbol_denylist,
                   sync_clock=config.sync_clock,
                   session=session)

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key and self._signer)

    def server_time(self) -> int:
        resp = self._session.get(self.base_url + Endpoints.SERVER_TIME, timeout=self._timeout)
        resp.raise_for_status()
        return int(resp.json()['serverTime'])

    def clock_offset(self) -> ClockOffset:
        """Difference between the exchange clock and ours. Never raises: any failure degrades
        to a zero offset so the request can still go out with the local clock.
        """
        try:
            local_time = now_ms()
            server_time = self.server_time()
        except (RequestException, ValueError, KeyError, TypeError) as e:
            log.warning('Unable to fetch {exchange} server time, using local clock: {error}',
                        event_name='signer.clock_sync.failed',
                        event_data={'exchange': self.name, 'error': str(e)})
            return ClockOffset.unsynced(str(e))

        offset = server_time - local_time
        log.debug('{exchange} server time {server_time}, local time {local_time}, offset {offset}ms',
                  event_name='signer.clock_sync.success',
                  event_data={'exchange': self.name, 'server_time': server_time,
                              'local_time': local_time, 'offset': offset})
        return ClockOffset(offset, True)

    def _signed_get(self, path: str, params: Dict[str, object] = None) -> requests.Response:
        if not self.has_credentials:
            log.error('API credentials are not configured (key: {has_key}, secret: {has_secret})',
                      event_name='exchange_api.config_error',
                      event_data={'has_key': bool(self._api_key), 'has_secret': bool(self._signer)})
            raise ConfigurationError(has_key=bool(self._api_key), has_secret=bool(self._signer))

        offset = self.clock_offset().offset if self.sync_clock else 0
        signed = self._signer.sign_request(path, params, offset=offset)

        log.info('GET {base_url}{path}', event_name='exchange_api.request',
                 event_data={'base_url': self.base_url, 'path': path, 'timestamp': signed.timestamp})
        return self._session.get(signed.url(self.base_url),
                                 headers={Defaults.API_KEY_HEADER: self._api_key},
                                 timeout=self._timeout)

    def account(self) -> Account:
        def account():
            return self._signed_get(Endpoints.ACCOUNT)
        return self._wrap(account)()

    def position_risk(self) -> List[Position]:
        def position_risk():
            return self._signed_get(Endpoints.POSITION_RISK)
        return self._wrap(position_risk)()

    def user_trades(self, format_resp: bool = True, **params) -> List[Trade]:
        """Account trade list. Formatted responses have denied symbols removed and are sorted
        newest first; raw responses are exactly what the exchange sent.
        """
        def user_trades(**params):
            return self._signed_get(Endpoints.USER_TRADES, params)
        return self._wrap(user_trades, format_resp=format_resp)(**params)

    def recent_trades(self, limit: int = Defaults.TRADES_LIMIT, from_id: Optional[str] = None) -> List[Trade]:
        params = {'limit': limit}
        if from_id:
            params['fromId'] = from_id
        return self.formatter.recent_trades(self.user_trades(format_resp=False, **params), limit)
