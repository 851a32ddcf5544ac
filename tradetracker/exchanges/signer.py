import hashlib
import hmac
from typing import Callable, Dict, Mapping, NamedTuple, Optional
from urllib.parse import quote

from tradetracker import bitlogging
from tradetracker.settings import Defaults
from tradetracker.utils import now_ms


log = bitlogging.getLogger(__name__)

# Characters encodeURIComponent leaves alone
_URI_SAFE = "-_.!~*'()"


class SignedRequest(NamedTuple):
    path: str
    params: Dict[str, str]
    timestamp: int
    recv_window: int
    query_string: str
    signature: str

    def url(self, base_url: str) -> str:
        return f'{base_url}{self.path}?{self.query_string}&signature={self.signature}'


def canonical_query(params: Mapping[str, object]) -> str:
    """Serializes the params as ``key=value`` pairs sorted by key. Values are percent-encoded
    the same way a browser's ``encodeURIComponent`` does, which is what the exchange verifies
    the signature against.
    """
    return '&'.join(f'{key}={quote(str(params[key]), safe=_URI_SAFE)}'
                    for key in sorted(params))


def sign(query_string: str, secret: str) -> str:
    return hmac.new(secret.encode('utf-8'), query_string.encode('utf-8'), hashlib.sha256).hexdigest()


class Signer(object):
    """Timestamps and signs request parameters with the account's secret."""

    def __init__(self, secret: str, recv_window: int = Defaults.RECV_WINDOW,
                 clock: Callable[[], int] = now_ms):
        self._secret = secret
        self.recv_window = recv_window
        self._clock = clock

    def sign_request(self, path: str, params: Optional[Mapping[str, object]] = None,
                     offset: int = 0, timestamp: int = None) -> SignedRequest:
        """Merges ``timestamp`` and ``recvWindow`` into the params and signs the canonical
        query string.

        :param path: the API path, e.g. ``/fapi/v1/userTrades``
        :param params: caller query parameters
        :param offset: milliseconds to add to the local clock to match the exchange clock
        :param timestamp: explicit timestamp, overrides the clock and offset
        """
        if timestamp is None:
            timestamp = self._clock() + offset

        all_params = {k: str(v) for k, v in (params or {}).items()}
        all_params['timestamp'] = str(timestamp)
        all_params['recvWindow'] = str(self.recv_window)

        query_string = canonical_query(all_params)
        signature = sign(query_string, self._secret)

        log.debug('Signed {path} at {timestamp} (recvWindow={recv_window})',
                  event_name='signer.signed',
                  event_data={'path': path, 'timestamp': timestamp, 'recv_window': self.recv_window,
                              'param_keys': sorted(all_params)})
        return SignedRequest(path, all_params, timestamp, self.recv_window, query_string, signature)
