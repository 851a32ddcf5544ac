from functools import wraps
from typing import Any, Callable

import requests
from requests.exceptions import RequestException

from tradetracker import bitlogging
from tradetracker.exchanges.errors import ClientError, NetworkError, ServerError, UpstreamError
from tradetracker.utils import format_log_args

from .formatter import BaseFormatter


log = bitlogging.getLogger(__name__)


def parse_error_body(resp: requests.Response) -> Any:
    """Best-effort parse of an error response: JSON if the content type says so, else raw text."""
    content_type = resp.headers.get('Content-Type') or ''
    if 'application/json' in content_type:
        try:
            return resp.json()
        except ValueError as e:
            return {'raw': resp.text, 'parseError': str(e)}
    return {'raw': resp.text}


class BaseExchangeAPI(object):
    """An exchange's REST API. Handles making requests, formatting responses, parsing errors
    and raising them.
    """
    formatter = BaseFormatter()

    def __init__(self, name: str):
        self.name = name

    def _wrap(self, func: Callable[..., requests.Response], format_resp: bool = True) -> Callable[..., Any]:
        """Wraps the given API function call in order to add logging, error handling, and formatting.

        :param func: a function performing the HTTP request and returning the response
        :param format_resp: if set to false, the response is not formatted at all and just the parsed JSON is returned
        """
        @wraps(func)
        def wrapped(*args, **kwargs):
            log.debug('API call -- {exchange}.{method}{log_args}',
                      event_name='exchange_api.call',
                      event_data={'exchange': self.name, 'method': func.__name__,
                                  'log_args': format_log_args(args, kwargs)})

            try:
                resp = func(*args, **kwargs)
            except RequestException as e:
                log.error('{exchange}.{method} request failed: {error}',
                          event_name='exchange_api.request_error',
                          event_data={'exchange': self.name, 'method': func.__name__, 'error': str(e)})
                raise NetworkError(e) from e

            if not resp.ok:
                raise self._http_error(func.__name__, resp)

            try:
                resp_data = resp.json()
            except ValueError as e:
                log.error('{exchange}.{method} returned a body that is not JSON',
                          event_name='exchange_api.decode_error',
                          event_data={'exchange': self.name, 'method': func.__name__})
                raise NetworkError(e) from e

            log.debug('{exchange}.{method} returned {count} records',
                      event_name='exchange_api.success',
                      event_data={'exchange': self.name, 'method': func.__name__,
                                  'count': len(resp_data) if isinstance(resp_data, list) else 'N/A'})

            if format_resp:
                formatter = getattr(self.formatter, func.__name__)
                return formatter(resp_data)

            return resp_data
        return wrapped

    def _http_error(self, method: str, resp: requests.Response) -> UpstreamError:
        details = parse_error_body(resp)
        event_data = {'exchange': self.name, 'method': method, 'status_code': resp.status_code,
                      'reason': resp.reason, 'error_message': details}
        log_msg = '{exchange}.{method} encountered an HTTP error ({status_code}): {error_message}'
        if 400 <= resp.status_code < 500:
            log.error(log_msg, event_name='exchange_api.http_error.client', event_data=event_data)
            error_cls = ClientError
        else:
            log.warning(log_msg, event_name='exchange_api.http_error.server', event_data=event_data)
            error_cls = ServerError if resp.status_code >= 500 else UpstreamError
        return error_cls(resp.status_code, resp.reason, details, response=resp)
