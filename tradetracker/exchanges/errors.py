from typing import Any, Optional

from requests.exceptions import HTTPError


class TrackerError(Exception):
    """Base class for every error the proxy turns into a JSON response."""
    status_code = 500
    message = 'Internal error'

    def __init__(self, message: str = None, details: Any = None):
        super(TrackerError, self).__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self) -> dict:
        body = {'error': self.message}
        if self.details is not None:
            body['details'] = self.details
        return body


class ConfigurationError(TrackerError):
    message = 'API credentials are not configured in the environment'

    def __init__(self, has_key: bool = False, has_secret: bool = False):
        super(ConfigurationError, self).__init__()
        self.has_key = has_key
        self.has_secret = has_secret


class UpstreamError(TrackerError, HTTPError):
    """The exchange answered with a non-2xx status. Carries the exchange's status code and its
    error body, parsed as JSON when the content type says so.
    """

    def __init__(self, status_code: int, reason: str = '', details: Any = None, response=None):
        message = 'Failed to fetch data from the exchange: {}'.format(reason or status_code)
        TrackerError.__init__(self, message, details)
        self.response = response
        self.request = getattr(response, 'request', None)
        self.status_code = status_code
        self.reason = reason

    def to_dict(self) -> dict:
        return {'error': self.message, 'status': self.status_code, 'details': self.details}


class ClientError(UpstreamError):
    pass


class ServerError(UpstreamError):
    pass


class NetworkError(TrackerError):
    message = 'Network error while contacting the exchange'

    def __init__(self, cause: Optional[Exception] = None):
        super(NetworkError, self).__init__(details=str(cause) if cause else None)
        self.cause = cause


class AggregationError(TrackerError):
    message = 'Aggregated trade query failed'


class NotFound(TrackerError):
    status_code = 404
    message = 'API endpoint not found'
