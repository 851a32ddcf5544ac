import datetime
import json
import logging

import pytz
from tzlocal import get_localzone


class BaseFormatter(logging.Formatter):
    """Timestamps records in UTC, or in the machine's zone when ``as_utc`` is false. Without a
    ``datefmt`` the time is rendered as ISO-8601 with milliseconds.
    """

    def __init__(self, fmt: str = None, datefmt: str = None, style: str = '%', as_utc: bool = True):
        super(BaseFormatter, self).__init__(fmt=fmt, datefmt=datefmt, style=style)
        self.tz = pytz.utc if as_utc else get_localzone()

    def formatTime(self, record: logging.LogRecord, datefmt: str = None) -> str:
        created = datetime.datetime.fromtimestamp(record.created, self.tz)
        datefmt = datefmt or self.datefmt
        if datefmt:
            return created.strftime(datefmt)
        return created.isoformat(timespec='milliseconds')


def _jsonable(o):
    if isinstance(o, (set, frozenset)):
        return sorted(o, key=str)
    return repr(o)


class JSONFormatter(BaseFormatter):
    """One JSON object per line, carrying the event name and data alongside the message."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'time': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'event_name': getattr(record, 'event_name', ''),
            'event_data': getattr(record, 'event_data', {}),
            'message': record.getMessage(),
        }
        if record.exc_info:
            payload['exc_info'] = record.exc_text or self.formatException(record.exc_info)
        return json.dumps(payload, default=_jsonable)
