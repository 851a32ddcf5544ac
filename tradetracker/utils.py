import time
from typing import Any, Optional

import dateutil.parser


def now_ms() -> int:
    return int(time.time() * 1000)


def parse_int(value: Any) -> Optional[int]:
    """Parses a base-10 integer the way a query string carries it, returning None for blanks
    and garbage instead of raising.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip(), 10)
    except ValueError:
        return None


def parse_time_ms(value: Any) -> Optional[int]:
    """Exchange trade times are epoch milliseconds, but accept numeric strings and ISO-8601
    timestamps too. Returns None if the value can't be understood.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        pass
    try:
        return int(dateutil.parser.parse(str(value)).timestamp() * 1000)
    except (ValueError, OverflowError):
        return None


def clamp(value: int, lower: int, upper: int) -> int:
    return min(max(value, lower), upper)


def mask_secret(secret: Optional[str], visible: int = 4) -> str:
    if not secret:
        return ''
    return secret[:visible] + '...'


def format_log_args(args: tuple, kwargs: dict) -> tuple:
    return tuple(list(args) + ['{}={}'.format(kw, arg) for kw, arg in kwargs.items()])
