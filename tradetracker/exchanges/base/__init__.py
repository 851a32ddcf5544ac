from .api import BaseExchangeAPI, parse_error_body
from .formatter import BaseFormatter
