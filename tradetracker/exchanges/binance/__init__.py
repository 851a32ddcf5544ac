from .api import BinanceFuturesAPI
from .formatter import BinanceFormatter
