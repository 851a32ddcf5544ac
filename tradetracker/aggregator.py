from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Set, Tuple

from tradetracker import bitlogging
from tradetracker.exchanges.binance import BinanceFuturesAPI
from tradetracker.exchanges.errors import AggregationError, ConfigurationError, NetworkError, UpstreamError
from tradetracker.exchanges.types import TimeWindow, Trade
from tradetracker.settings import Defaults
from tradetracker.utils import now_ms, parse_int, parse_time_ms


log = bitlogging.getLogger(__name__)


TradeKey = Tuple[str, object]


def default_window(start: Optional[int] = None, end: Optional[int] = None, now: int = None) -> TimeWindow:
    """Fills in a missing bound: the end defaults to now and the start to 30 days ago."""
    now = now_ms() if now is None else now
    return TimeWindow(start if start is not None else now - Defaults.LOOKBACK_MS,
                      end if end is not None else now)


class TradeCollector(object):
    """Accumulates trades across pages, keeping the first copy of each (symbol, id)."""

    def __init__(self):
        self.trades = []  # type: List[Trade]
        self._seen = set()  # type: Set[TradeKey]

    def __len__(self):
        return len(self.trades)

    def add(self, trades: Iterable[Trade]) -> int:
        added = 0
        for trade in trades:
            key = (trade.get('symbol'), trade.get('id'))
            if key in self._seen:
                continue
            self._seen.add(key)
            self.trades.append(trade)
            added += 1
        return added

    def within(self, window: TimeWindow) -> List[Trade]:
        """Trades inside the window, newest first."""
        timed = ((parse_time_ms(t.get('time')), t) for t in self.trades)
        in_window = [(ts, t) for ts, t in timed if window.contains(ts)]
        in_window.sort(key=lambda x: x[0], reverse=True)
        return [t for _, t in in_window]


class TradeAggregator(object):
    """Reconstructs an account's trade history over an arbitrary window from the per-symbol,
    per-page, time-bounded trade endpoint.

    Symbols come from the account's open positions. The window is cut into slices no wider than
    the exchange allows and each slice is paged backwards until it is exhausted. A page that
    fails ends paging for its slice only; everything else collected is kept.
    """

    def __init__(self,
                 api: BinanceFuturesAPI,
                 page_size: int = Defaults.PAGE_SIZE,
                 max_pages: int = Defaults.MAX_PAGES_PER_SLICE,
                 max_slice_ms: int = Defaults.MAX_SLICE_MS,
                 max_workers: int = 1):
        self.api = api
        self.page_size = page_size
        self.max_pages = max_pages
        self.max_slice_ms = max_slice_ms
        self.max_workers = max(1, max_workers)

    def symbols(self) -> List[str]:
        try:
            positions = self.api.position_risk()
        except (UpstreamError, NetworkError) as e:
            log.warning('Unable to load positions, no symbols to aggregate: {error}',
                        event_name='aggregator.positions.failed',
                        event_data={'error': str(e)})
            return []
        return self.api.formatter.open_symbols(positions)

    def page_slice(self, symbol: str, window: TimeWindow) -> List[Trade]:
        """Pages backwards through one symbol's trades inside ``window``.

        Each page ends at the cursor; the next cursor is one millisecond before the oldest trade
        seen. Stops on a short page, once the oldest trade reaches the slice start, or after
        ``max_pages`` pages.
        """
        trades = []
        cursor = window.end
        for page in range(self.max_pages):
            try:
                batch = self.api.user_trades(format_resp=False, symbol=symbol, startTime=window.start,
                                             endTime=cursor, limit=self.page_size)
            except (UpstreamError, NetworkError) as e:
                log.warning('Abandoning {symbol} slice {start}-{end} after page {page}: {error}',
                            event_name='aggregator.slice.abandoned',
                            event_data={'symbol': symbol, 'start': window.start, 'end': window.end,
                                        'page': page, 'error': str(e)})
                break

            if not isinstance(batch, list) or not batch:
                break
            trades.extend(batch)

            times = [ts for ts in (parse_time_ms(t.get('time')) for t in batch) if ts is not None]
            min_time = min(times) if times else None
            if len(batch) < self.page_size or min_time is None or min_time <= window.start:
                break
            cursor = min_time - 1
        else:
            log.warning('Hit the {max_pages} page cap for {symbol} slice {start}-{end}',
                        event_name='aggregator.slice.page_cap',
                        event_data={'max_pages': self.max_pages, 'symbol': symbol,
                                    'start': window.start, 'end': window.end})
        return trades

    def fetch_symbol(self, symbol: str, slices: List[TimeWindow]) -> List[Trade]:
        trades = []
        for window in slices:
            trades.extend(self.page_slice(symbol, window))
        return trades

    def aggregate(self, window: TimeWindow) -> List[Trade]:
        """All of the account's trades inside ``window`` (inclusive), newest first, with no
        duplicate (symbol, id) pairs.
        """
        try:
            symbols = self.symbols()
            if not symbols:
                log.info('No open positions, nothing to aggregate', event_name='aggregator.no_symbols')
                return []

            slices = window.slices(self.max_slice_ms)
            log.info('Aggregating trades for {num_symbols} symbols over {num_slices} slices',
                     event_name='aggregator.start',
                     event_data={'num_symbols': len(symbols), 'num_slices': len(slices),
                                 'symbols': symbols, 'start': window.start, 'end': window.end})

            collector = TradeCollector()
            for trades in self._fetch_all(symbols, slices):
                collector.add(t for t in trades if self.api.formatter.allowed(t.get('symbol')))

            result = collector.within(window)
        except ConfigurationError:
            raise
        except Exception as e:
            log.exception('Trade aggregation failed: {error}', event_name='aggregator.error',
                          event_data={'error': str(e)})
            raise AggregationError(details=str(e)) from e

        log.info('Aggregated {count} trades ({collected} collected)', event_name='aggregator.done',
                 event_data={'count': len(result), 'collected': len(collector)})
        return result

    def _fetch_all(self, symbols: List[str], slices: List[TimeWindow]) -> List[List[Trade]]:
        if self.max_workers == 1 or len(symbols) == 1:
            return [self.fetch_symbol(symbol, slices) for symbol in symbols]
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(lambda s: self.fetch_symbol(s, slices), symbols))


def parse_window(params: Dict[str, str], now: int = None) -> Optional[TimeWindow]:
    """The requested filter window, or None if neither ``startTime`` nor ``endTime`` was given.
    Unparseable bounds fall back to their defaults.
    """
    raw_start, raw_end = params.get('startTime'), params.get('endTime')
    if not raw_start and not raw_end:
        return None
    return default_window(parse_int(raw_start), parse_int(raw_end), now=now)
