from typing import Iterable, List, Optional

from tradetracker.exchanges.base import BaseFormatter
from tradetracker.exchanges.types import Position, Trade
from tradetracker.settings import Defaults
from tradetracker.utils import parse_time_ms


def position_amount(position: Position) -> Optional[float]:
    try:
        return float(position.get('positionAmt'))
    except (TypeError, ValueError):
        return None


def trade_time(trade: Trade) -> int:
    ts = parse_time_ms(trade.get('time'))
    return ts if ts is not None else 0


class BinanceFormatter(BaseFormatter):
    """Filters the futures API responses the dashboard consumes. Every method is pure: the
    same input always gives the same output and the input list is never modified.
    """

    def __init__(self, denylist: Iterable[str] = Defaults.SYMBOL_DENYLIST):
        self.denylist = frozenset(denylist)

    def allowed(self, symbol: Optional[str]) -> bool:
        return bool(symbol) and symbol not in self.denylist

    def position_risk(self, positions: List[Position]) -> List[Position]:
        """Drops positions on denied symbols and those whose amount parses to exactly zero. An
        amount that doesn't parse at all is kept.
        """
        if not isinstance(positions, list):
            return []
        return [p for p in positions
                if self.allowed(p.get('symbol')) and position_amount(p) != 0.0]

    def open_symbols(self, positions: List[Position]) -> List[str]:
        """Unique symbols of the open positions, in first-seen order."""
        symbols = []
        for position in self.position_risk(positions):
            if position['symbol'] not in symbols:
                symbols.append(position['symbol'])
        return symbols

    def user_trades(self, trades: List[Trade]) -> List[Trade]:
        """Drops denied symbols and sorts newest first."""
        if not isinstance(trades, list):
            return []
        kept = [t for t in trades if t.get('symbol') not in self.denylist]
        return sorted(kept, key=trade_time, reverse=True)

    def recent_trades(self, trades: List[Trade], limit: int = Defaults.TRADES_LIMIT) -> List[Trade]:
        return self.user_trades(trades)[:limit]
