from typing import Any, Dict, List, NamedTuple, Optional

from tradetracker.settings import Defaults


Trade = Dict[str, Any]
"""
    {
        'symbol': 'BTCUSDT',
        'id': 698759,
        'orderId': 25851813,
        'side': 'SELL',
        'price': '7819.01',
        'qty': '0.002',
        'realizedPnl': '-0.91539999',
        'commission': '-0.07819010',
        'time': 1569514978020,
        ...
    }
"""

Position = Dict[str, Any]
"""
    {
        'symbol': 'BTCUSDT',
        'positionAmt': '0.500',
        'entryPrice': '6563.66500',
        'markPrice': '6564.00000',
        'unRealizedProfit': '0.17000000',
        ...
    }
"""

Account = Dict[str, Any]


class TimeWindow(NamedTuple):
    """An inclusive range of epoch milliseconds."""
    start: int
    end: int

    def contains(self, ts: Optional[int]) -> bool:
        return ts is not None and self.start <= ts <= self.end

    def slices(self, max_span: int = Defaults.MAX_SLICE_MS) -> List['TimeWindow']:
        """Splits the window into consecutive sub-windows no wider than ``max_span``, newest
        first. Every millisecond of the window, both bounds included, falls in exactly one slice.
        """
        result = []
        cursor = self.end
        while cursor >= self.start:
            slice_start = max(self.start, cursor - max_span + 1)
            result.append(TimeWindow(slice_start, cursor))
            cursor = slice_start - 1
        return result


class ClockOffset(NamedTuple):
    """Outcome of syncing against the exchange clock. ``synced`` is False when the server time
    couldn't be fetched, in which case ``offset`` is zero and ``error`` says why.
    """
    offset: int
    synced: bool
    error: Optional[str] = None

    @classmethod
    def unsynced(cls, error: str = None) -> 'ClockOffset':
        return cls(0, False, error)
