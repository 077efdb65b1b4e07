"""Market data models — fetched periods and upstream errors."""

from dataclasses import dataclass, field
from typing import Optional

from cocoa.analysis.models import PeriodSummary, PriceBar


class MarketDataError(Exception):
    """The upstream market data source returned an unusable payload."""


@dataclass(frozen=True)
class MultiPeriodData:
    """Summaries for the ``24h``, ``7d`` and ``30d`` windows.

    A period whose fetch produced no usable bars is absent from
    ``periods``.
    """

    symbol: str
    periods: dict[str, PeriodSummary] = field(default_factory=dict)

    def bars(self, period: str) -> list[PriceBar]:
        summary = self.periods.get(period)
        return list(summary.bars) if summary else []

    @property
    def current_price(self) -> Optional[float]:
        for name in ("24h", "7d", "30d"):
            if name in self.periods:
                return self.periods[name].current_price
        return None
