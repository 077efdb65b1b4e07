"""Period statistics — change, range and volatility of a fetched bar series."""

import math

from cocoa.analysis.models import PeriodSummary, PriceBar


def classify_trend(change_percent: float) -> str:
    """Coarse trend label for a period's percentage change."""
    if change_percent > 2:
        return "alta_forte"
    if change_percent > 0.5:
        return "alta"
    if change_percent < -2:
        return "queda_forte"
    if change_percent < -0.5:
        return "queda"
    return "lateral"


def calculate_volatility(prices: list[float]) -> float:
    """Population σ of *prices* relative to their mean, as a fraction.

    Returns 0.0 for fewer than two prices.
    """
    if len(prices) < 2:
        return 0.0
    mean = sum(prices) / len(prices)
    if mean == 0:
        return 0.0
    variance = sum((p - mean) ** 2 for p in prices) / len(prices)
    return math.sqrt(variance) / mean


def summarize_period(bars: list[PriceBar]) -> PeriodSummary:
    """Summarise a bar series (oldest-first) into a ``PeriodSummary``.

    Raises ``ValueError`` when no bar has a positive close.
    """
    valid = [b for b in bars if b.close > 0]
    if not valid:
        raise ValueError("summarize_period needs at least one bar with close > 0")

    prices = [b.close for b in valid]
    last = prices[-1]
    first = prices[0]
    change = last - first
    change_percent = change / first * 100 if first > 0 else 0.0

    return PeriodSummary(
        current_price=last,
        start_price=first,
        change=change,
        change_percent=change_percent,
        high=max(prices),
        low=min(prices),
        average=sum(prices) / len(prices),
        volatility=calculate_volatility(prices),
        trend=classify_trend(change_percent),
        bars=tuple(valid),
    )
