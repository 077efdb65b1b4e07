"""Structural levels — pivots, Fibonacci, ZigZag reversals and ATR. Pure functions."""

from cocoa.analysis.models import (
    PivotLevels,
    PriceBar,
    StructuralLevels,
    ZigZagPivot,
    ZigZagResult,
)

FIBONACCI_RATIOS: list[tuple[str, float]] = [
    ("0%", 0.0),
    ("23.6%", 0.236),
    ("38.2%", 0.382),
    ("50.0%", 0.5),
    ("61.8%", 0.618),
    ("78.6%", 0.786),
    ("100%", 1.0),
]

_ZIGZAG_KEEP = 5


def calculate_pivot_points(high: float, low: float, close: float) -> PivotLevels:
    """Classic pivot point with three support and three resistance levels."""
    pivot = (high + low + close) / 3
    rng = high - low
    return PivotLevels(
        pivot=pivot,
        support1=2 * pivot - high,
        support2=pivot - rng,
        support3=low - 2 * (high - pivot),
        resistance1=2 * pivot - low,
        resistance2=pivot + rng,
        resistance3=high + 2 * (pivot - low),
    )


def calculate_fibonacci_levels(
    high: float, low: float, trend: str = "alta"
) -> dict[str, float]:
    """Fibonacci retracement levels between *high* and *low*.

    An ``"alta"`` trend anchors 0 % at the low and 100 % at the high;
    any other trend anchors 0 % at the high.
    """
    diff = high - low
    if trend == "alta":
        return {name: low + diff * ratio for name, ratio in FIBONACCI_RATIOS}
    return {name: high - diff * ratio for name, ratio in FIBONACCI_RATIOS}


def _pct_change(price: float, base: float) -> float:
    if base == 0:
        return 0.0
    return (price - base) / base * 100


def detect_zigzag(closes: list[float], threshold_pct: float = 5.0) -> ZigZagResult:
    """Detect threshold-gated reversal pivots.

    A bar is a local high (low) when its close is strictly above (below)
    both neighbours. A local extremum of the opposite type to the last
    committed pivot is committed only if it moved at least *threshold_pct*
    percent away from that pivot (from the first close before any pivot).
    A same-type extremum that goes further than the last committed pivot
    replaces it, so committed pivots always alternate between high and low.

    Returns the last five pivots and a trend label derived from the last
    two: ``"alta"`` when the last pivot is a high above the previous one,
    ``"queda"`` when it is a low below it, ``"lateral"`` otherwise.
    """
    if len(closes) < 3:
        return ZigZagResult(pivots=(), trend="indefinido")

    pivots: list[ZigZagPivot] = []

    for i in range(1, len(closes) - 1):
        prev, curr, nxt = closes[i - 1], closes[i], closes[i + 1]
        if curr > prev and curr > nxt:
            kind = "high"
        elif curr < prev and curr < nxt:
            kind = "low"
        else:
            continue

        if pivots and pivots[-1].type == kind:
            last = pivots[-1]
            extends = curr > last.price if kind == "high" else curr < last.price
            if extends:
                base = pivots[-2].price if len(pivots) >= 2 else closes[0]
                pivots[-1] = ZigZagPivot(i, curr, kind, _pct_change(curr, base))
            continue

        base = pivots[-1].price if pivots else closes[0]
        change = _pct_change(curr, base)
        if kind == "high" and change >= threshold_pct:
            pivots.append(ZigZagPivot(i, curr, kind, change))
        elif kind == "low" and -change >= threshold_pct:
            pivots.append(ZigZagPivot(i, curr, kind, change))

    trend = "lateral"
    if len(pivots) >= 2:
        before, last = pivots[-2], pivots[-1]
        if last.type == "high" and last.price > before.price:
            trend = "alta"
        elif last.type == "low" and last.price < before.price:
            trend = "queda"

    return ZigZagResult(pivots=tuple(pivots[-_ZIGZAG_KEEP:]), trend=trend)


def calculate_atr(bars: list[PriceBar], period: int = 14) -> float:
    """Average True Range over the last *period* bars.

    TR = max(high - low, |high - prev_close|, |low - prev_close|)

    Bars with a non-positive high, low or close carry no range and are
    skipped. The first remaining bar has no previous close and contributes
    ``high - low``. Returns 0.0 for fewer than two usable bars.
    """
    ranged = [b for b in bars if b.high > 0 and b.low > 0 and b.close > 0]
    if len(ranged) < 2:
        return 0.0

    true_ranges: list[float] = [ranged[0].high - ranged[0].low]
    for i in range(1, len(ranged)):
        high = ranged[i].high
        low = ranged[i].low
        prev_close = ranged[i - 1].close
        true_ranges.append(
            max(high - low, abs(high - prev_close), abs(low - prev_close))
        )

    recent = true_ranges[-period:]
    return sum(recent) / len(recent)


def compute_structural_levels(
    bars: list[PriceBar],
    lookback: int = 30,
    zigzag_threshold_pct: float = 3.0,
    atr_period: int = 14,
) -> StructuralLevels:
    """Derive pivots, Fibonacci, ZigZag and ATR from *bars*.

    The swing high / low are taken from the last *lookback* bars; bars
    with a non-positive high or low are ignored for that purpose.
    """
    if not bars:
        raise ValueError("compute_structural_levels needs at least one bar")

    closes = [b.close for b in bars]
    current = closes[-1]
    highs = [b.high for b in bars if b.high > 0][-lookback:] or [current]
    lows = [b.low for b in bars if b.low > 0][-lookback:] or [current]
    high = max(highs)
    low = min(lows)

    zigzag = detect_zigzag(closes, zigzag_threshold_pct)
    return StructuralLevels(
        pivots=calculate_pivot_points(high, low, current),
        fibonacci=calculate_fibonacci_levels(high, low, zigzag.trend),
        zigzag=zigzag,
        atr=calculate_atr(bars, atr_period),
        high=high,
        low=low,
    )
