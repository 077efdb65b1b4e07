"""Technical indicators — RSI, CMO, SMA, EMA, Bollinger Bands. Pure functions, no I/O.

Every function is total over well-typed input: short or flat series fall
back to documented neutral values instead of raising.
"""

import math

from cocoa.analysis.models import BollingerBands, IndicatorSnapshot


def _recent_deltas(closes: list[float], period: int) -> tuple[float, float]:
    """Return (sum of gains, sum of |losses|) over the last *period* deltas."""
    gains = 0.0
    losses = 0.0
    for i in range(len(closes) - period, len(closes)):
        delta = closes[i] - closes[i - 1]
        if delta > 0:
            gains += delta
        else:
            losses += -delta
    return gains, losses


# ── RSI ──────────────────────────────────────────────────────────────────


def calculate_rsi(closes: list[float], period: int = 14) -> float:
    """Calculate the Relative Strength Index over the last *period* deltas.

    Algorithm:
        1. delta = close[i] - close[i-1] for the last *period* bars.
        2. avg_gain / avg_loss = sum of gains / |losses| ÷ *period*.
        3. RSI = 100 - 100 / (1 + avg_gain / avg_loss)

    Fallbacks:
        * fewer than ``period + 1`` closes → 50 (neutral).
        * no gains and no losses (flat window) → 50.
        * no losses but some gains → 100.
    """
    if len(closes) < period + 1:
        return 50.0

    gains, losses = _recent_deltas(closes, period)
    avg_gain = gains / period
    avg_loss = losses / period

    if avg_loss == 0:
        return 50.0 if avg_gain == 0 else 100.0

    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


# ── CMO ──────────────────────────────────────────────────────────────────


def calculate_cmo(closes: list[float], period: int = 14) -> float:
    """Calculate the Chande Momentum Oscillator.

    ``CMO = 100 × (sum_up − sum_down) / (sum_up + sum_down)``

    Returns 0 when both sums are zero or when fewer than ``period + 1``
    closes are available.
    """
    if len(closes) < period + 1:
        return 0.0

    sum_up, sum_down = _recent_deltas(closes, period)
    total = sum_up + sum_down
    if total == 0:
        return 0.0
    return 100.0 * (sum_up - sum_down) / total


# ── Moving averages ──────────────────────────────────────────────────────


def calculate_sma(values: list[float], period: int) -> float:
    """Arithmetic mean of the last *period* values.

    With fewer than *period* values the last available value is returned
    (0.0 for an empty list).
    """
    if len(values) < period:
        return values[-1] if values else 0.0
    window = values[-period:]
    return sum(window) / period


def calculate_ema_series(values: list[float], period: int) -> list[float]:
    """Calculate an Exponential Moving Average series.

    Uses ``EMA_today = value × k + EMA_yesterday × (1 - k)`` with
    ``k = 2 / (period + 1)``. The value at index ``period - 1`` is seeded
    with the SMA of the first *period* values.

    Returns a list the same length as *values*. Entries before the seed
    hold the raw input value (warm-up), so a series shorter than *period*
    is returned unchanged.
    """
    if period < 1:
        raise ValueError(f"EMA period must be >= 1, got {period}")

    ema = list(values)
    if len(values) < period:
        return ema

    k = 2.0 / (period + 1)
    ema[period - 1] = sum(values[:period]) / period
    for i in range(period, len(values)):
        ema[i] = values[i] * k + ema[i - 1] * (1 - k)
    return ema


def calculate_ema(values: list[float], period: int) -> float:
    """Latest EMA value (last value of :func:`calculate_ema_series`)."""
    if not values:
        return 0.0
    return calculate_ema_series(values, period)[-1]


# ── Bollinger Bands ──────────────────────────────────────────────────────


def calculate_bollinger(
    values: list[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerBands:
    """Calculate Bollinger Bands for the most recent window.

    Middle = SMA(*period*)
    Upper  = middle + *std_dev* × σ
    Lower  = middle − *std_dev* × σ

    σ is the population standard deviation of the last *period* values
    (fewer if the series is shorter). ``bandwidth_pct`` is the band width
    as a percentage of the middle line.
    """
    if not values:
        return BollingerBands(0.0, 0.0, 0.0, 0.0)

    middle = calculate_sma(values, period)
    window = values[-period:]
    variance = sum((x - middle) ** 2 for x in window) / len(window)
    band = abs(std_dev) * math.sqrt(variance)

    upper = middle + band
    lower = middle - band
    bandwidth = (upper - lower) / middle * 100 if middle else 0.0
    return BollingerBands(upper=upper, middle=middle, lower=lower, bandwidth_pct=bandwidth)


def compute_indicator_snapshot(closes: list[float]) -> IndicatorSnapshot:
    """Compute every indicator used by the signal scorer."""
    return IndicatorSnapshot(
        rsi=calculate_rsi(closes),
        cmo=calculate_cmo(closes),
        sma20=calculate_sma(closes, 20),
        sma50=calculate_sma(closes, 50),
        ema9=calculate_ema(closes, 9),
        ema21=calculate_ema(closes, 21),
        bollinger=calculate_bollinger(closes),
    )
