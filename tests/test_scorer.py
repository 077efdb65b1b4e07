"""Deterministic tests for the composite signal scorer.

All tests use fixed bar fixtures. Same input = same output, always.
"""

import random
from datetime import datetime, timezone

import pytest

from cocoa.analysis.scorer import (
    LONG,
    MODERATE_BUY,
    MODERATE_SELL,
    NEUTRAL,
    SHORT,
    WAIT,
    classify_strength,
    generate_signal,
)
from cocoa.analysis.models import PriceBar

FIXED_NOW = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)


# ── Bar fixtures ─────────────────────────────────────────────────────────


def _bars_from_closes(closes: list[float], spread: float = 1.0) -> list[PriceBar]:
    return [
        PriceBar(
            timestamp=f"bar-{i:03d}",
            open=c - spread / 2,
            high=c + spread,
            low=c - spread,
            close=c,
            volume=1000,
        )
        for i, c in enumerate(closes)
    ]


def _flat_bars(n: int = 30) -> list[PriceBar]:
    return _bars_from_closes([100.0] * n, spread=0.0)


def _rising_closes() -> list[float]:
    """100 → 130 over 30 bars."""
    return [100.0 + i * 30.0 / 29 for i in range(30)]


def _random_bars(seed: int, n: int = 90) -> list[PriceBar]:
    rng = random.Random(seed)
    closes = [100.0]
    for _ in range(n - 1):
        closes.append(closes[-1] * (1 + rng.uniform(-0.05, 0.05)))
    return _bars_from_closes(closes, spread=rng.uniform(0.1, 3.0))


# ── Degradation ──────────────────────────────────────────────────────────


class TestInsufficientData:
    """Degraded AGUARDAR result below the minimum bar count."""

    def test_fewer_than_20_bars_waits(self):
        """19 valid bars are one short of a scoreable window."""
        signal = generate_signal(_bars_from_closes([100.0 + i for i in range(19)]))
        assert signal.signal == WAIT
        assert signal.strength == 0
        assert signal.error == "insufficient data"
        assert signal.is_degraded

    def test_zero_close_bars_are_filtered(self):
        """Zero closes do not count towards the minimum."""
        closes = [100.0 + i for i in range(15)] + [0.0] * 10
        signal = generate_signal(_bars_from_closes(closes))
        assert signal.signal == WAIT

    def test_degraded_shape_matches_normal_shape(self):
        """Degraded and normal signals serialise to the same keys."""
        degraded = generate_signal(_flat_bars(5)).to_dict()
        normal = generate_signal(_flat_bars(30)).to_dict()
        assert set(degraded) == set(normal)
        assert degraded["stopLoss"] is None
        assert normal["error"] is None


# ── Fixture scenarios ────────────────────────────────────────────────────


class TestScenarios:
    """Fixed price paths with known scores."""

    def test_flat_series_is_neutral(self):
        """No rule fires on a flat series."""
        signal = generate_signal(_flat_bars(30))
        assert signal.indicators.rsi == 50.0
        assert signal.indicators.bollinger.bandwidth_pct == pytest.approx(0.0)
        assert signal.strength == 50
        assert signal.signal == NEUTRAL
        assert signal.reasoning == ()

    def test_flat_series_has_zero_risk_reward(self):
        signal = generate_signal(_flat_bars(30))
        assert signal.stop_loss == signal.take_profit == 100.0
        assert signal.risk_reward == 0.0

    def test_rising_series_goes_long(self):
        """A steady climb scores LONG with the bullish reasons."""
        signal = generate_signal(_bars_from_closes(_rising_closes()))
        assert signal.indicators.rsi > 70
        assert signal.indicators.ema9 > signal.indicators.ema21
        assert signal.strength >= 70
        assert "LONG" in signal.signal
        assert "EMA9 acima da EMA21" in signal.reasoning
        assert "Preço acima das médias" in signal.reasoning
        assert "Momentum forte de alta" in signal.reasoning

    def test_rising_series_long_risk_levels(self):
        signal = generate_signal(_bars_from_closes(_rising_closes()))
        atr = signal.structure.atr
        assert atr == pytest.approx(1.0 + 30.0 / 29)
        assert signal.stop_loss == pytest.approx(130.0 - 1.5 * atr)
        assert signal.take_profit == pytest.approx(130.0 + 2.5 * atr)
        assert signal.risk_reward == pytest.approx(2.5 / 1.5)

    def test_bar_without_range_keeps_stops_tight(self):
        """A last bar with empty high/low does not widen stop-loss or take-profit."""
        closes = _rising_closes()
        bars = _bars_from_closes(closes[:-1])
        bars.append(PriceBar(timestamp="bar-029", open=0.0, high=0.0, low=0.0, close=closes[-1]))
        signal = generate_signal(bars)
        assert signal.structure.atr < 3.0
        assert signal.stop_loss > closes[-1] - 4.5
        assert signal.take_profit < closes[-1] + 7.5

    def test_falling_series_goes_short(self):
        """The mirrored series scores SHORT with levels on the short side."""
        signal = generate_signal(_bars_from_closes(list(reversed(_rising_closes()))))
        assert signal.indicators.rsi < 30
        assert signal.strength == 25
        assert signal.signal == SHORT
        assert signal.stop_loss > signal.current_price > signal.take_profit

    def test_fresh_crossover_is_named(self):
        """A sharp reversal names the EMA crossover."""
        closes = [130.0 - i for i in range(30)] + [170.0]
        signal = generate_signal(_bars_from_closes(closes))
        assert "Cruzamento EMA bullish" in signal.reasoning

    def test_levels_are_clipped_to_range(self):
        signal = generate_signal(_bars_from_closes(_rising_closes()))
        out = signal.to_dict()
        assert out["levels"]["support"] >= round(signal.structure.low, 2)
        assert out["levels"]["resistance"] <= round(signal.structure.high, 2)
        assert set(out["fibonacci"]) == {"0%", "23.6%", "38.2%", "50.0%", "61.8%", "78.6%", "100%"}


# ── Properties ───────────────────────────────────────────────────────────


class TestProperties:
    """Bounds and determinism over seeded random walks."""

    @pytest.mark.parametrize("seed", range(15))
    def test_strength_bounds(self, seed):
        """Strength and oscillators stay inside their ranges."""
        signal = generate_signal(_random_bars(seed))
        assert 0 <= signal.strength <= 100
        assert 0 <= signal.indicators.rsi <= 100
        assert -100 <= signal.indicators.cmo <= 100
        bb = signal.indicators.bollinger
        assert bb.lower <= bb.middle <= bb.upper

    @pytest.mark.parametrize("seed", range(5))
    def test_deterministic(self, seed):
        """Same bars and clock give an identical signal."""
        bars = _random_bars(seed)
        first = generate_signal(bars, now=FIXED_NOW).to_dict()
        assert first == generate_signal(list(bars), now=FIXED_NOW).to_dict()

    @pytest.mark.parametrize("seed", range(5))
    def test_zigzag_pivots_alternate(self, seed):
        signal = generate_signal(_random_bars(seed))
        types = [p.type for p in signal.structure.zigzag.pivots]
        assert all(a != b for a, b in zip(types, types[1:]))


class TestClassifyStrength:
    """Strength to signal mapping at every boundary."""

    @pytest.mark.parametrize(
        "strength, expected",
        [
            (100, LONG),
            (70, LONG),
            (69, MODERATE_BUY),
            (60, MODERATE_BUY),
            (59, NEUTRAL),
            (41, NEUTRAL),
            (40, MODERATE_SELL),
            (31, MODERATE_SELL),
            (30, SHORT),
            (0, SHORT),
        ],
    )
    def test_thresholds(self, strength, expected):
        assert classify_strength(strength) == expected


class TestTimestamp:
    """Generation timestamp on every signal."""

    def test_injected_clock(self):
        """The signal carries the injected generation time."""
        signal = generate_signal(_flat_bars(30), now=FIXED_NOW)
        assert signal.generated_at == "2025-01-10T12:00:00+00:00"
        assert signal.to_dict()["timestamp"] == "2025-01-10T12:00:00+00:00"

    def test_degraded_signal_is_stamped(self):
        """A degraded signal is stamped as well."""
        signal = generate_signal(_flat_bars(5), now=FIXED_NOW)
        assert signal.generated_at == "2025-01-10T12:00:00+00:00"

    def test_default_clock_is_utc(self):
        """Without a clock the stamp is the current UTC time."""
        signal = generate_signal(_flat_bars(30))
        assert signal.generated_at.endswith("+00:00")
