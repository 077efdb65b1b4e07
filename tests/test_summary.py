"""Tests for period summaries feeding the movement certificate."""

import math

import pytest

from cocoa.analysis.models import PriceBar
from cocoa.analysis.summary import calculate_volatility, classify_trend, summarize_period


def _bars(closes: list[float]) -> list[PriceBar]:
    return [
        PriceBar(timestamp=f"bar-{i}", open=c, high=c + 1, low=c - 1, close=c)
        for i, c in enumerate(closes)
    ]


@pytest.mark.parametrize(
    "change, expected",
    [
        (2.5, "alta_forte"),
        (2.0, "alta"),
        (0.6, "alta"),
        (0.5, "lateral"),
        (0.0, "lateral"),
        (-0.5, "lateral"),
        (-1.0, "queda"),
        (-2.0, "queda"),
        (-2.1, "queda_forte"),
    ],
)
def test_classify_trend(change, expected):
    """Change thresholds map to trend labels."""
    assert classify_trend(change) == expected


class TestVolatility:
    """Unit tests for calculate_volatility()."""

    def test_single_price(self):
        assert calculate_volatility([100.0]) == 0.0

    def test_flat(self):
        assert calculate_volatility([100.0, 100.0, 100.0]) == 0.0

    def test_known_value(self):
        """Population sigma over the mean."""
        expected = math.sqrt(8.0 / 3.0) / 102.0
        assert calculate_volatility([100.0, 102.0, 104.0]) == pytest.approx(expected)


class TestSummarizePeriod:
    """Unit tests for summarize_period()."""

    def test_statistics(self):
        """Change, range and average of a three-bar period."""
        summary = summarize_period(_bars([100.0, 102.0, 104.0]))
        assert summary.current_price == 104.0
        assert summary.start_price == 100.0
        assert summary.change == pytest.approx(4.0)
        assert summary.change_percent == pytest.approx(4.0)
        assert summary.high == 104.0
        assert summary.low == 100.0
        assert summary.average == pytest.approx(102.0)
        assert summary.trend == "alta_forte"
        assert len(summary.bars) == 3

    def test_zero_closes_are_dropped(self):
        """Zero closes do not anchor the start price."""
        summary = summarize_period(_bars([0.0, 100.0, 99.0]))
        assert summary.start_price == 100.0
        assert summary.change_percent == pytest.approx(-1.0)
        assert summary.trend == "queda"

    def test_no_valid_bars(self):
        """A period with no usable bars raises."""
        with pytest.raises(ValueError):
            summarize_period(_bars([0.0, 0.0]))

    def test_to_dict(self):
        out = summarize_period(_bars([100.0, 101.0])).to_dict()
        assert out["changePercent"] == 1.0
        assert out["dataPoints"] == 2
        assert "bars" not in out
