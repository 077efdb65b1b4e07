"""Tests for ATR-based stop-loss / take-profit levels."""

import pytest

from cocoa.risk.sl_tp import RiskLevels, calculate_atr_risk, calculate_risk_reward


class TestATRRisk:
    """Unit tests for calculate_atr_risk()."""

    def test_long_levels(self):
        """Long stops below and targets above the entry."""
        levels = calculate_atr_risk(100.0, "long", atr=2.0)
        assert isinstance(levels, RiskLevels)
        assert levels.sl == pytest.approx(97.0)
        assert levels.tp == pytest.approx(105.0)
        assert levels.risk_reward == pytest.approx(5.0 / 3.0)

    def test_short_levels(self):
        """Short stops above and targets below the entry."""
        levels = calculate_atr_risk(100.0, "short", atr=2.0)
        assert levels.sl == pytest.approx(103.0)
        assert levels.tp == pytest.approx(95.0)
        assert levels.risk_reward == pytest.approx(5.0 / 3.0)

    def test_custom_multipliers(self):
        levels = calculate_atr_risk(50.0, "long", atr=1.0, sl_atr_mult=1.0, tp_atr_mult=3.0)
        assert levels.sl == pytest.approx(49.0)
        assert levels.tp == pytest.approx(53.0)
        assert levels.risk_reward == pytest.approx(3.0)

    def test_zero_atr_has_zero_risk_reward(self):
        """No volatility means no risk/reward."""
        levels = calculate_atr_risk(100.0, "long", atr=0.0)
        assert levels.sl == levels.tp == 100.0
        assert levels.risk_reward == 0.0

    def test_invalid_direction(self):
        """Unknown direction raises ValueError."""
        with pytest.raises(ValueError, match="direction"):
            calculate_atr_risk(100.0, "buy", atr=1.0)


def test_risk_reward_ratio():
    assert calculate_risk_reward(100.0, sl=98.0, tp=106.0) == pytest.approx(3.0)
    assert calculate_risk_reward(100.0, sl=100.0, tp=106.0) == 0.0
