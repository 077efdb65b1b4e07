"""Composite signal scoring — pure functions, no I/O.

Starts every evaluation at a neutral strength of 50 and applies one
additive adjustment per technical observation:

    * RSI extremes                     ±15 (oversold is bullish)
    * EMA9 / EMA21 alignment           ±20
    * Price vs formed SMA20 / SMA50    ±10
    * Price at a Bollinger band        ±15 (lower band is bullish)
    * CMO momentum beyond ±50          ±10

The clamped strength maps to a discrete signal and the ATR sizes the
stop-loss / take-profit. Calls share no state: identical bars always
produce an identical ``Signal``.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from cocoa.analysis.indicators import calculate_ema_series, compute_indicator_snapshot
from cocoa.analysis.models import PriceBar, Signal
from cocoa.analysis.structure import compute_structural_levels
from cocoa.risk.sl_tp import calculate_atr_risk

logger = logging.getLogger("cocoa.scorer")

MIN_BARS = 20
NEUTRAL_STRENGTH = 50

LONG = "LONG"
MODERATE_BUY = "COMPRA_MODERADA"
NEUTRAL = "NEUTRO"
MODERATE_SELL = "VENDA_MODERADA"
SHORT = "SHORT"
WAIT = "AGUARDAR"

_BULLISH_SIGNALS = (LONG, MODERATE_BUY)


def classify_strength(strength: int) -> str:
    """Map a clamped strength (0–100) to a discrete signal."""
    if strength >= 70:
        return LONG
    if strength >= 60:
        return MODERATE_BUY
    if strength <= 30:
        return SHORT
    if strength <= 40:
        return MODERATE_SELL
    return NEUTRAL


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def _ema_rule(closes: list[float]) -> Optional[tuple[int, str]]:
    """Score the EMA9 / EMA21 ordering, naming fresh crossovers."""
    fast = calculate_ema_series(closes, 9)
    slow = calculate_ema_series(closes, 21)
    now = fast[-1] - slow[-1]
    before = fast[-2] - slow[-2]

    if now > 0:
        if before <= 0:
            return 20, "Cruzamento EMA bullish"
        return 20, "EMA9 acima da EMA21"
    if now < 0:
        if before >= 0:
            return -20, "Cruzamento EMA bearish"
        return -20, "EMA9 abaixo da EMA21"
    return None


def filter_valid_bars(bars: list[PriceBar]) -> list[PriceBar]:
    """Drop bars whose close is missing or non-positive."""
    return [b for b in bars if b.close is not None and b.close > 0]


def generate_signal(
    bars: list[PriceBar],
    zigzag_threshold_pct: float = 3.0,
    structure_lookback: int = 30,
    now: Optional[datetime] = None,
) -> Signal:
    """Score *bars* (ordered oldest-first) into a composite ``Signal``.

    Fewer than 20 valid bars yield a degraded ``AGUARDAR`` signal with
    zero strength instead of raising. Every signal is stamped with *now*
    (defaults to the current UTC time); nothing else depends on the clock.
    """
    generated = (now or datetime.now(timezone.utc)).isoformat()
    valid = filter_valid_bars(bars)
    closes = [b.close for b in valid]

    if len(closes) < MIN_BARS:
        logger.info(
            "Insufficient data for signal: %d valid bars (need %d)",
            len(closes), MIN_BARS,
        )
        return Signal(
            signal=WAIT,
            strength=0,
            reasoning=("Dados insuficientes para análise",),
            error="insufficient data",
            generated_at=generated,
        )

    price = closes[-1]
    ind = compute_indicator_snapshot(closes)
    structure = compute_structural_levels(
        valid,
        lookback=structure_lookback,
        zigzag_threshold_pct=zigzag_threshold_pct,
    )

    strength = NEUTRAL_STRENGTH
    reasoning: list[str] = []

    # RSI
    if ind.rsi < 30:
        reasoning.append("RSI em sobrevenda")
        strength += 15
    elif ind.rsi > 70:
        reasoning.append("RSI em sobrecompra")
        strength -= 15

    # EMA alignment / crossover
    ema = _ema_rule(closes)
    if ema is not None:
        strength += ema[0]
        reasoning.append(ema[1])

    # Price vs moving averages (SMA50 only once its window is full)
    averages = [ind.sma20]
    if len(closes) >= 50:
        averages.append(ind.sma50)
    if all(price > avg for avg in averages):
        reasoning.append("Preço acima das médias")
        strength += 10
    elif all(price < avg for avg in averages):
        reasoning.append("Preço abaixo das médias")
        strength -= 10

    # Bollinger Bands (a zero-width band carries no information)
    bb = ind.bollinger
    if bb.upper > bb.lower:
        if price <= bb.lower:
            reasoning.append("Preço na banda inferior")
            strength += 15
        elif price >= bb.upper:
            reasoning.append("Preço na banda superior")
            strength -= 15

    # CMO
    if ind.cmo > 50:
        reasoning.append("Momentum forte de alta")
        strength += 10
    elif ind.cmo < -50:
        reasoning.append("Momentum forte de baixa")
        strength -= 10

    strength = _clamp(strength)
    signal = classify_strength(strength)

    side = "long" if signal in _BULLISH_SIGNALS else "short"
    risk = calculate_atr_risk(price, side, structure.atr)

    logger.info("Signal: %s (strength %d)", signal, strength)

    return Signal(
        signal=signal,
        strength=strength,
        reasoning=tuple(reasoning),
        current_price=price,
        indicators=ind,
        structure=structure,
        stop_loss=risk.sl,
        take_profit=risk.tp,
        risk_reward=risk.risk_reward,
        generated_at=generated,
    )
