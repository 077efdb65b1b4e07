"""Stop-loss and take-profit calculation — pure math, no I/O.

Both levels are placed at fixed ATR multiples from the current price:

    - **Long**:  SL = price − 1.5 × ATR,  TP = price + 2.5 × ATR
    - **Short**: SL = price + 1.5 × ATR,  TP = price − 2.5 × ATR
"""

from dataclasses import dataclass

DEFAULT_SL_ATR_MULT = 1.5
DEFAULT_TP_ATR_MULT = 2.5


@dataclass(frozen=True)
class RiskLevels:
    """Computed stop-loss and take-profit for a signal."""
    sl: float
    tp: float
    risk_reward: float


def calculate_risk_reward(entry_price: float, sl: float, tp: float) -> float:
    """Return ``|tp − entry| / |entry − sl|``, or 0.0 when there is no risk."""
    risk = abs(entry_price - sl)
    if risk == 0:
        return 0.0
    return abs(tp - entry_price) / risk


def calculate_atr_risk(
    entry_price: float,
    direction: str,
    atr: float,
    sl_atr_mult: float = DEFAULT_SL_ATR_MULT,
    tp_atr_mult: float = DEFAULT_TP_ATR_MULT,
) -> RiskLevels:
    """Calculate SL and TP at ATR multiples from *entry_price*.

    Args:
        entry_price: Current price the levels are anchored to.
        direction: ``"long"`` or ``"short"``.
        atr: Current ATR value.
        sl_atr_mult: Stop distance as a multiple of ATR (default 1.5).
        tp_atr_mult: Target distance as a multiple of ATR (default 2.5).

    Returns:
        ``RiskLevels`` with sl, tp and the resulting risk-reward ratio.

    Raises:
        ValueError: If *direction* is not ``"long"`` or ``"short"``.
    """
    sl_dist = sl_atr_mult * atr
    tp_dist = tp_atr_mult * atr

    if direction == "long":
        sl = entry_price - sl_dist
        tp = entry_price + tp_dist
    elif direction == "short":
        sl = entry_price + sl_dist
        tp = entry_price - tp_dist
    else:
        raise ValueError(f"direction must be 'long' or 'short', got '{direction}'")

    return RiskLevels(sl=sl, tp=tp, risk_reward=calculate_risk_reward(entry_price, sl, tp))
