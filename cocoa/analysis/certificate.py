"""Movement certificate — weekly change and volatility compressed into a badge.

The weighting is a provisional linear index (80 % weekly change, 20 %
volatility). The weights live in ``CertificateWeights`` and are loaded
from configuration rather than hard-coded at the call sites.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from cocoa.analysis.models import CertificateMetrics, MovementCertificate

NO_MOVEMENT = "SEM_MOVIMENTO"
LOW_MOVEMENT = "MOVIMENTO_BAIXO"
MODERATE_MOVEMENT = "MOVIMENTO_MODERADO"
STRONG_MOVEMENT = "MOVIMENTO_FORTE"

_LABELS = {
    NO_MOVEMENT: "Certificado: Sem movimento",
    LOW_MOVEMENT: "Certificado: Movimento baixo",
    MODERATE_MOVEMENT: "Certificado: Movimento moderado",
    STRONG_MOVEMENT: "Certificado: Movimento forte",
}

_MESSAGES = {
    NO_MOVEMENT: "Sem variação relevante detectada na semana.",
    LOW_MOVEMENT: "Movimento semanal baixo, mercado com pouca aceleração no curto prazo.",
    MODERATE_MOVEMENT: "Movimento semanal moderado, cenário com oportunidade e risco equilibrados.",
    STRONG_MOVEMENT: "Movimento semanal forte, atenção à volatilidade e gestão de risco.",
}

Numeric = Union[int, float, str, None]


@dataclass(frozen=True)
class CertificateWeights:
    """Score weights and status thresholds."""

    change_weight: float = 8.0
    volatility_weight: float = 2.0
    negligible_pct: float = 0.25
    strong_score: int = 70
    moderate_score: int = 35


DEFAULT_WEIGHTS = CertificateWeights()


def to_number(value: Numeric) -> Optional[float]:
    """Normalise numbers and ``"12,3%"``-style strings; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        normalized = value.replace("%", "").replace(",", ".").strip()
        try:
            parsed = float(normalized)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _direction(change: Optional[float]) -> str:
    if change is None or change == 0:
        return "LATERAL"
    return "ALTA" if change > 0 else "QUEDA"


def calculate_movement_certificate(
    change_percent_7d: Numeric = None,
    volatility_7d: Numeric = None,
    zigzag_trend: Optional[str] = None,
    weights: CertificateWeights = DEFAULT_WEIGHTS,
    now: Optional[datetime] = None,
) -> MovementCertificate:
    """Build the weekly movement certificate.

    Args:
        change_percent_7d: Weekly change in percent (``3.2`` means +3.2 %).
        volatility_7d: Weekly volatility as a fraction (``0.012`` = 1.2 %).
        zigzag_trend: Optional ZigZag trend label, stored upper-cased.
        weights: Score weights and thresholds.
        now: Timestamp for ``generated_at`` (defaults to current UTC time).
    """
    change = to_number(change_percent_7d)
    volatility = to_number(volatility_7d)
    volatility_pct = None if volatility is None else volatility * 100

    trend = zigzag_trend.strip().upper() if isinstance(zigzag_trend, str) else None
    trend = trend or None

    abs_change = 0.0 if change is None else abs(change)
    vol_pct = 0.0 if volatility_pct is None else max(0.0, volatility_pct)

    raw = abs_change * weights.change_weight + vol_pct * weights.volatility_weight
    score = max(0, min(100, _round_half_up(raw)))

    has_signal = change is not None or volatility_pct is not None or trend is not None
    negligible = abs_change < weights.negligible_pct and vol_pct < weights.negligible_pct

    if not has_signal or negligible:
        status = NO_MOVEMENT
    elif score >= weights.strong_score:
        status = STRONG_MOVEMENT
    elif score >= weights.moderate_score:
        status = MODERATE_MOVEMENT
    else:
        status = LOW_MOVEMENT

    generated = (now or datetime.now(timezone.utc)).isoformat()

    return MovementCertificate(
        status=status,
        direction=_direction(change),
        score=score,
        label=_LABELS[status],
        message=_MESSAGES[status],
        metrics=CertificateMetrics(
            change_percent_7d=change,
            volatility_percent_7d=volatility_pct,
            zigzag_trend=trend,
        ),
        generated_at=generated,
    )
