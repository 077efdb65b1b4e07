"""Analysis data models — typed representations for signal engine outputs."""

from dataclasses import dataclass, field
from typing import Optional


def _r2(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 2)


@dataclass(frozen=True)
class PriceBar:
    """A single OHLC bar for analysis consumption."""

    timestamp: str
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None


@dataclass(frozen=True)
class BollingerBands:
    """Volatility envelope around the 20-period SMA."""

    upper: float
    middle: float
    lower: float
    bandwidth_pct: float

    def to_dict(self) -> dict:
        return {
            "upper": _r2(self.upper),
            "middle": _r2(self.middle),
            "lower": _r2(self.lower),
            "bandwidth": _r2(self.bandwidth_pct),
        }


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Indicator values computed from the most recent closes."""

    rsi: float
    cmo: float
    sma20: float
    sma50: float
    ema9: float
    ema21: float
    bollinger: BollingerBands

    def to_dict(self) -> dict:
        return {
            "rsi": _r2(self.rsi),
            "cmo": _r2(self.cmo),
            "sma20": _r2(self.sma20),
            "sma50": _r2(self.sma50),
            "ema9": _r2(self.ema9),
            "ema21": _r2(self.ema21),
        }


@dataclass(frozen=True)
class PivotLevels:
    """Classic floor-trader pivot with three supports and resistances."""

    pivot: float
    support1: float
    support2: float
    support3: float
    resistance1: float
    resistance2: float
    resistance3: float


@dataclass(frozen=True)
class ZigZagPivot:
    """A committed reversal point."""

    index: int
    price: float
    type: str  # "high" or "low"
    change_pct: float

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "price": _r2(self.price),
            "type": self.type,
            "changePct": _r2(self.change_pct),
        }


@dataclass(frozen=True)
class ZigZagResult:
    """Most recent reversal pivots and the coarse trend they imply."""

    pivots: tuple[ZigZagPivot, ...]
    trend: str  # "alta", "queda", "lateral" or "indefinido"

    def to_dict(self) -> dict:
        return {
            "pivots": [p.to_dict() for p in self.pivots],
            "trend": self.trend,
        }


@dataclass(frozen=True)
class StructuralLevels:
    """Pivot, Fibonacci, ZigZag and ATR derived from a bar window."""

    pivots: PivotLevels
    fibonacci: dict[str, float]
    zigzag: ZigZagResult
    atr: float
    high: float
    low: float


@dataclass(frozen=True)
class Signal:
    """Composite trading signal produced by the scorer.

    A degraded signal (``AGUARDAR``) carries the same fields with ``None``
    values and an ``error`` explaining why.
    """

    signal: str
    strength: int
    reasoning: tuple[str, ...] = ()
    current_price: Optional[float] = None
    indicators: Optional[IndicatorSnapshot] = None
    structure: Optional[StructuralLevels] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    risk_reward: Optional[float] = None
    error: Optional[str] = None
    generated_at: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return self.error is not None

    @property
    def support(self) -> Optional[float]:
        if self.structure is None:
            return None
        return max(self.structure.pivots.support1, self.structure.low)

    @property
    def resistance(self) -> Optional[float]:
        if self.structure is None:
            return None
        return min(self.structure.pivots.resistance1, self.structure.high)

    def to_dict(self) -> dict:
        ind = self.indicators
        st = self.structure
        return {
            "signal": self.signal,
            "strength": self.strength,
            "reasoning": list(self.reasoning),
            "currentPrice": _r2(self.current_price),
            "indicators": ind.to_dict() if ind else None,
            "bollinger": ind.bollinger.to_dict() if ind else None,
            "levels": {
                "support": _r2(self.support),
                "resistance": _r2(self.resistance),
                "pivot": _r2(st.pivots.pivot),
            } if st else None,
            "fibonacci": (
                {k: _r2(v) for k, v in st.fibonacci.items()} if st else None
            ),
            "zigzag": st.zigzag.to_dict() if st else None,
            "stopLoss": _r2(self.stop_loss),
            "takeProfit": _r2(self.take_profit),
            "riskReward": _r2(self.risk_reward),
            "error": self.error,
            "timestamp": self.generated_at,
        }


@dataclass(frozen=True)
class CertificateMetrics:
    change_percent_7d: Optional[float]
    volatility_percent_7d: Optional[float]
    zigzag_trend: Optional[str]


@dataclass(frozen=True)
class MovementCertificate:
    """User-facing badge summarising the weekly price movement."""

    status: str
    direction: str
    score: int
    label: str
    message: str
    metrics: CertificateMetrics
    generated_at: str

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "direction": self.direction,
            "score": self.score,
            "label": self.label,
            "message": self.message,
            "metrics": {
                "changePercent7d": self.metrics.change_percent_7d,
                "volatilityPercent7d": self.metrics.volatility_percent_7d,
                "zigzagTrend": self.metrics.zigzag_trend,
            },
            "generatedAt": self.generated_at,
        }


@dataclass(frozen=True)
class PeriodSummary:
    """Descriptive statistics for one fetched period."""

    current_price: float
    start_price: float
    change: float
    change_percent: float
    high: float
    low: float
    average: float
    volatility: float  # fraction, e.g. 0.012 = 1.2 %
    trend: str
    bars: tuple[PriceBar, ...] = field(default=(), repr=False)

    def to_dict(self) -> dict:
        return {
            "currentPrice": _r2(self.current_price),
            "startPrice": _r2(self.start_price),
            "change": _r2(self.change),
            "changePercent": _r2(self.change_percent),
            "high": _r2(self.high),
            "low": _r2(self.low),
            "average": _r2(self.average),
            "volatility": round(self.volatility, 6),
            "trend": self.trend,
            "dataPoints": len(self.bars),
        }
