"""Cocoa Signal — full market analysis builder.

Connects the market data collaborator, the signal scorer, the movement
certificate and the commentary provider into one response. The
``SingleFlightCache`` wraps :meth:`FutureAnalysisEngine.build`.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from cocoa.analysis.certificate import calculate_movement_certificate
from cocoa.analysis.commentary import CommentaryProvider, fallback_commentary
from cocoa.analysis.models import MovementCertificate, Signal
from cocoa.analysis.scorer import WAIT, generate_signal
from cocoa.config import Config
from cocoa.market.models import MultiPeriodData

logger = logging.getLogger("cocoa.engine")

SIGNAL_PERIOD = "30d"
CERTIFICATE_PERIOD = "7d"


class MarketDataProvider(Protocol):
    """Anything that can fetch the multi-period bar summaries."""

    async def fetch_multi_period(self) -> MultiPeriodData:
        ...


def _signal_block(signal: Optional[Signal]) -> dict:
    if signal is None:
        return {
            "type": WAIT,
            "strength": 0,
            "reasoning": [],
            "stopLoss": None,
            "takeProfit": None,
            "riskReward": None,
        }
    sig = signal.to_dict()
    return {
        "type": sig["signal"],
        "strength": sig["strength"],
        "reasoning": sig["reasoning"],
        "stopLoss": sig["stopLoss"],
        "takeProfit": sig["takeProfit"],
        "riskReward": sig["riskReward"],
    }


class FutureAnalysisEngine:
    """Builds the aggregated cocoa futures analysis.

    Args:
        config: Application configuration.
        market: A ``YahooFinanceClient`` (or compatible duck-type / mock).
        commentary: Optional qualitative commentary provider.
    """

    def __init__(
        self,
        config: Config,
        market: MarketDataProvider,
        commentary: Optional[CommentaryProvider] = None,
    ) -> None:
        self._config = config
        self._market = market
        self._commentary = commentary

    def score(self, data: MultiPeriodData) -> Optional[Signal]:
        """Score the daily window, or ``None`` when it was not fetched."""
        bars = data.bars(SIGNAL_PERIOD)
        if not bars:
            return None
        return generate_signal(
            bars, zigzag_threshold_pct=self._config.zigzag_threshold_pct
        )

    def certify(
        self, data: MultiPeriodData, signal: Optional[Signal]
    ) -> MovementCertificate:
        """Movement certificate from the weekly summary and ZigZag trend."""
        weekly = data.periods.get(CERTIFICATE_PERIOD)
        zigzag_trend = None
        if signal is not None and signal.structure is not None:
            zigzag_trend = signal.structure.zigzag.trend
        return calculate_movement_certificate(
            change_percent_7d=weekly.change_percent if weekly else None,
            volatility_7d=weekly.volatility if weekly else None,
            zigzag_trend=zigzag_trend,
            weights=self._config.certificate_weights,
        )

    async def _commentate(
        self, context: dict, signal: Optional[Signal], certificate: MovementCertificate
    ) -> tuple[dict, bool]:
        if self._commentary is None:
            return fallback_commentary(signal, certificate), False
        try:
            return await self._commentary.generate(context), True
        except Exception as exc:
            logger.warning("Commentary provider failed: %s (using fallback)", exc)
            return fallback_commentary(signal, certificate), False

    async def build(self) -> dict:
        """Fetch market data and assemble the full analysis response.

        Upstream fetch failures propagate to the caller.
        """
        logger.info("Starting full future analysis")
        data = await self._market.fetch_multi_period()

        signal = self.score(data)
        certificate = self.certify(data, signal)
        sig = signal.to_dict() if signal else {}
        history = {name: summary.to_dict() for name, summary in data.periods.items()}

        context = {"history": history, "signal": sig, "certificate": certificate.to_dict()}
        ai, ai_ok = await self._commentate(context, signal, certificate)

        daily = data.periods.get("24h")
        response = {
            "success": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": {
                "symbol": data.symbol,
                "currentPrice": data.current_price,
                "priceChange": round(daily.change_percent, 2) if daily else None,
                "signal": _signal_block(signal),
                "technical": {
                    **(sig.get("indicators") or {}),
                    "bollinger": sig.get("bollinger"),
                },
                "levels": {
                    **(sig.get("levels") or {}),
                    "fibonacci": sig.get("fibonacci"),
                },
                "zigzag": sig.get("zigzag"),
                "movementCertificate": certificate.to_dict(),
                "history": {
                    name: history.get(name) for name in ("24h", "7d", "30d")
                },
                "ai": ai,
                "sources": {
                    "yahoo": bool(data.periods),
                    "pricePro": signal is not None and not signal.is_degraded,
                    "ai": ai_ok,
                },
            },
        }

        logger.info(
            "Future analysis complete: %s / %s",
            response["data"]["signal"]["type"],
            certificate.status,
        )
        return response
