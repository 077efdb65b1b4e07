"""Commentary provider protocol and deterministic fallback.

Qualitative commentary (LLM-generated forecasts) is produced by an external
provider. When none is configured, or it fails, the engine falls back to a
summary derived purely from the computed signal.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from cocoa.analysis.models import MovementCertificate, Signal


@runtime_checkable
class CommentaryProvider(Protocol):
    """Interface for qualitative market commentary."""

    async def generate(self, context: dict) -> dict:
        """Return a commentary dict for the aggregated market *context*."""
        ...


def _trend_now(signal: Optional[Signal]) -> str:
    if signal is None:
        return "LATERAL"
    if "LONG" in signal.signal or "COMPRA" in signal.signal:
        return "ALTA"
    if "SHORT" in signal.signal or "VENDA" in signal.signal:
        return "BAIXA"
    return "LATERAL"


def _strength_label(strength: int) -> str:
    if strength > 70:
        return "FORTE"
    if strength > 50:
        return "MODERADO"
    return "FRACO"


def fallback_commentary(
    signal: Optional[Signal],
    certificate: Optional[MovementCertificate] = None,
) -> dict:
    """Build commentary from the signal alone."""
    name = signal.signal if signal else "NEUTRO"
    strength = signal.strength if signal else 0
    reasons = ". ".join(signal.reasoning) if signal else ""
    summary = f"Sinal {name} com força de {strength}%."
    if reasons:
        summary = f"{summary} {reasons}"
    if certificate is not None:
        summary = f"{summary} {certificate.label}."

    sig = signal.to_dict() if signal else {}
    return {
        "trendNow": _trend_now(signal),
        "signal": name,
        "strength": _strength_label(strength),
        "sl": sig.get("stopLoss") if sig.get("stopLoss") is not None else "N/A",
        "tp": sig.get("takeProfit") if sig.get("takeProfit") is not None else "N/A",
        "levels": sig.get("levels") or {},
        "summary": summary,
        "fallback": True,
    }
