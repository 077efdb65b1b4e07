"""Analysis API routers — /api/analysis/future and /api/analysis/certificate.

No business logic. Delegates to the result cache and the certificate scorer.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from cocoa.analysis.certificate import DEFAULT_WEIGHTS, calculate_movement_certificate

logger = logging.getLogger("cocoa")
router = APIRouter(prefix="/api/analysis")

# ── Shared state (set during app startup) ────────────────────────────────

_cache = None  # SingleFlightCache, set via configure_routers()
_weights = DEFAULT_WEIGHTS


def configure_routers(cache, weights=None) -> None:
    """Inject dependencies from the application startup.

    Args:
        cache: A ``SingleFlightCache`` wrapping the analysis builder
            (or duck-type for tests).
        weights: Optional ``CertificateWeights`` for the certificate route.
    """
    global _cache, _weights  # noqa: PLW0603
    _cache = cache
    _weights = weights or DEFAULT_WEIGHTS


@router.get("/future")
async def get_future_analysis():
    """Full cocoa futures analysis, served through the result cache."""
    if _cache is None:
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "Análise futura não configurada"},
        )
    try:
        return await _cache.get()
    except Exception as exc:
        logger.error("Future analysis failed: %s", exc)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Erro ao gerar análise futura",
                "message": str(exc),
            },
        )


@router.get("/certificate")
async def get_movement_certificate(
    change_percent_7d: Optional[str] = Query(None, alias="changePercent7d"),
    volatility_7d: Optional[str] = Query(None, alias="volatility7d"),
    zigzag_trend: Optional[str] = Query(None, alias="zigzagTrend"),
):
    """Movement certificate for caller-supplied weekly metrics."""
    certificate = calculate_movement_certificate(
        change_percent_7d=change_percent_7d,
        volatility_7d=volatility_7d,
        zigzag_trend=zigzag_trend,
        weights=_weights,
    )
    return certificate.to_dict()
