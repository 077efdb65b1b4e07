"""Cocoa Signal — application configuration.

Loads .env variables into a typed config object.
Validates numeric settings on startup.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from cocoa.analysis.certificate import CertificateWeights

logger = logging.getLogger("cocoa")

_DEFAULT_CACHE_TTL_MS = 60_000


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    symbol: str
    yahoo_base_url: str
    cache_ttl_ms: int
    zigzag_threshold_pct: float
    certificate_change_weight: float
    certificate_volatility_weight: float
    http_timeout_seconds: float
    log_level: str
    port: int

    @property
    def certificate_weights(self) -> CertificateWeights:
        """Certificate weights with the default status thresholds."""
        return CertificateWeights(
            change_weight=self.certificate_change_weight,
            volatility_weight=self.certificate_volatility_weight,
        )


def _read_float(name: str, default: str) -> float:
    raw = os.environ.get(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(
            f"Environment variable {name} must be a number, got {raw!r}"
        ) from None


def _read_ttl_ms(name: str) -> int:
    """Positive integer TTL; unparsable or non-positive values use the default."""
    raw = os.environ.get(name)
    if raw is None:
        return _DEFAULT_CACHE_TTL_MS
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        logger.warning(
            "Ignoring invalid %s=%r, using %d", name, raw, _DEFAULT_CACHE_TTL_MS
        )
        return _DEFAULT_CACHE_TTL_MS
    return value


def load_config(env_path: Optional[str] = None) -> Config:
    """Load configuration from environment variables.

    Every variable is optional. Raises ``ValueError`` naming the variable
    when a numeric setting cannot be parsed.
    """
    load_dotenv(dotenv_path=env_path)

    return Config(
        symbol=os.environ.get("COCOA_SYMBOL", "CC=F"),
        yahoo_base_url=os.environ.get(
            "YAHOO_BASE_URL", "https://query1.finance.yahoo.com"
        ).rstrip("/"),
        cache_ttl_ms=_read_ttl_ms("FUTURE_ANALYSIS_CACHE_TTL_MS"),
        zigzag_threshold_pct=_read_float("ZIGZAG_THRESHOLD_PCT", "3.0"),
        certificate_change_weight=_read_float("CERTIFICATE_CHANGE_WEIGHT", "8.0"),
        certificate_volatility_weight=_read_float("CERTIFICATE_VOLATILITY_WEIGHT", "2.0"),
        http_timeout_seconds=_read_float("HTTP_TIMEOUT_SECONDS", "15.0"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        port=int(_read_float("PORT", "4000")),
    )
