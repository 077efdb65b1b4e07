"""Yahoo Finance chart API async client.

Fetches historical OHLC bars for the cocoa futures contract and builds
the multi-period summaries consumed by the analysis engine.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional

import httpx

from cocoa.analysis.models import PriceBar
from cocoa.analysis.summary import summarize_period
from cocoa.config import Config
from cocoa.market.models import MarketDataError, MultiPeriodData

logger = logging.getLogger("cocoa.market")

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}

_DAY_SECONDS = 24 * 60 * 60
_PERIOD_SECONDS = {
    "1d": _DAY_SECONDS,
    "5d": 5 * _DAY_SECONDS,
    "1mo": 30 * _DAY_SECONDS,
    "3mo": 90 * _DAY_SECONDS,
    "6mo": 180 * _DAY_SECONDS,
    "1y": 365 * _DAY_SECONDS,
}

# (period name, range, interval, keep last N bars)
_MULTI_PERIODS = [
    ("24h", "1d", "15m", 24),
    ("7d", "5d", "1h", None),
    ("30d", "1mo", "1d", None),
]

_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}


def parse_chart(payload: dict) -> list[PriceBar]:
    """Convert a ``/v8/finance/chart`` payload into bars (oldest-first).

    Bars with a missing or non-positive close are dropped; missing
    open / high / low values become 0.0.

    Raises ``MarketDataError`` if the payload carries no chart result.
    """
    results = (payload.get("chart") or {}).get("result") or []
    if not results:
        error = (payload.get("chart") or {}).get("error")
        raise MarketDataError(f"No chart data available: {error}")

    result = results[0]
    timestamps = result.get("timestamp") or []
    quotes = ((result.get("indicators") or {}).get("quote") or [{}])[0]

    def _at(key: str, i: int) -> float:
        series = quotes.get(key) or []
        value = series[i] if i < len(series) else None
        return float(value) if value else 0.0

    bars: list[PriceBar] = []
    for i, ts in enumerate(timestamps):
        close = _at("close", i)
        if close <= 0:
            continue
        volume_series = quotes.get("volume") or []
        volume = volume_series[i] if i < len(volume_series) else None
        bars.append(
            PriceBar(
                timestamp=datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(),
                open=_at("open", i),
                high=_at("high", i),
                low=_at("low", i),
                close=close,
                volume=float(volume) if volume is not None else None,
            )
        )
    return bars


class YahooFinanceClient:
    """Async client for the Yahoo Finance chart endpoint."""

    def __init__(self, config: Config, clock=time.time) -> None:
        self._config = config
        self._base_url = config.yahoo_base_url
        self._symbol = config.symbol
        self._timeout = config.http_timeout_seconds
        self._clock = clock

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _request_with_retry(self, url: str, **kwargs) -> httpx.Response:
        """GET *url* with exponential-backoff retry.

        Retries on transient server errors (502, 503, 504), rate-limits
        (429) and transport errors. Other errors are raised immediately.
        """
        last_exc: Optional[Exception] = None

        for attempt in range(_MAX_RETRIES):
            try:
                async with httpx.AsyncClient() as client:
                    resp = await client.get(
                        url,
                        headers=_HEADERS,
                        timeout=self._timeout,
                        **kwargs,
                    )

                if resp.status_code in _RETRYABLE_STATUS_CODES:
                    delay = _RETRY_BASE_DELAY * (2 ** attempt)
                    logger.warning(
                        "Yahoo GET %s returned %d, retry %d/%d in %.1fs",
                        url, resp.status_code, attempt + 1, _MAX_RETRIES, delay,
                    )
                    last_exc = httpx.HTTPStatusError(
                        f"Server error '{resp.status_code}'",
                        request=resp.request,
                        response=resp,
                    )
                    await asyncio.sleep(delay)
                    continue

                resp.raise_for_status()
                return resp

            except httpx.TransportError as exc:
                delay = _RETRY_BASE_DELAY * (2 ** attempt)
                logger.warning(
                    "Yahoo GET %s transport error (%s), retry %d/%d in %.1fs",
                    url, exc, attempt + 1, _MAX_RETRIES, delay,
                )
                last_exc = exc
                await asyncio.sleep(delay)

        raise last_exc  # type: ignore[misc]

    # ── Historical bars ──────────────────────────────────────────────────

    async def fetch_history(self, period: str = "1mo", interval: str = "1d") -> list[PriceBar]:
        """Fetch historical bars for the configured symbol.

        Args:
            period: One of ``1d``, ``5d``, ``1mo``, ``3mo``, ``6mo``, ``1y``.
            interval: Bar interval, e.g. ``15m``, ``1h``, ``1d``.

        Returns:
            List of ``PriceBar`` ordered oldest-first.
        """
        if period not in _PERIOD_SECONDS:
            raise ValueError(f"Unsupported period '{period}'")

        now = int(self._clock())
        params = {
            "period1": now - _PERIOD_SECONDS[period],
            "period2": now,
            "interval": interval,
            "includePrePost": "false",
        }
        url = f"{self._base_url}/v8/finance/chart/{self._symbol}"

        logger.info("Fetching %s history (%s, %s)", self._symbol, period, interval)
        resp = await self._request_with_retry(url, params=params)
        bars = parse_chart(resp.json())
        logger.info("Fetched %d bars for %s (%s)", len(bars), self._symbol, period)
        return bars

    async def fetch_multi_period(self) -> MultiPeriodData:
        """Fetch the 24h, 7d and 30d windows concurrently and summarise them."""
        fetched = await asyncio.gather(
            *(self.fetch_history(rng, interval) for _, rng, interval, _ in _MULTI_PERIODS)
        )

        periods = {}
        for (name, _, _, keep), bars in zip(_MULTI_PERIODS, fetched):
            if keep is not None:
                bars = bars[-keep:]
            if bars:
                periods[name] = summarize_period(bars)
            else:
                logger.warning("No bars returned for %s window", name)

        return MultiPeriodData(symbol=self._symbol, periods=periods)
