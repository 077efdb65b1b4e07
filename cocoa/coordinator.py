"""Single-flight TTL cache for the full market analysis.

Wraps an expensive async computation so that:

* a fresh cached value is returned without recomputing;
* at most one computation is in flight; callers arriving while it runs
  await the same task and observe the same outcome;
* a failed refresh falls back to the previous (stale) value when one
  exists, and re-raises the failure otherwise.

All state is owned by a single asyncio event loop. The freshness check
and the creation of the in-flight task happen with no ``await`` between
them, so concurrent callers cannot both start a computation.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger("cocoa.coordinator")

DEFAULT_TTL_MS = 60_000


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000


@dataclass(frozen=True)
class CacheEntry:
    """A computed value and the time it was stored."""

    value: Any
    created_at_ms: float
    ttl_ms: int

    def is_fresh(self, now_ms: float) -> bool:
        age = now_ms - self.created_at_ms
        return 0 <= age < self.ttl_ms


class SingleFlightCache:
    """TTL cache coalescing concurrent refreshes into one computation.

    Args:
        compute: Zero-argument coroutine function producing the value.
        ttl_ms: Time-to-live of a stored value in milliseconds.
        clock: Returns the current time in milliseconds. Injectable so
            tests can move time without sleeping.
    """

    def __init__(
        self,
        compute: Callable[[], Awaitable[Any]],
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        if ttl_ms <= 0:
            raise ValueError(f"ttl_ms must be positive, got {ttl_ms}")
        self._compute = compute
        self._ttl_ms = ttl_ms
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    @property
    def entry(self) -> Optional[CacheEntry]:
        """The stored entry, fresh or stale."""
        return self._entry

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    def invalidate(self) -> None:
        """Drop the stored value. A running computation is not affected."""
        self._entry = None

    async def get(self) -> Any:
        """Return a fresh value, computing it at most once per expiry."""
        entry = self._entry
        if entry is not None and entry.is_fresh(self._clock()):
            return entry.value

        task = self._in_flight
        if task is None:
            task = asyncio.ensure_future(self._refresh())
            self._in_flight = task
        else:
            logger.debug("Joining in-flight computation")

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            raise
        except Exception:
            stale = self._entry
            if stale is not None:
                logger.warning("Refresh failed; serving stale value")
                return stale.value
            raise

    async def _refresh(self) -> Any:
        started = self._clock()
        try:
            value = await self._compute()
        except Exception as exc:
            logger.error("Computation failed: %s", exc)
            raise
        finally:
            self._in_flight = None

        self._entry = CacheEntry(value=value, created_at_ms=self._clock(), ttl_ms=self._ttl_ms)
        logger.info("Cache refreshed in %.0f ms", self._clock() - started)
        return value
