"""Sliding window rate limiting for mutation endpoints.

Request timestamps are kept in memory per ``(limit type, client)`` key, so
limits reset when the process restarts and are not shared between instances.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Literal, Mapping, Optional

from fastapi import Request
from limits import parse

from .config import RATE_LIMIT_SWEEP_SECONDS, RATE_LIMITS_DISABLED, rate_limit_override
from .exceptions import RateLimitError

logger = logging.getLogger(__name__)

RateLimitType = Literal["match", "invite", "event", "player", "venue", "attendance", "default"]

DEFAULT_LIMIT_TYPE = "default"
ANONYMOUS_IDENTIFIER = "anonymous"

_DEFAULT_LIMITS: dict[str, str] = {
    "match": "10/minute",
    "invite": "5/minute",
    "event": "20/minute",
    "player": "30/minute",
    "venue": "20/minute",
    "attendance": "30/minute",
    DEFAULT_LIMIT_TYPE: "30/minute",
}


@dataclass(frozen=True)
class RateLimitConfig:
    max_requests: int
    window_ms: int

    @classmethod
    def from_string(cls, value: str) -> "RateLimitConfig":
        """Build a config from a limit string such as ``"10/minute"``."""

        item = parse(value)
        return cls(max_requests=item.amount, window_ms=item.get_expiry() * 1000)


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    limit: int
    remaining: int
    # Epoch seconds at which the oldest request in the window expires.
    reset: int
    retry_after: Optional[int] = None


def load_rate_limits() -> dict[str, RateLimitConfig]:
    """Return the limit table, honouring ``RATE_LIMIT_<TYPE>`` overrides."""

    table: dict[str, RateLimitConfig] = {}
    for name, default in _DEFAULT_LIMITS.items():
        raw = rate_limit_override(name)
        try:
            table[name] = RateLimitConfig.from_string(raw or default)
        except ValueError:
            logger.warning(
                "RATE_LIMIT_%s is not a valid limit (got %r); defaulting to %s",
                name.upper(),
                raw,
                default,
            )
            table[name] = RateLimitConfig.from_string(default)
    return table


RATE_LIMITS = load_rate_limits()


def _now_ms() -> float:
    return time.time() * 1000


class RateLimiterStore:
    """Owns the timestamp map and the periodic sweep that bounds its size.

    Construct one per application (tests build their own) and pass a
    ``clock`` returning epoch milliseconds to control time.
    """

    def __init__(
        self,
        limits: Mapping[str, RateLimitConfig] | None = None,
        *,
        clock: Callable[[], float] | None = None,
        sweep_interval: float = RATE_LIMIT_SWEEP_SECONDS,
        disabled: bool = RATE_LIMITS_DISABLED,
    ) -> None:
        self.limits = dict(RATE_LIMITS if limits is None else limits)
        if DEFAULT_LIMIT_TYPE not in self.limits:
            raise ValueError("rate limit table must define a 'default' entry")
        self.disabled = disabled
        self._clock = clock or _now_ms
        self._sweep_interval = sweep_interval
        self._entries: dict[tuple[str, str], list[float]] = {}
        # Sync dependencies run on a worker thread pool.
        self._lock = threading.Lock()
        self._task: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def config_for(self, limit_type: str) -> RateLimitConfig:
        return self.limits.get(limit_type) or self.limits[DEFAULT_LIMIT_TYPE]

    def check(self, identifier: str, limit_type: str = DEFAULT_LIMIT_TYPE) -> RateLimitResult:
        """Record a request for ``identifier`` unless its window is full."""

        config = self.config_for(limit_type)
        now = self._clock()

        if self.disabled:
            return RateLimitResult(
                success=True,
                limit=config.max_requests,
                remaining=config.max_requests,
                reset=math.ceil((now + config.window_ms) / 1000),
            )

        window_start = now - config.window_ms
        key = (limit_type, identifier)
        with self._lock:
            timestamps = [ts for ts in self._entries.get(key, ()) if ts > window_start]
            self._entries[key] = timestamps
            count = len(timestamps)
            oldest = timestamps[0] if timestamps else now
            reset = math.ceil((oldest + config.window_ms) / 1000)

            if count >= config.max_requests:
                return RateLimitResult(
                    success=False,
                    limit=config.max_requests,
                    remaining=0,
                    reset=reset,
                    retry_after=math.ceil((oldest + config.window_ms - now) / 1000),
                )

            timestamps.append(now)

        return RateLimitResult(
            success=True,
            limit=config.max_requests,
            remaining=config.max_requests - count - 1,
            reset=reset,
        )

    def status(self, identifier: str, limit_type: str = DEFAULT_LIMIT_TYPE) -> RateLimitResult:
        """Report the current budget without consuming a request."""

        config = self.config_for(limit_type)
        now = self._clock()
        window_start = now - config.window_ms
        with self._lock:
            timestamps = [
                ts for ts in self._entries.get((limit_type, identifier), ()) if ts > window_start
            ]
        remaining = max(0, config.max_requests - len(timestamps))
        oldest = timestamps[0] if timestamps else now
        return RateLimitResult(
            success=remaining > 0 or self.disabled,
            limit=config.max_requests,
            remaining=config.max_requests if self.disabled else remaining,
            reset=math.ceil((oldest + config.window_ms) / 1000),
        )

    def sweep(self) -> int:
        """Drop timestamps older than the largest window and delete empty keys.

        Returns the number of keys removed.
        """

        now = self._clock()
        max_window = max(c.window_ms for c in self.limits.values())
        with self._lock:
            stale: list[tuple[str, str]] = []
            for key, timestamps in list(self._entries.items()):
                kept = [ts for ts in timestamps if now - ts < max_window]
                if kept:
                    self._entries[key] = kept
                else:
                    stale.append(key)
            for key in stale:
                del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            removed = self.sweep()
            if removed:
                logger.debug("Rate limiter sweep removed %d idle keys", removed)

    def start(self) -> None:
        """Start the periodic sweep on the running event loop (idempotent)."""

        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self._sweep_forever())
        logger.info("Rate limiter sweep every %.0fs", self._sweep_interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


def get_client_identifier(request: Request) -> str:
    """Best-effort client IP from proxy headers, else ``"anonymous"``."""

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip
    cf_ip = (request.headers.get("cf-connecting-ip") or "").strip()
    if cf_ip:
        return cf_ip
    return ANONYMOUS_IDENTIFIER


def assert_rate_limit(
    store: RateLimiterStore, identifier: str, limit_type: str = DEFAULT_LIMIT_TYPE
) -> RateLimitResult:
    """Consume one request or raise :class:`RateLimitError`."""

    result = store.check(identifier, limit_type)
    if not result.success:
        logger.info(
            "Rate limit exceeded for %s on %s; retry in %ss",
            identifier,
            limit_type,
            result.retry_after,
        )
        raise RateLimitError(
            limit=result.limit,
            remaining=result.remaining,
            reset=result.reset,
            retry_after=result.retry_after,
        )
    return result


def get_rate_limiter(request: Request) -> RateLimiterStore:
    store = getattr(request.app.state, "rate_limiter", None)
    if store is None:
        raise RuntimeError("app.state.rate_limiter is not configured")
    return store


def rate_limit(limit_type: RateLimitType = DEFAULT_LIMIT_TYPE):
    """FastAPI dependency enforcing ``limit_type`` for the calling client."""

    def dependency(request: Request) -> RateLimitResult:
        return assert_rate_limit(
            get_rate_limiter(request), get_client_identifier(request), limit_type
        )

    return dependency
