"""Paced, retried execution of marketplace data-source calls.

Every request a session makes goes through one RequestExecutor:

    Pending -> (pacing gate) -> Dispatched -> Success
                                           -> Failed, attempt < 3 -> Pending
                                           -> Failed, attempt = 3 -> Exhausted (error re-raised)

Unsupported operations never enter the loop; they raise ConfigurationError.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol

from tenacity import AsyncRetrying, RetryCallState, retry_if_not_exception_type, stop_after_attempt

from .errors import ConfigurationError
from .models import StoreConfig

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3

OPERATIONS = ("search", "app", "similar", "suggest", "collection")


class DataSource(Protocol):
    """Marketplace capability a session is bound to.

    Implementations may leave operations out; calling a missing one through
    the executor is a ConfigurationError. Every method also receives
    ``country``, ``language`` and ``timeout`` keyword arguments.
    """

    async def search(self, *, term: str, num: int, full_detail: bool, **kwargs: Any) -> list: ...

    async def app(self, *, app_id: str, **kwargs: Any) -> Any: ...

    async def suggest(self, *, term: str, **kwargs: Any) -> list[str]: ...


class PacingGate:
    """Interval-spaced token gate: at most one dispatch per ``interval_ms``."""

    def __init__(self, interval_ms: int):
        self._interval = max(0, interval_ms) / 1000.0
        self._lock = asyncio.Lock()
        self._next_dispatch: float = 0.0

    async def wait(self) -> None:
        async with self._lock:
            loop = asyncio.get_running_loop()
            now = loop.time()
            delay = self._next_dispatch - now
            if delay > 0:
                await asyncio.sleep(delay)
                now = loop.time()
            self._next_dispatch = now + self._interval


class RequestExecutor:
    """Serializes and retries calls to one DataSource."""

    def __init__(self, source: Any, config: Optional[StoreConfig] = None):
        self.source = source
        self.config = config or StoreConfig()
        self._gate = PacingGate(self.config.throttle)

    def supports(self, operation: str) -> bool:
        return callable(getattr(self.source, operation, None))

    async def execute(self, operation: str, **params: Any) -> Any:
        """Run ``operation`` on the bound source with pacing and up to 3 attempts.

        Raises:
            ConfigurationError: the source does not implement ``operation``.
            Exception: whatever the source raised on the third failed attempt.
        """
        if operation not in OPERATIONS or not self.supports(operation):
            raise ConfigurationError(
                f"Operation {operation!r} is not supported by {type(self.source).__name__}"
            )

        method = getattr(self.source, operation)
        merged = {
            **params,
            "country": self.config.country,
            "language": self.config.language,
            "timeout": self.config.timeout,
        }

        retrying = AsyncRetrying(
            stop=stop_after_attempt(MAX_ATTEMPTS),
            retry=retry_if_not_exception_type(ConfigurationError),
            after=self._log_failed_attempt,
            reraise=True,
        )
        return await retrying(self._dispatch, operation, method, merged)

    async def _dispatch(self, operation: str, method, params: dict) -> Any:
        await self._gate.wait()
        logger.debug("Executing %s with params: %s", operation, params)
        return await method(**params)

    @staticmethod
    def _log_failed_attempt(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Request failed, attempt %d/%d. %s",
            retry_state.attempt_number,
            MAX_ATTEMPTS,
            exc,
        )
