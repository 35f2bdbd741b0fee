"""Stat tracker that races each HTTP request against a timeout."""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import Field, TypeAdapter, ValidationError

from fetch_stats.core.history import ActiveStats
from fetch_stats.ports.http import BODY_OPTION_KEYS, RequestFn, ResponsePort
from fetch_stats.ports.settings import MIN_STORAGE_LIMIT, MIN_TIMEOUT_MS, SettingsPort
from fetch_stats.ports.stats import FetchStat, GlobalStats, StatCategory, StatsHandler

__all__ = ["StatTracker", "FetchTimeoutError", "HandlerResult", "strip_body"]

logger = logging.getLogger(__name__)

FIRST_SUCCESS_HTTP_CODE = 200
FIRST_NON_SUCCESS_HTTP_CODE = 300

_timeout_adapter = TypeAdapter(
    Annotated[float, Field(strict=True, ge=MIN_TIMEOUT_MS, allow_inf_nan=False)]
)
_storage_limit_adapter = TypeAdapter(
    Annotated[int, Field(strict=True, ge=MIN_STORAGE_LIMIT)]
)


class FetchTimeoutError(TimeoutError):
    """Raised when a tracked request does not settle within the deadline."""

    def __init__(self, url: str, timeout_ms: float) -> None:
        super().__init__(f"Request to {url} timed out after {timeout_ms:g} ms")
        self.url = url
        self.timeout_ms = timeout_ms


@dataclass(slots=True, frozen=True)
class HandlerResult:
    """Outcome of one handler invocation.

    Attributes:
        reset: True if the handler asked for the history to be cleared.
        error: Exception raised by the handler, if any.
    """

    reset: bool = False
    error: Exception | None = None


@dataclass(slots=True)
class _Race:
    """Per-request state shared by the timer and the request task."""

    url: str
    options: dict[str, Any]
    timeout_ms: float
    outcome: asyncio.Future[Any]
    timed_out: bool = False
    timer: asyncio.Task[None] | None = None


def strip_body(options: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of request options without payload fields."""
    return {key: value for key, value in options.items() if key not in BODY_OPTION_KEYS}


def _never_reset(global_stats: GlobalStats, active_stats: ActiveStats) -> bool:
    return False


class StatTracker:
    """Record the outcome of every tracked HTTP request.

    Each call to ``perform_tracked`` is classified as ``ok``, ``not_ok``,
    ``errors`` or ``timeouts``. Outcomes update cumulative counters and a
    bounded newest-first history, then the registered handler is invoked.
    A truthy handler result clears the history but keeps the counters.

    Not thread-safe; create one instance per event loop.
    """

    def __init__(self, request_fn: RequestFn, settings: SettingsPort | None = None) -> None:
        """Initialize tracker.

        Args:
            request_fn: Async transport called as ``request_fn(url, options)``.
            settings: Initial timeout and storage limit; defaults when omitted.
        """
        self._request_fn = request_fn
        self._settings = dataclasses.replace(settings) if settings else SettingsPort()
        self._handler: StatsHandler = _never_reset
        self._global = GlobalStats()
        self._active = ActiveStats()
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def settings(self) -> SettingsPort:
        """Copy of the current settings; use configure() to change them."""
        return dataclasses.replace(self._settings)

    @property
    def pending_requests(self) -> int:
        """Number of request tasks that have not settled yet."""
        return len(self._inflight)

    async def perform_tracked(
        self, url: str, options: Mapping[str, Any] | None = None
    ) -> Any:
        """Send a request and record its outcome.

        The request and a timer run as two tasks; the first one to finish
        decides what the caller sees. A request settling after its timeout
        is still recorded, but neither reruns the handler nor changes the
        result already delivered.

        Args:
            url: Target URL.
            options: Transport options (method, headers, body, ...).

        Returns:
            The response, for any HTTP status.

        Raises:
            FetchTimeoutError: If the deadline elapsed first.
            Exception: The transport error, unchanged.
        """
        loop = asyncio.get_running_loop()
        race = _Race(
            url=url,
            options=dict(options or {}),
            timeout_ms=self._settings.timeout_ms,
            outcome=loop.create_future(),
        )

        request = loop.create_task(self._settle(race))
        self._inflight.add(request)
        request.add_done_callback(self._inflight.discard)
        race.timer = loop.create_task(self._expire(race))

        return await race.outcome

    async def drain(self) -> None:
        """Wait for every in-flight request, including late ones after a timeout."""
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    def record_stat(self, category: StatCategory | str, stat: FetchStat) -> FetchStat:
        """Store one outcome in the counters and the bounded history.

        Args:
            category: Outcome category or its string value.
            stat: Record to store; its options are stripped of any body.

        Returns:
            The stored record.

        Raises:
            ValueError: If category is unknown.
        """
        try:
            category = StatCategory(category)
        except ValueError:
            raise ValueError(f"{category!r} is not a stat category") from None

        stat = dataclasses.replace(stat, options=strip_body(stat.options))
        self._global.last_stat = stat
        self._global.count += 1
        setattr(self._global, category.value, getattr(self._global, category.value) + 1)
        self._active.push(category, stat, self._settings.storage_limit)
        logger.debug(f"Recorded {category.value} for {stat.url} (total={self._global.count})")
        return stat

    def get_active_stats(self) -> ActiveStats:
        """Return a copy of the bounded history.

        Returns:
            ActiveStats snapshot, newest record first in every category.
        """
        return self._active.copy()

    def get_global_stats(self) -> GlobalStats:
        """Return a copy of the cumulative counters.

        Returns:
            GlobalStats snapshot.
        """
        return dataclasses.replace(self._global)

    def reset_stats(self) -> None:
        """Clear the bounded history; counters are left untouched."""
        self._active = ActiveStats()

    def configure(
        self, *, timeout_ms: float | None = None, storage_limit: int | None = None
    ) -> None:
        """Update settings, ignoring invalid values.

        Args:
            timeout_ms: New deadline, at least ``MIN_TIMEOUT_MS``.
            storage_limit: New history size per category, at least 1.
        """
        if timeout_ms is not None:
            try:
                self._settings.timeout_ms = _timeout_adapter.validate_python(timeout_ms)
            except ValidationError:
                logger.warning(f"Ignoring invalid timeout_ms={timeout_ms!r}")

        if storage_limit is not None:
            try:
                self._settings.storage_limit = _storage_limit_adapter.validate_python(
                    storage_limit
                )
            except ValidationError:
                logger.warning(f"Ignoring invalid storage_limit={storage_limit!r}")
            else:
                self._active.truncate(self._settings.storage_limit)

    def register_handler(self, handler: StatsHandler) -> None:
        """Replace the completion handler; non-callables are ignored."""
        if not callable(handler):
            logger.debug(f"Ignoring non-callable stats handler {handler!r}")
            return
        self._handler = handler

    async def _expire(self, race: _Race) -> None:
        await asyncio.sleep(race.timeout_ms / 1_000)
        race.timed_out = True

        error = FetchTimeoutError(race.url, race.timeout_ms)
        self.record_stat(
            StatCategory.TIMEOUTS,
            FetchStat(url=race.url, options=race.options, error=error),
        )
        await self._after_request()
        _deliver(race.outcome, error=error)

    async def _settle(self, race: _Race) -> None:
        try:
            response: ResponsePort = await self._request_fn(race.url, race.options)
        except asyncio.CancelledError:
            _clear_timer(race)
            raise
        except Exception as exc:
            _clear_timer(race)
            self.record_stat(
                StatCategory.ERRORS,
                FetchStat(url=race.url, options=race.options, error=exc),
            )
            await self._finish(race, error=exc)
            return

        if FIRST_SUCCESS_HTTP_CODE <= response.status < FIRST_NON_SUCCESS_HTTP_CODE:
            _clear_timer(race)
            self.record_stat(
                StatCategory.OK,
                FetchStat(url=race.url, options=race.options, status=response.status),
            )
        else:
            # The deadline still applies while the error body is read
            try:
                body_text = await _read_body(response, race.url)
            finally:
                _clear_timer(race)
            self.record_stat(
                StatCategory.NOT_OK,
                FetchStat(
                    url=race.url,
                    options=race.options,
                    status=response.status,
                    body_text=body_text,
                ),
            )
        await self._finish(race, result=response)

    async def _finish(
        self, race: _Race, result: Any = None, error: BaseException | None = None
    ) -> None:
        if race.timed_out:
            logger.debug(f"Request to {race.url} settled after its timeout was reported")
            if result is not None:
                await _release(result)
            return
        await self._after_request()
        _deliver(race.outcome, result=result, error=error)

    async def _after_request(self) -> None:
        result = await self._invoke_handler()
        if result.error is not None:
            logger.error(
                f"Stats handler raised, it will be ignored: {result.error}",
                exc_info=result.error,
            )
        elif result.reset:
            self.reset_stats()

    async def _invoke_handler(self) -> HandlerResult:
        try:
            verdict = self._handler(self.get_global_stats(), self.get_active_stats())
            if inspect.isawaitable(verdict):
                verdict = await verdict
        except Exception as exc:  # noqa: BLE001
            return HandlerResult(error=exc)
        return HandlerResult(reset=bool(verdict))


def _clear_timer(race: _Race) -> None:
    if race.timer is not None and not race.timed_out:
        race.timer.cancel()


def _deliver(
    outcome: asyncio.Future[Any], result: Any = None, error: BaseException | None = None
) -> None:
    """Settle the caller's future unless it is already done or cancelled."""
    if outcome.done():
        return
    if error is not None:
        outcome.set_exception(error)
    else:
        outcome.set_result(result)


async def _read_body(response: ResponsePort, url: str) -> str | None:
    try:
        return await response.text()
    except Exception as e:  # noqa: BLE001
        logger.warning(f"Could not read body of {response.status} response from {url}: {e}")
        return None


async def _release(response: ResponsePort) -> None:
    """Give a response nobody will read back to the connection pool."""
    release = getattr(response, "release", None)
    if release is None:
        return
    released = release()
    if inspect.isawaitable(released):
        await released
