"""Application entrypoint."""

import asyncio
import logging

from fetch_stats.adapters.driven.config.settings import load_settings
from fetch_stats.adapters.driven.http.client import HttpClient
from fetch_stats.adapters.driven.logging.logging_config import configure_logs
from fetch_stats.adapters.driven.metrics.stats_logger import LoggingStatsHandler, summarize
from fetch_stats.core.tracker import StatTracker

__all__ = ["main", "run_tracked"]

logger = logging.getLogger(__name__)


async def run_tracked(tracker: StatTracker, urls: list[str]) -> None:
    """Send one tracked GET per URL concurrently and log each outcome.

    Args:
        tracker: Tracker wrapping the HTTP transport.
        urls: Target URLs.
    """
    results = await asyncio.gather(
        *(tracker.perform_tracked(url) for url in urls),
        return_exceptions=True,
    )
    for url, result in zip(urls, results):
        if isinstance(result, BaseException):
            logger.warning(f"{url} failed: {result!r}")
        else:
            logger.info(f"{url} returned status {result.status}")

    # Let requests that outlived their timeout finish their bookkeeping
    await tracker.drain()


async def main() -> None:
    """Run tracked requests against the configured targets.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Send one tracked request per target URL.
    4. Log the final summary.
    """
    configure_logs()
    logger.info("Starting FetchStats...")

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check FETCH_STATS_TIMEOUT_MS, FETCH_STATS_STORAGE_LIMIT "
            "and FETCH_STATS_TARGET_URLS.",
            exc,
        )
        return

    if not config.target_urls:
        logger.warning("No FETCH_STATS_TARGET_URLS configured, nothing to do.")
        return

    async with HttpClient() as http:
        tracker = StatTracker(request_fn=http.fetch, settings=config.to_port())
        tracker.register_handler(LoggingStatsHandler())

        try:
            await run_tracked(tracker, config.target_urls)
        except Exception as e:
            logger.error(f"Unhandled exception while tracking requests: {e}", exc_info=True)

        logger.info(
            f"Final stats: {summarize(tracker.get_global_stats(), tracker.get_active_stats())}"
        )


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Shutdown requested by user (Ctrl+C).")
