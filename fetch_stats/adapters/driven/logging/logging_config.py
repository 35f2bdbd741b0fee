"""Console logging setup for the stat tracker."""

import logging

__all__ = ["configure_logs"]


def configure_logs() -> None:
    """Configure console logging for the tracker and its entrypoint.

    Sets up:
    - Root logger at INFO level.
    - aiohttp and asyncio at WARNING, so transport chatter stays out of the
      per-request summary lines.
    - fetch_stats at DEBUG: every recorded outcome, late settlements after a
      timeout, rejected configure() values and stats handler failures.
    - One line per record with timestamp, level, logger name and line number.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
    date_format = "%d/%m/%y %H:%M:%S"

    formatter = logging.Formatter(log_format, date_format)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(handler)

    # Suppress verbose framework loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger("fetch_stats").setLevel(logging.DEBUG)
