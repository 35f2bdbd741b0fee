"""Tests for main application entrypoint."""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from fetch_stats.core.tracker import StatTracker
from fetch_stats.main import main, run_tracked
from fetch_stats.ports.settings import SettingsPort

__all__ = []


def make_response(status: int) -> Mock:
    response = Mock()
    response.status = status
    response.text = AsyncMock(return_value="")
    return response


@pytest.mark.asyncio
async def test_run_tracked_sends_one_request_per_url() -> None:
    """run_tracked should track every URL and survive failures."""
    request_fn = AsyncMock(side_effect=[make_response(200), ConnectionError("refused")])
    tracker = StatTracker(request_fn=request_fn, settings=SettingsPort())

    await run_tracked(tracker, ["http://a.example", "http://b.example"])

    stats = tracker.get_global_stats()
    assert stats.count == 2
    assert (stats.ok, stats.errors) == (1, 1)
    assert request_fn.call_count == 2


@pytest.mark.asyncio
async def test_main_tracks_configured_targets() -> None:
    """Main should build a tracker on the HTTP client and run the targets."""
    with (
        patch("fetch_stats.main.configure_logs"),
        patch("fetch_stats.main.load_settings") as mock_load_settings,
        patch("fetch_stats.main.HttpClient") as mock_http_client_class,
        patch("fetch_stats.main.run_tracked", new_callable=AsyncMock) as mock_run,
    ):
        mock_config = Mock()
        mock_config.target_urls = ["http://a.example"]
        mock_config.to_port.return_value = SettingsPort(timeout_ms=500, storage_limit=5)
        mock_load_settings.return_value = mock_config

        mock_http_client = AsyncMock()
        mock_http_client_class.return_value = mock_http_client
        mock_http_client.__aenter__.return_value = mock_http_client

        await main()

        mock_run.assert_awaited_once()
        tracker, urls = mock_run.call_args[0]
        assert isinstance(tracker, StatTracker)
        assert tracker.settings == SettingsPort(timeout_ms=500, storage_limit=5)
        assert urls == ["http://a.example"]


@pytest.mark.asyncio
async def test_main_aborts_on_configuration_error() -> None:
    """Main should not open a client when settings are invalid."""
    with (
        patch("fetch_stats.main.configure_logs"),
        patch("fetch_stats.main.load_settings", side_effect=RuntimeError("bad")),
        patch("fetch_stats.main.HttpClient") as mock_http_client_class,
        patch("fetch_stats.main.logger") as mock_logger,
    ):
        await main()

        mock_http_client_class.assert_not_called()
        mock_logger.error.assert_called()


@pytest.mark.asyncio
async def test_main_returns_without_targets() -> None:
    """Main should do nothing when no target is configured."""
    with (
        patch("fetch_stats.main.configure_logs"),
        patch("fetch_stats.main.load_settings") as mock_load_settings,
        patch("fetch_stats.main.HttpClient") as mock_http_client_class,
    ):
        mock_load_settings.return_value = Mock(target_urls=[])

        await main()

        mock_http_client_class.assert_not_called()


@pytest.mark.asyncio
async def test_main_logs_unexpected_errors() -> None:
    """Main should catch and log errors raised while tracking."""
    with (
        patch("fetch_stats.main.configure_logs"),
        patch("fetch_stats.main.load_settings") as mock_load_settings,
        patch("fetch_stats.main.HttpClient") as mock_http_client_class,
        patch("fetch_stats.main.run_tracked", new_callable=AsyncMock) as mock_run,
        patch("fetch_stats.main.logger") as mock_logger,
    ):
        mock_config = Mock()
        mock_config.target_urls = ["http://a.example"]
        mock_config.to_port.return_value = SettingsPort()
        mock_load_settings.return_value = mock_config

        mock_http_client = AsyncMock()
        mock_http_client_class.return_value = mock_http_client
        mock_http_client.__aenter__.return_value = mock_http_client
        mock_run.side_effect = RuntimeError("Test error")

        try:
            await main()
        except RuntimeError:
            pytest.fail("main() should not raise; exceptions are caught internally")

        mock_logger.error.assert_called()
