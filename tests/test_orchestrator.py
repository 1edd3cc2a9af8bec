"""Tests for the analysis service."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from conftest import NOW, make_analysis
from repo_health.config import Settings
from repo_health.errors import InvalidRepositoryUrl, UpstreamFetchError
from repo_health.github.client import GitHubClient
from repo_health.orchestrator import AnalysisService
from repo_health.storage import MemoryStorage


class FakeClock:
    def __init__(self) -> None:
        self.now = NOW

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(clock):
    return MemoryStorage(clock=clock)


@pytest.fixture
def client():
    client = AsyncMock(spec=GitHubClient)
    client.__aenter__.return_value = client
    return client


@pytest.fixture
def service(storage, clock, client):
    return AnalysisService(storage, settings=Settings(), client_factory=lambda: client, clock=clock)


@pytest.fixture
def analyze_mock():
    with patch("repo_health.orchestrator.analyze_repository", new_callable=AsyncMock) as mock:
        mock.side_effect = lambda *args, **kwargs: make_analysis()
        yield mock


@pytest.mark.asyncio
async def test_analyze_fresh_repository(service, storage, analyze_mock):
    result = await service.analyze("https://github.com/octo/widgets")

    assert result.cached is False
    analyze_mock.assert_awaited_once()
    assert analyze_mock.call_args.args[1:] == ("octo", "widgets")
    record = storage.get_repository("octo/widgets")
    assert record.id == 1
    assert result.report.repository == record
    snapshot = storage.get_analysis(record.id)
    assert snapshot.analysis_data == result.payload
    assert snapshot.health_score == result.report.health_score


@pytest.mark.asyncio
async def test_reanalysis_within_window_replays_payload(service, clock, analyze_mock):
    first = await service.analyze("https://github.com/octo/widgets")
    clock.now = NOW + timedelta(minutes=59)
    second = await service.analyze("https://github.com/octo/widgets")

    assert second.cached is True
    assert second.payload == first.payload
    assert second.report == first.report
    assert analyze_mock.await_count == 1


@pytest.mark.asyncio
async def test_reanalysis_after_window_refetches(service, storage, clock, analyze_mock):
    await service.analyze("https://github.com/octo/widgets")
    clock.now = NOW + timedelta(hours=1)
    result = await service.analyze("https://github.com/octo/widgets")

    assert result.cached is False
    assert analyze_mock.await_count == 2
    record = storage.get_repository("octo/widgets")
    assert record.id == 1
    assert record.last_analyzed == clock.now
    assert len(storage.get_latest_analyses()) == 2
    assert storage.get_analysis(record.id).analysis_data == result.payload


@pytest.mark.asyncio
async def test_custom_freshness_window(storage, clock, client, analyze_mock):
    service = AnalysisService(
        storage,
        settings=Settings(freshness_seconds=60),
        client_factory=lambda: client,
        clock=clock,
    )
    await service.analyze("https://github.com/octo/widgets")
    clock.now = NOW + timedelta(minutes=2)
    result = await service.analyze("https://github.com/octo/widgets")
    assert result.cached is False


@pytest.mark.asyncio
async def test_invalid_url_rejected_before_io(service, client, analyze_mock):
    with pytest.raises(InvalidRepositoryUrl):
        await service.analyze("https://github.com/onlyonepart")
    analyze_mock.assert_not_called()
    client.__aenter__.assert_not_called()


@pytest.mark.asyncio
async def test_upstream_failure_persists_nothing(service, storage, analyze_mock):
    analyze_mock.side_effect = UpstreamFetchError("Failed to analyze repository: boom")
    with pytest.raises(UpstreamFetchError):
        await service.analyze("https://github.com/octo/widgets")
    assert storage.get_repository("octo/widgets") is None
    assert storage.get_latest_analyses() == []


@pytest.mark.asyncio
async def test_client_is_closed_after_analysis(service, client, analyze_mock):
    await service.analyze("https://github.com/octo/widgets")
    client.__aexit__.assert_awaited_once()


@pytest.mark.asyncio
async def test_recent_analyses(service, clock, analyze_mock):
    await service.analyze("https://github.com/octo/widgets")
    clock.now = NOW + timedelta(hours=2)
    await service.analyze("https://github.com/octo/widgets")
    recent = service.recent_analyses(limit=1)
    assert len(recent) == 1
    assert recent[0].created_at == clock.now
