"""Orchestrator: wires together URL parsing, analysis and storage."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .analyzer import analyze_repository
from .config import Settings
from .github.client import GitHubClient
from .models import Analysis, RepositoryAnalysis
from .storage import MemoryStorage
from .urls import parse_repository_url

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    report: RepositoryAnalysis
    payload: str
    cached: bool = False


class AnalysisService:
    """Analyze repositories, replaying stored snapshots inside the freshness window.

    Two concurrent analyses of the same repository are not coordinated: both
    fetch, both write, and each leaves its own snapshot.
    """

    def __init__(
        self,
        storage: MemoryStorage,
        settings: Settings | None = None,
        client_factory: Callable[[], GitHubClient] | None = None,
        clock: Callable[[], datetime] | None = None,
        show_progress: bool = False,
    ) -> None:
        self._storage = storage
        self._settings = settings or Settings()
        self._client_factory = client_factory or self._default_client
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._show_progress = show_progress

    @property
    def settings(self) -> Settings:
        return self._settings

    def _default_client(self) -> GitHubClient:
        return GitHubClient(
            token=self._settings.token,
            base_url=self._settings.api_url,
            verify_ssl=self._settings.verify_ssl,
        )

    def _cached(self, full_name: str) -> Analysis | None:
        existing = self._storage.get_repository(full_name)
        if existing is None or existing.last_analyzed is None:
            return None
        age = self._clock() - existing.last_analyzed
        if age >= timedelta(seconds=self._settings.freshness_seconds):
            return None
        return self._storage.get_analysis(existing.id)

    async def analyze(self, url: str) -> AnalysisResult:
        """Main pipeline: validate, check freshness, fetch and score, persist."""
        owner, repo = parse_repository_url(url, host=self._settings.host)

        snapshot = self._cached(f"{owner}/{repo}")
        if snapshot is not None:
            logger.info("%s/%s: serving cached analysis #%d", owner, repo, snapshot.id)
            return AnalysisResult(
                report=RepositoryAnalysis.from_json(snapshot.analysis_data),
                payload=snapshot.analysis_data,
                cached=True,
            )

        async with self._client_factory() as client:
            report = await analyze_repository(
                client, owner, repo, now=self._clock(), show_progress=self._show_progress
            )

        fetched = report.repository
        if self._storage.get_repository(fetched.full_name) is not None:
            record = self._storage.update_repository(
                fetched.full_name,
                description=fetched.description,
                language=fetched.language,
                stars=fetched.stars,
                forks=fetched.forks,
                watchers=fetched.watchers,
                open_issues=fetched.open_issues,
            )
        else:
            record = self._storage.create_repository(fetched)
        report.repository = record

        payload = report.to_json()
        snapshot = self._storage.create_analysis(
            repository_id=record.id,
            health_score=report.health_score,
            code_quality=report.code_quality,
            community=report.community,
            maintenance=report.maintenance,
            analysis_data=payload,
        )
        logger.info(
            "%s: stored analysis #%d (health %d)",
            record.full_name,
            snapshot.id,
            report.health_score,
        )
        return AnalysisResult(report=report, payload=payload)

    def recent_analyses(self, limit: int = 10) -> list[Analysis]:
        return self._storage.get_latest_analyses(limit)
