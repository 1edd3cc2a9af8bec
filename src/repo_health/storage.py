"""In-memory persistence for repository records and analysis snapshots."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from .models import Analysis, Repository


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryStorage:
    """Keyed store with two collections: repositories and analyses.

    Construct one per process (or per test) and pass it to the service.
    Not synchronized; concurrent writers to the same repository race and the
    last write wins.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._repositories: dict[str, Repository] = {}
        self._analyses: dict[int, Analysis] = {}
        self._next_repo_id = 1
        self._next_analysis_id = 1

    def get_repository(self, full_name: str) -> Repository | None:
        return self._repositories.get(full_name)

    def create_repository(self, repository: Repository) -> Repository:
        created = replace(
            repository, id=self._next_repo_id, last_analyzed=self._clock()
        )
        self._next_repo_id += 1
        self._repositories[created.full_name] = created
        return created

    def update_repository(self, full_name: str, **updates: Any) -> Repository | None:
        """Apply field updates and bump ``last_analyzed``."""
        existing = self._repositories.get(full_name)
        if existing is None:
            return None
        updated = replace(existing, **updates, last_analyzed=self._clock())
        self._repositories[full_name] = updated
        return updated

    def get_analysis(self, repository_id: int) -> Analysis | None:
        """Most recent snapshot for a repository."""
        matches = [a for a in self._analyses.values() if a.repository_id == repository_id]
        if not matches:
            return None
        return max(matches, key=lambda a: (a.created_at, a.id))

    def create_analysis(
        self,
        repository_id: int,
        health_score: int,
        code_quality: int,
        community: int,
        maintenance: int,
        analysis_data: str,
    ) -> Analysis:
        analysis = Analysis(
            id=self._next_analysis_id,
            repository_id=repository_id,
            health_score=health_score,
            code_quality=code_quality,
            community=community,
            maintenance=maintenance,
            analysis_data=analysis_data,
            created_at=self._clock(),
        )
        self._next_analysis_id += 1
        self._analyses[analysis.id] = analysis
        return analysis

    def get_latest_analyses(self, limit: int = 10) -> list[Analysis]:
        ordered = sorted(
            self._analyses.values(), key=lambda a: (a.created_at, a.id), reverse=True
        )
        return ordered[:limit]
