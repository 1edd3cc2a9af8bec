"""Shared fixtures: GitHub payloads and a ready-made analysis."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from repo_health.models import (
    BuildStatus,
    CICDStatus,
    ContributorShare,
    Documentation,
    IssueMetrics,
    MonthlyCommits,
    Recommendation,
    RecommendationKind,
    ReleaseCadence,
    ReleaseSummary,
    Repository,
    RepositoryAnalysis,
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def repo_payload() -> dict:
    return {
        "full_name": "octo/widgets",
        "name": "widgets",
        "owner": {"login": "octo"},
        "description": "Widgets for everyone",
        "language": "Python",
        "stargazers_count": 1500,
        "forks_count": 120,
        "watchers_count": 1500,
        "open_issues_count": 8,
        "has_wiki": True,
        "pushed_at": "2024-06-13T12:00:00Z",
        "updated_at": "2024-06-14T12:00:00Z",
    }


def make_analysis(**kwargs) -> RepositoryAnalysis:
    defaults = dict(
        repository=Repository(
            full_name="octo/widgets",
            owner="octo",
            name="widgets",
            description="Widgets for everyone",
            language="Python",
            stars=1500,
            forks=120,
            watchers=1500,
            open_issues=8,
            id=1,
            last_analyzed=NOW,
        ),
        health_score=87,
        code_quality=90,
        community=85,
        maintenance=86,
        commit_activity=[MonthlyCommits(month="Jun", commits=12)],
        contributors=[
            ContributorShare(
                login="alice", avatar_url="https://a/alice", contributions=70, percentage=70.0
            ),
            ContributorShare(
                login="bob", avatar_url="https://a/bob", contributions=30, percentage=30.0
            ),
        ],
        issue_metrics=IssueMetrics(avg_response_time=2.5, open_issues=4, closed_issues=6),
        documentation=Documentation(readme=True, license=True, wiki=True),
        cicd=CICDStatus(
            has_workflows=True,
            last_build="2024-06-14T10:00:00Z",
            build_status=BuildStatus.PASSING,
        ),
        releases=ReleaseSummary(latest="v1.2.0", frequency=ReleaseCadence.MONTHLY, total=3),
        recommendations=[
            Recommendation(
                kind=RecommendationKind.INFO,
                title="Add Contributing Guidelines",
                description="Create CONTRIBUTING.md to help new contributors get started.",
            )
        ],
    )
    defaults.update(kwargs)
    return RepositoryAnalysis(**defaults)


@pytest.fixture
def analysis() -> RepositoryAnalysis:
    return make_analysis()
