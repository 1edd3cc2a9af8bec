"""Tests for the analysis pipeline."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from repo_health.analyzer import analyze_repository
from repo_health.errors import ProbeNotFound, UpstreamFetchError
from repo_health.github.client import GitHubClient
from repo_health.models import BuildStatus, RecommendationKind, ReleaseCadence


@pytest.fixture
def mock_client(repo_payload):
    client = AsyncMock(spec=GitHubClient)
    client.get_repository.return_value = repo_payload
    client.list_contributors.return_value = [
        {"login": "alice", "avatar_url": "https://a/alice", "contributions": 60},
        {"login": "bob", "avatar_url": "https://a/bob", "contributions": 40},
    ]
    client.get_commit_activity.return_value = []

    async def issues(owner, repo, state="open", since=None, per_page=100):
        if state == "open":
            return [{"number": 1}, {"number": 2}]
        return [
            {
                "number": 3,
                "comments": 1,
                "created_at": "2024-06-01T00:00:00Z",
                "updated_at": "2024-06-11T00:00:00Z",
            }
        ]

    client.list_issues.side_effect = issues
    client.list_releases.return_value = [
        {"tag_name": "v2.0", "created_at": "2024-06-01T00:00:00Z"},
        {"tag_name": "v1.9", "created_at": "2024-05-25T00:00:00Z"},
    ]
    client.get_readme.return_value = {}
    client.get_content.side_effect = ProbeNotFound("missing")
    client.get_license.return_value = {}
    client.list_workflows.return_value = {"total_count": 1}
    client.list_workflow_runs.return_value = [
        {"conclusion": "failure", "updated_at": "2024-06-14T00:00:00Z"}
    ]
    return client


@pytest.mark.asyncio
async def test_analyze_repository(mock_client, now):
    report = await analyze_repository(mock_client, "octo", "widgets", now=now)

    assert report.repository.full_name == "octo/widgets"
    assert report.repository.owner == "octo"
    assert report.repository.stars == 1500
    assert report.repository.last_analyzed == now
    # 50 + 15 readme + 10 license + 5 description + 10 language
    assert report.code_quality == 90
    # 30 + 10 contributors + 15 issues + 20 stars + 15 forks
    assert report.community == 90
    # 40 + 25 recent push + 10 releases + 15 open issues
    assert report.maintenance == 90
    assert report.health_score == 90
    assert [c.percentage for c in report.contributors] == [60.0, 40.0]
    assert report.issue_metrics.avg_response_time == 10.0
    assert report.issue_metrics.open_issues == 2
    assert report.issue_metrics.closed_issues == 1
    assert report.documentation.contributing is False
    assert report.documentation.wiki is True
    assert report.cicd.build_status is BuildStatus.FAILING
    assert report.releases.latest == "v2.0"
    assert report.releases.frequency is ReleaseCadence.WEEKLY
    assert report.releases.total == 2
    assert report.dependencies.total == 0
    assert len(report.commit_activity) == 12
    assert [(r.kind, r.title) for r in report.recommendations] == [
        (RecommendationKind.INFO, "Add Contributing Guidelines"),
        (RecommendationKind.WARNING, "Slow Issue Response"),
    ]


@pytest.mark.asyncio
async def test_analyze_requests_closed_issues_since_30_days(mock_client, now):
    await analyze_repository(mock_client, "octo", "widgets", now=now)
    closed_call = [
        c for c in mock_client.list_issues.call_args_list if c.kwargs.get("state") == "closed"
    ][0]
    assert closed_call.kwargs["since"] == "2024-05-16T12:00:00Z"


@pytest.mark.asyncio
async def test_analyze_fails_atomically(mock_client, now):
    mock_client.list_releases.side_effect = UpstreamFetchError(
        "GitHub API returned 500 for /repos/octo/widgets/releases", status_code=500
    )
    with pytest.raises(UpstreamFetchError) as excinfo:
        await analyze_repository(mock_client, "octo", "widgets", now=now)
    assert str(excinfo.value).startswith("Failed to analyze repository:")
    assert excinfo.value.status_code == 500
    mock_client.get_readme.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_missing_repository(mock_client, now):
    mock_client.get_repository.side_effect = UpstreamFetchError("not found", status_code=404)
    with pytest.raises(UpstreamFetchError) as excinfo:
        await analyze_repository(mock_client, "octo", "nope", now=now)
    assert excinfo.value.status_code == 404
    mock_client.list_contributors.assert_not_called()
