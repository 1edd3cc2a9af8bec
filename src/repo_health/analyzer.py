"""Analysis pipeline: fetch a repository's data and score it."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from rich.progress import Progress, SpinnerColumn, TextColumn

from . import scoring
from .errors import UpstreamFetchError
from .github.client import GitHubClient
from .github.probes import check_cicd, check_documentation
from .models import (
    DependencySummary,
    IssueMetrics,
    ReleaseSummary,
    Repository,
    RepositoryAnalysis,
)

logger = logging.getLogger(__name__)

CLOSED_ISSUE_WINDOW_DAYS = 30


async def analyze_repository(
    client: GitHubClient,
    owner: str,
    repo: str,
    now: datetime | None = None,
    show_progress: bool = False,
) -> RepositoryAnalysis:
    """Fetch everything needed for a report and compute it.

    Calls are issued one after another. Any upstream failure aborts the whole
    analysis with ``UpstreamFetchError``; nothing partial is returned.
    """
    now = now or datetime.now(timezone.utc)
    since = (now - timedelta(days=CLOSED_ISSUE_WINDOW_DAYS)).strftime("%Y-%m-%dT%H:%M:%SZ")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
        disable=not show_progress,
    ) as progress:
        task = progress.add_task(f"Analyzing {owner}/{repo}...", total=None)

        def step(description: str) -> None:
            logger.info("%s/%s: %s", owner, repo, description)
            progress.update(task, description=f"{owner}/{repo}: {description}")

        try:
            step("fetching repository")
            repo_data = await client.get_repository(owner, repo)
            step("fetching contributors")
            contributors = await client.list_contributors(owner, repo, per_page=10)
            step("fetching commit activity")
            weeks = await client.get_commit_activity(owner, repo)
            step("fetching issues")
            open_issues = await client.list_issues(owner, repo, state="open")
            closed_issues = await client.list_issues(
                owner, repo, state="closed", since=since
            )
            step("fetching releases")
            releases = await client.list_releases(owner, repo, per_page=10)
            step("probing documentation")
            documentation = await check_documentation(client, owner, repo, repo_data)
            step("probing CI/CD")
            cicd = await check_cicd(client, owner, repo)
        except UpstreamFetchError as exc:
            raise UpstreamFetchError(
                f"Failed to analyze repository: {exc}", status_code=exc.status_code
            ) from exc

    avg_response_time = scoring.issue_response_time(closed_issues)
    code_quality = scoring.code_quality_score(repo_data, documentation)
    community = scoring.community_score(repo_data, contributors, open_issues)
    maintenance = scoring.maintenance_score(repo_data, releases, now=now)

    return RepositoryAnalysis(
        repository=Repository(
            full_name=repo_data.get("full_name", f"{owner}/{repo}"),
            owner=(repo_data.get("owner") or {}).get("login", owner),
            name=repo_data.get("name", repo),
            description=repo_data.get("description"),
            language=repo_data.get("language"),
            stars=repo_data.get("stargazers_count", 0),
            forks=repo_data.get("forks_count", 0),
            watchers=repo_data.get("watchers_count", 0),
            open_issues=repo_data.get("open_issues_count", 0),
            last_analyzed=now,
        ),
        health_score=scoring.health_score(code_quality, community, maintenance),
        code_quality=code_quality,
        community=community,
        maintenance=maintenance,
        commit_activity=scoring.monthly_commit_activity(weeks, now=now),
        contributors=scoring.contributor_shares(contributors),
        issue_metrics=IssueMetrics(
            avg_response_time=avg_response_time,
            open_issues=len(open_issues),
            closed_issues=len(closed_issues),
        ),
        documentation=documentation,
        cicd=cicd,
        dependencies=DependencySummary(),
        releases=ReleaseSummary(
            latest=releases[0].get("tag_name") if releases else None,
            frequency=scoring.release_cadence(releases),
            total=len(releases),
        ),
        recommendations=scoring.generate_recommendations(
            documentation, cicd, avg_response_time
        ),
    )
