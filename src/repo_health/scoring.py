"""Scoring engine: pure functions from raw GitHub payloads to health scores.

Every subscore starts at a fixed base, adds a bonus per satisfied condition
and is capped at 100. Inputs are the JSON objects returned by the REST API.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from .models import (
    CICDStatus,
    ContributorShare,
    Documentation,
    MonthlyCommits,
    Recommendation,
    RecommendationKind,
    ReleaseCadence,
    parse_timestamp,
)

MAX_SCORE = 100
TOP_CONTRIBUTORS = 5
SLOW_RESPONSE_DAYS = 7
SECONDS_PER_DAY = 86400

_MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _tier(value: float, tiers: list[tuple[float, int]], above: bool) -> int:
    """Return the bonus of the first tier whose threshold ``value`` passes."""
    for threshold, bonus in tiers:
        if (value > threshold) if above else (value < threshold):
            return bonus
    return 0


def code_quality_score(repo: dict[str, Any], documentation: Documentation) -> int:
    score = 50
    if documentation.readme:
        score += 15
    if documentation.contributing:
        score += 10
    if documentation.license:
        score += 10
    if repo.get("description"):
        score += 5
    if repo.get("language"):
        score += 10
    return min(MAX_SCORE, score)


def community_score(
    repo: dict[str, Any],
    contributors: list[dict[str, Any]],
    open_issues: list[dict[str, Any]],
) -> int:
    score = 30
    score += _tier(len(contributors), [(10, 20), (5, 15), (1, 10)], above=True)
    score += _tier(len(open_issues), [(50, 15), (100, 10)], above=False)
    score += _tier(
        repo.get("stargazers_count") or 0, [(1000, 20), (100, 15), (10, 10)], above=True
    )
    score += _tier(repo.get("forks_count") or 0, [(100, 15), (10, 10)], above=True)
    return min(MAX_SCORE, score)


def days_since_push(repo: dict[str, Any], now: datetime | None = None) -> float | None:
    """Days since the last push (``pushed_at``, else ``updated_at``)."""
    last = parse_timestamp(repo.get("pushed_at") or repo.get("updated_at"))
    if last is None:
        return None
    now = now or datetime.now(timezone.utc)
    return (now - last).total_seconds() / SECONDS_PER_DAY


def maintenance_score(
    repo: dict[str, Any],
    releases: list[dict[str, Any]],
    now: datetime | None = None,
) -> int:
    score = 40
    days = days_since_push(repo, now)
    if days is not None:
        score += _tier(days, [(7, 25), (30, 20), (90, 15), (365, 10)], above=False)
    score += _tier(len(releases), [(10, 20), (5, 15), (0, 10)], above=True)
    score += _tier(repo.get("open_issues_count") or 0, [(10, 15), (50, 10)], above=False)
    return min(MAX_SCORE, score)


def health_score(code_quality: int, community: int, maintenance: int) -> int:
    return _round_half_up((code_quality + community + maintenance) / 3)


def issue_response_time(closed_issues: list[dict[str, Any]]) -> float:
    """Average days from creation to last update over commented issues.

    Issues without comments never count. Returns 0 when nothing qualifies.
    """
    durations: list[float] = []
    for issue in closed_issues:
        if not issue.get("comments"):
            continue
        created = parse_timestamp(issue.get("created_at"))
        updated = parse_timestamp(issue.get("updated_at"))
        if created is None or updated is None:
            continue
        durations.append((updated - created).total_seconds() / SECONDS_PER_DAY)
    if not durations:
        return 0
    return _round_half_up(sum(durations) / len(durations) * 10) / 10


def release_cadence(releases: list[dict[str, Any]]) -> ReleaseCadence:
    if len(releases) < 2:
        return ReleaseCadence.IRREGULAR

    dates = sorted(
        (d for d in (parse_timestamp(r.get("created_at")) for r in releases) if d),
        reverse=True,
    )
    if len(dates) < 2:
        return ReleaseCadence.IRREGULAR
    gaps = [
        (dates[i] - dates[i + 1]).total_seconds() / SECONDS_PER_DAY
        for i in range(len(dates) - 1)
    ]
    avg = sum(gaps) / len(gaps)

    if avg < 14:
        return ReleaseCadence.WEEKLY
    if avg < 45:
        return ReleaseCadence.MONTHLY
    if avg < 120:
        return ReleaseCadence.QUARTERLY
    return ReleaseCadence.ANNUALLY


def contributor_shares(
    contributors: list[dict[str, Any]], top_n: int = TOP_CONTRIBUTORS
) -> list[ContributorShare]:
    """Top contributors with their share of all fetched contributions."""
    total = sum(c.get("contributions", 0) for c in contributors)
    ranked = sorted(contributors, key=lambda c: c.get("contributions", 0), reverse=True)
    shares: list[ContributorShare] = []
    for c in ranked[:top_n]:
        contributions = c.get("contributions", 0)
        percentage = _round_half_up(contributions / total * 1000) / 10 if total else 0.0
        shares.append(
            ContributorShare(
                login=c.get("login", "unknown"),
                avatar_url=c.get("avatar_url", ""),
                contributions=contributions,
                percentage=percentage,
            )
        )
    return shares


def monthly_commit_activity(
    weeks: list[dict[str, Any]], now: datetime | None = None
) -> list[MonthlyCommits]:
    """Bucket weekly commit totals into the last 12 calendar months.

    A week belongs to the month its start (``week`` timestamp) falls in.
    """
    now = now or datetime.now(timezone.utc)
    totals: dict[tuple[int, int], int] = {}
    for w in weeks:
        start = datetime.fromtimestamp(w.get("week", 0), tz=timezone.utc)
        key = (start.year, start.month)
        totals[key] = totals.get(key, 0) + w.get("total", 0)

    result: list[MonthlyCommits] = []
    for offset in range(11, -1, -1):
        index = now.year * 12 + (now.month - 1) - offset
        year, month = divmod(index, 12)
        result.append(
            MonthlyCommits(
                month=_MONTH_NAMES[month], commits=totals.get((year, month + 1), 0)
            )
        )
    return result


def generate_recommendations(
    documentation: Documentation, cicd: CICDStatus, avg_response_time: float
) -> list[Recommendation]:
    """Evaluate the fixed rule list; order of rules is display order."""
    recommendations: list[Recommendation] = []

    if not documentation.readme:
        recommendations.append(Recommendation(
            kind=RecommendationKind.ERROR,
            title="Missing README",
            description="Add a comprehensive README.md file to help users understand your project.",
        ))

    if not documentation.contributing:
        recommendations.append(Recommendation(
            kind=RecommendationKind.INFO,
            title="Add Contributing Guidelines",
            description="Create CONTRIBUTING.md to help new contributors get started.",
        ))

    if not documentation.license:
        recommendations.append(Recommendation(
            kind=RecommendationKind.WARNING,
            title="Missing License",
            description="Add a license to clarify how others can use your project.",
        ))

    if avg_response_time > SLOW_RESPONSE_DAYS:
        recommendations.append(Recommendation(
            kind=RecommendationKind.WARNING,
            title="Slow Issue Response",
            description=(
                "Consider using issue templates or automated responses "
                "to improve response times."
            ),
        ))

    if not cicd.has_workflows:
        recommendations.append(Recommendation(
            kind=RecommendationKind.INFO,
            title="Add CI/CD",
            description="Set up GitHub Actions for automated testing and deployment.",
        ))

    return recommendations
