"""Data models for repo-health.

Field names are snake_case in Python; ``to_dict``/``from_dict`` convert to and
from the camelCase JSON shape served by the HTTP API and stored in snapshots.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp as returned by GitHub (``...Z``)."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class BuildStatus(str, Enum):
    PASSING = "passing"
    FAILING = "failing"
    UNKNOWN = "unknown"

    @classmethod
    def from_conclusion(cls, conclusion: str | None) -> BuildStatus:
        """Map a workflow run conclusion to a build status."""
        if conclusion == "success":
            return cls.PASSING
        if conclusion == "failure":
            return cls.FAILING
        return cls.UNKNOWN


class RecommendationKind(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ReleaseCadence(str, Enum):
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUALLY = "Annually"
    IRREGULAR = "Irregular"


@dataclass
class Repository:
    full_name: str
    owner: str
    name: str
    description: str | None = None
    language: str | None = None
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    open_issues: int = 0
    id: int = 0
    last_analyzed: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "fullName": self.full_name,
            "owner": self.owner,
            "name": self.name,
            "description": self.description,
            "language": self.language,
            "stars": self.stars,
            "forks": self.forks,
            "watchers": self.watchers,
            "openIssues": self.open_issues,
            "lastAnalyzed": format_timestamp(self.last_analyzed),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Repository:
        full_name = data["fullName"]
        owner, _, name = full_name.partition("/")
        return cls(
            full_name=full_name,
            owner=data.get("owner") or owner,
            name=data.get("name") or name,
            description=data.get("description"),
            language=data.get("language"),
            stars=data.get("stars") or 0,
            forks=data.get("forks") or 0,
            watchers=data.get("watchers") or 0,
            open_issues=data.get("openIssues") or 0,
            id=data.get("id") or 0,
            last_analyzed=parse_timestamp(data.get("lastAnalyzed")),
        )


@dataclass
class Analysis:
    """Immutable scoring snapshot; ``analysis_data`` is the serialized report."""

    repository_id: int
    health_score: int
    code_quality: int
    community: int
    maintenance: int
    analysis_data: str
    id: int = 0
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "repositoryId": self.repository_id,
            "healthScore": self.health_score,
            "codeQuality": self.code_quality,
            "community": self.community,
            "maintenance": self.maintenance,
            "analysisData": self.analysis_data,
            "createdAt": format_timestamp(self.created_at),
        }


@dataclass
class MonthlyCommits:
    month: str
    commits: int


@dataclass
class ContributorShare:
    login: str
    avatar_url: str
    contributions: int
    percentage: float


@dataclass
class IssueMetrics:
    avg_response_time: float = 0
    open_issues: int = 0
    closed_issues: int = 0


@dataclass
class Documentation:
    readme: bool = False
    contributing: bool = False
    code_of_conduct: bool = False
    license: bool = False
    wiki: bool = False


@dataclass
class CICDStatus:
    has_workflows: bool = False
    last_build: str | None = None
    build_status: BuildStatus = BuildStatus.UNKNOWN


@dataclass
class DependencySummary:
    """Placeholder counters; dependency manifests are not parsed."""

    total: int = 0
    outdated: int = 0
    vulnerable: int = 0


@dataclass
class ReleaseSummary:
    latest: str | None = None
    frequency: ReleaseCadence = ReleaseCadence.IRREGULAR
    total: int = 0


@dataclass
class Recommendation:
    kind: RecommendationKind
    title: str
    description: str


@dataclass
class RepositoryAnalysis:
    repository: Repository
    health_score: int
    code_quality: int
    community: int
    maintenance: int
    commit_activity: list[MonthlyCommits] = field(default_factory=list)
    contributors: list[ContributorShare] = field(default_factory=list)
    issue_metrics: IssueMetrics = field(default_factory=IssueMetrics)
    documentation: Documentation = field(default_factory=Documentation)
    cicd: CICDStatus = field(default_factory=CICDStatus)
    dependencies: DependencySummary = field(default_factory=DependencySummary)
    releases: ReleaseSummary = field(default_factory=ReleaseSummary)
    recommendations: list[Recommendation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "repository": self.repository.to_dict(),
            "healthScore": self.health_score,
            "codeQuality": self.code_quality,
            "community": self.community,
            "maintenance": self.maintenance,
            "commitActivity": [
                {"month": m.month, "commits": m.commits} for m in self.commit_activity
            ],
            "contributors": [
                {
                    "login": c.login,
                    "avatar_url": c.avatar_url,
                    "contributions": c.contributions,
                    "percentage": c.percentage,
                }
                for c in self.contributors
            ],
            "issueMetrics": {
                "avgResponseTime": self.issue_metrics.avg_response_time,
                "openIssues": self.issue_metrics.open_issues,
                "closedIssues": self.issue_metrics.closed_issues,
            },
            "documentation": {
                "readme": self.documentation.readme,
                "contributing": self.documentation.contributing,
                "codeOfConduct": self.documentation.code_of_conduct,
                "license": self.documentation.license,
                "wiki": self.documentation.wiki,
            },
            "cicd": {
                "hasWorkflows": self.cicd.has_workflows,
                "lastBuild": self.cicd.last_build,
                "buildStatus": self.cicd.build_status.value,
            },
            "dependencies": {
                "total": self.dependencies.total,
                "outdated": self.dependencies.outdated,
                "vulnerable": self.dependencies.vulnerable,
            },
            "releases": {
                "latest": self.releases.latest,
                "frequency": self.releases.frequency.value,
                "total": self.releases.total,
            },
            "recommendations": [
                {"type": r.kind.value, "title": r.title, "description": r.description}
                for r in self.recommendations
            ],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RepositoryAnalysis:
        issues = data.get("issueMetrics") or {}
        docs = data.get("documentation") or {}
        cicd = data.get("cicd") or {}
        deps = data.get("dependencies") or {}
        releases = data.get("releases") or {}
        return cls(
            repository=Repository.from_dict(data["repository"]),
            health_score=data["healthScore"],
            code_quality=data["codeQuality"],
            community=data["community"],
            maintenance=data["maintenance"],
            commit_activity=[
                MonthlyCommits(month=m["month"], commits=m["commits"])
                for m in data.get("commitActivity") or []
            ],
            contributors=[
                ContributorShare(
                    login=c["login"],
                    avatar_url=c.get("avatar_url", ""),
                    contributions=c["contributions"],
                    percentage=c["percentage"],
                )
                for c in data.get("contributors") or []
            ],
            issue_metrics=IssueMetrics(
                avg_response_time=issues.get("avgResponseTime", 0),
                open_issues=issues.get("openIssues", 0),
                closed_issues=issues.get("closedIssues", 0),
            ),
            documentation=Documentation(
                readme=bool(docs.get("readme")),
                contributing=bool(docs.get("contributing")),
                code_of_conduct=bool(docs.get("codeOfConduct")),
                license=bool(docs.get("license")),
                wiki=bool(docs.get("wiki")),
            ),
            cicd=CICDStatus(
                has_workflows=bool(cicd.get("hasWorkflows")),
                last_build=cicd.get("lastBuild"),
                build_status=BuildStatus(cicd.get("buildStatus", "unknown")),
            ),
            dependencies=DependencySummary(
                total=deps.get("total", 0),
                outdated=deps.get("outdated", 0),
                vulnerable=deps.get("vulnerable", 0),
            ),
            releases=ReleaseSummary(
                latest=releases.get("latest"),
                frequency=ReleaseCadence(releases.get("frequency", "Irregular")),
                total=releases.get("total", 0),
            ),
            recommendations=[
                Recommendation(
                    kind=RecommendationKind(r["type"]),
                    title=r["title"],
                    description=r["description"],
                )
                for r in data.get("recommendations") or []
            ],
        )

    @classmethod
    def from_json(cls, payload: str) -> RepositoryAnalysis:
        return cls.from_dict(json.loads(payload))
