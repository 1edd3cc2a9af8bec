"""Rich-based terminal dashboard with JSON support."""

from __future__ import annotations

import io
import json

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import BuildStatus, RecommendationKind, RepositoryAnalysis

_KIND_STYLES = {
    RecommendationKind.ERROR: "bold red",
    RecommendationKind.WARNING: "bold yellow",
    RecommendationKind.INFO: "bold blue",
}

_BUILD_STYLES = {
    BuildStatus.PASSING: "green",
    BuildStatus.FAILING: "red",
    BuildStatus.UNKNOWN: "dim",
}


def _format_number(n: int) -> str:
    return f"{n:,}"


def _format_date(iso: str) -> str:
    """Format an ISO 8601 date string to YYYY-MM-DD for display."""
    return iso[:10] if len(iso) >= 10 else iso


def _make_bar(percentage: float, width: int = 20) -> str:
    filled = round(min(percentage, 100) / 100 * width)
    return "█" * filled + "░" * (width - filled)


def _make_inline_bar(count: int, max_count: int, width: int = 15) -> str:
    if max_count == 0:
        return ""
    filled = round(count / max_count * width)
    return "█" * filled


def _score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


def _check(flag: bool) -> str:
    return "[green]✓[/green]" if flag else "[red]✗[/red]"


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console().print(f"Saved to {output_file}")


def render_report(
    analysis: RepositoryAnalysis,
    output_file: str | None = None,
    cached: bool = False,
) -> None:
    """Render a RepositoryAnalysis to the terminal using rich."""
    if output_file:
        string_io = io.StringIO()
        console = Console(file=string_io, force_terminal=False, width=120)
    else:
        console = Console()

    repo = analysis.repository
    subtitle = f"\n{repo.description}" if repo.description else ""
    console.print(Panel(
        Text(f"Repository Health: {repo.full_name}{subtitle}", justify="center"),
        style="bold cyan",
    ))
    if cached and repo.last_analyzed:
        console.print(
            f"[dim]Cached analysis from {repo.last_analyzed:%Y-%m-%d %H:%M} UTC[/dim]"
        )
    console.print()

    # Scores
    console.print("[bold]Health Scores[/bold]")
    scores = Table(show_header=True, header_style="bold")
    scores.add_column("Metric")
    scores.add_column("Bar")
    scores.add_column("Score", justify="right")
    for label, value in [
        ("Overall", analysis.health_score),
        ("Code Quality", analysis.code_quality),
        ("Community", analysis.community),
        ("Maintenance", analysis.maintenance),
    ]:
        style = _score_style(value)
        scores.add_row(label, f"[{style}]{_make_bar(value)}[/{style}]", str(value))
    console.print(scores)
    console.print()

    # Summary
    console.print("[bold]Summary[/bold]")
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("label", style="dim")
    summary.add_column("value", style="bold")
    summary.add_row("Language", repo.language or "-")
    summary.add_row("Stars", _format_number(repo.stars))
    summary.add_row("Forks", _format_number(repo.forks))
    summary.add_row("Watchers", _format_number(repo.watchers))
    summary.add_row("Open Issues", _format_number(analysis.issue_metrics.open_issues))
    summary.add_row(
        "Closed Issues (30d)", _format_number(analysis.issue_metrics.closed_issues)
    )
    summary.add_row("Avg Response Time", f"{analysis.issue_metrics.avg_response_time}d")
    console.print(summary)
    console.print()

    # Commit activity
    if analysis.commit_activity:
        console.print("[bold]Commit Activity (12 months)[/bold]")
        activity = Table(show_header=True, header_style="bold")
        activity.add_column("Month")
        activity.add_column("Commits", justify="right")
        activity.add_column("Bar")
        max_commits = max(m.commits for m in analysis.commit_activity)
        for m in analysis.commit_activity:
            activity.add_row(
                m.month,
                _format_number(m.commits),
                _make_inline_bar(m.commits, max_commits),
            )
        console.print(activity)
        console.print()

    # Contributors
    if analysis.contributors:
        console.print(f"[bold]Top Contributors (top {len(analysis.contributors)})[/bold]")
        contrib_table = Table(show_header=True, header_style="bold")
        contrib_table.add_column("#", justify="right")
        contrib_table.add_column("Username")
        contrib_table.add_column("Contributions", justify="right")
        contrib_table.add_column("Share", justify="right")
        for i, c in enumerate(analysis.contributors, 1):
            contrib_table.add_row(
                str(i), c.login, _format_number(c.contributions), f"{c.percentage}%"
            )
        console.print(contrib_table)
        console.print()

    # Documentation, CI/CD and releases
    docs = analysis.documentation
    console.print("[bold]Project Health[/bold]")
    health = Table(show_header=False, box=None, padding=(0, 2))
    health.add_column("label", style="dim")
    health.add_column("value")
    health.add_row("README", _check(docs.readme))
    health.add_row("Contributing Guide", _check(docs.contributing))
    health.add_row("Code of Conduct", _check(docs.code_of_conduct))
    health.add_row("License", _check(docs.license))
    health.add_row("Wiki", _check(docs.wiki))
    cicd = analysis.cicd
    build_style = _BUILD_STYLES[cicd.build_status]
    health.add_row("CI/CD Workflows", _check(cicd.has_workflows))
    health.add_row(
        "Build Status", f"[{build_style}]{cicd.build_status.value}[/{build_style}]"
    )
    if cicd.last_build:
        health.add_row("Last Build", _format_date(cicd.last_build))
    health.add_row("Latest Release", analysis.releases.latest or "-")
    health.add_row("Release Frequency", analysis.releases.frequency.value)
    health.add_row("Releases", _format_number(analysis.releases.total))
    console.print(health)
    console.print()

    # Recommendations
    if analysis.recommendations:
        console.print("[bold]Recommendations[/bold]")
        for r in analysis.recommendations:
            style = _KIND_STYLES[r.kind]
            console.print(f"  [{style}]{r.kind.value.upper()}[/{style}] {r.title}")
            console.print(f"    [dim]{r.description}[/dim]")
        console.print()

    if output_file:
        _write_to_file(string_io.getvalue(), output_file)


def render_json(analysis: RepositoryAnalysis, output_file: str | None = None) -> None:
    """Render a RepositoryAnalysis as JSON."""
    content = json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content)
