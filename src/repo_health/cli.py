"""CLI entrypoint for repo-health."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import NoReturn

import click

from . import __version__
from .config import Settings
from .errors import InvalidRepositoryUrl, RenderError, UpstreamFetchError
from .storage import MemoryStorage
from .urls import parse_repository_url


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _describe_upstream_error(exc: UpstreamFetchError) -> str:
    if exc.status_code == 404:
        return "Repository not found. Check the owner/repo name."
    if exc.status_code in (401, 403):
        return "Authentication failed or rate limit exceeded. Check --token or $GITHUB_TOKEN."
    return str(exc)


def _build_service(ctx: click.Context, show_progress: bool = False):
    from .orchestrator import AnalysisService

    return AnalysisService(
        MemoryStorage(), settings=ctx.obj, show_progress=show_progress
    )


@click.group()
@click.option(
    "--token",
    envvar=["GITHUB_TOKEN", "GITHUB_API_KEY"],
    default=None,
    show_envvar=True,
    help="GitHub personal access token",
)
@click.option(
    "--api-url",
    default=None,
    help="GitHub Enterprise API base URL",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    default=False,
    help="Disable SSL verification (self-signed certs)",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def main(
    ctx: click.Context,
    token: str | None,
    api_url: str | None,
    no_ssl_verify: bool,
    verbose: bool,
) -> None:
    """Score the health of a GitHub repository.

    \b
    Examples:
      repo-health analyze https://github.com/pallets/click
      repo-health analyze https://github.com/pallets/click --format json --output report.json
      repo-health pdf https://github.com/pallets/click --output click.pdf
      repo-health serve --port 5000
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = Settings.from_env().override(
        token=token,
        api_url=api_url,
        verify_ssl=False if no_ssl_verify else None,
    )


@main.command()
@click.argument("url")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    show_default=True,
    help="Output format",
)
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(),
    help="Save output to file instead of stdout",
)
@click.pass_context
def analyze(
    ctx: click.Context, url: str, output_format: str, output_file: str | None
) -> None:
    """Analyze a repository and print its health report."""
    from .renderer import render_json, render_report

    service = _build_service(ctx, show_progress=output_format == "table")
    try:
        result = asyncio.run(service.analyze(url))
    except InvalidRepositoryUrl as exc:
        _fail(str(exc))
    except UpstreamFetchError as exc:
        _fail(_describe_upstream_error(exc))

    if output_format == "json":
        render_json(result.report, output_file=output_file)
    else:
        render_report(result.report, output_file=output_file, cached=result.cached)


@main.command()
@click.argument("url")
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(),
    help="PDF path (default: repository-health-<name>.pdf)",
)
@click.pass_context
def pdf(ctx: click.Context, url: str, output_file: str | None) -> None:
    """Analyze a repository and export the report as PDF."""
    from .pdf import generate_pdf, report_filename

    service = _build_service(ctx, show_progress=True)
    try:
        result = asyncio.run(service.analyze(url))
        content = asyncio.run(generate_pdf(result.report))
    except InvalidRepositoryUrl as exc:
        _fail(str(exc))
    except UpstreamFetchError as exc:
        _fail(_describe_upstream_error(exc))
    except RenderError as exc:
        _fail(str(exc))

    path = output_file or report_filename(result.report)
    with open(path, "wb") as f:
        f.write(content)
    click.echo(f"Saved to {path}")


@main.command()
@click.argument("url")
@click.pass_context
def validate(ctx: click.Context, url: str) -> None:
    """Check that URL points at a repository."""
    try:
        owner, repo = parse_repository_url(url, host=ctx.obj.host)
    except InvalidRepositoryUrl as exc:
        _fail(str(exc))
    click.echo(f"{owner}/{repo}")


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=5000, show_default=True, help="Port to listen on")
@click.option("--debug", is_flag=True, default=False, help="Run Flask in debug mode")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, debug: bool) -> None:
    """Run the HTTP API."""
    from .web import create_app

    app = create_app(_build_service(ctx))
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":  # pragma: no cover
    main()
