"""PDF report export: HTML from a jinja2 template, printed by headless Chromium."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .errors import RenderError
from .models import BuildStatus, RepositoryAnalysis

logger = logging.getLogger(__name__)

PAGE_MARGIN = "20mm"

_BUILD_BADGES = {
    BuildStatus.PASSING: "success",
    BuildStatus.FAILING: "danger",
    BuildStatus.UNKNOWN: "warning",
}

_env = Environment(
    loader=PackageLoader("repo_health", "templates"),
    autoescape=select_autoescape(["html"]),
)


def health_description(score: int) -> str:
    if score >= 90:
        return "Excellent repository health with strong community and maintenance"
    if score >= 80:
        return "Very good repository health with minor areas for improvement"
    if score >= 70:
        return "Good repository health with some recommendations"
    if score >= 60:
        return "Fair repository health, several areas need attention"
    return "Repository health needs significant improvement"


def render_html(analysis: RepositoryAnalysis, generated_at: datetime | None = None) -> str:
    template = _env.get_template("report.html")
    return template.render(
        analysis=analysis,
        repo=analysis.repository,
        docs=analysis.documentation,
        cicd=analysis.cicd,
        build_badge=_BUILD_BADGES[analysis.cicd.build_status],
        health_description=health_description(analysis.health_score),
        generated_at=generated_at or datetime.now(timezone.utc),
    )


def report_filename(analysis: RepositoryAnalysis) -> str:
    return f"repository-health-{analysis.repository.name}.pdf"


async def generate_pdf(analysis: RepositoryAnalysis) -> bytes:
    """Render the report as an A4 PDF. Failures raise ``RenderError``."""
    try:
        html = render_html(analysis)
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True)
            try:
                page = await browser.new_page()
                await page.set_content(html, wait_until="networkidle")
                pdf = await page.pdf(
                    format="A4",
                    print_background=True,
                    margin={
                        "top": PAGE_MARGIN,
                        "right": PAGE_MARGIN,
                        "bottom": PAGE_MARGIN,
                        "left": PAGE_MARGIN,
                    },
                )
            finally:
                await browser.close()
    except (PlaywrightError, TemplateError) as exc:
        logger.error("PDF generation failed for %s: %s", analysis.repository.full_name, exc)
        raise RenderError(f"Failed to generate PDF report: {exc}") from exc
    logger.info("%s: rendered %d byte PDF", analysis.repository.full_name, len(pdf))
    return pdf
