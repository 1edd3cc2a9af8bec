"""HTTP API (Flask)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import InternalServerError

from .errors import InvalidRepositoryUrl, RenderError, RepoHealthError
from .models import RepositoryAnalysis
from .orchestrator import AnalysisService
from .pdf import generate_pdf, report_filename
from .urls import parse_repository_url

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 10

PdfGenerator = Callable[[RepositoryAnalysis], Awaitable[bytes]]


def _request_url() -> str:
    body = request.get_json(silent=True) or {}
    url = body.get("url") if isinstance(body, dict) else None
    if not isinstance(url, str) or not url.strip():
        raise InvalidRepositoryUrl("Request body must contain a repository 'url'")
    return url


def create_app(
    service: AnalysisService, pdf_generator: PdfGenerator = generate_pdf
) -> Flask:
    """Build the API around an explicitly constructed service."""
    app = Flask(__name__)

    @app.errorhandler(InternalServerError)
    def internal_error(exc: InternalServerError):
        return jsonify(message="Internal server error"), 500

    @app.post("/api/analyze")
    def analyze():
        try:
            url = _request_url()
            result = asyncio.run(service.analyze(url))
        except RepoHealthError as exc:
            logger.error("Analysis error: %s", exc)
            return jsonify(message=str(exc) or "Failed to analyze repository"), 400
        return Response(result.payload, mimetype="application/json")

    @app.post("/api/generate-pdf")
    def generate_report():
        try:
            body = request.get_json(force=True, silent=True)
            if not isinstance(body, dict):
                raise ValueError("Request body must be a JSON object")
            analysis = RepositoryAnalysis.from_dict(body)
            pdf = asyncio.run(pdf_generator(analysis))
        except (RenderError, AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.error("PDF generation error: %s", exc)
            return jsonify(message="Failed to generate PDF report"), 500
        return Response(
            pdf,
            mimetype="application/pdf",
            headers={
                "Content-Disposition": f'attachment; filename="{report_filename(analysis)}"'
            },
        )

    @app.get("/api/recent-analyses")
    def recent_analyses():
        limit = request.args.get("limit", type=int) or DEFAULT_RECENT_LIMIT
        try:
            analyses = service.recent_analyses(limit)
        except RepoHealthError as exc:
            logger.error("Error fetching recent analyses: %s", exc)
            return jsonify(message="Failed to fetch recent analyses"), 500
        return jsonify([a.to_dict() for a in analyses])

    @app.post("/api/validate-url")
    def validate_url():
        try:
            owner, repo = parse_repository_url(_request_url(), host=service.settings.host)
        except InvalidRepositoryUrl:
            return jsonify(valid=False, message="Invalid GitHub repository URL"), 400
        return jsonify(valid=True, owner=owner, repo=repo)

    return app
