"""Exception hierarchy for repo-health.

All exceptions inherit from RepoHealthError (single catch point).
"""

from __future__ import annotations


class RepoHealthError(Exception):
    """Base exception for all repo-health errors."""


class InvalidRepositoryUrl(RepoHealthError):
    """The input is not a GitHub repository URL."""


class UpstreamFetchError(RepoHealthError):
    """A GitHub API call failed. Never retried."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProbeNotFound(RepoHealthError):
    """A probed file or feature does not exist upstream."""


class RenderError(RepoHealthError):
    """PDF report generation failed."""
