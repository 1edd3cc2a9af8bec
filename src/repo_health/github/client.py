"""GitHub REST API client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import DEFAULT_API_URL
from ..errors import ProbeNotFound, UpstreamFetchError
from .rate_limit import RateLimitMonitor

logger = logging.getLogger(__name__)


class GitHubClient:
    """Async GitHub REST API client.

    Every call is issued once; failures surface as ``UpstreamFetchError``.
    Probe helpers turn a 404 into ``ProbeNotFound``.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        verify_ssl: bool = True,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url or DEFAULT_API_URL,
            headers=headers,
            timeout=30.0,
            verify=verify_ssl,
        )
        self._rate_limit = RateLimitMonitor()

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _get(
        self, url: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        await self._rate_limit.wait_if_needed()
        try:
            response = await self._client.get(url, params=params)
            self._rate_limit.update(response)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise UpstreamFetchError(
                f"GitHub API returned {status} for {url}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamFetchError(f"Could not reach GitHub API: {exc}") from exc
        return response

    @staticmethod
    def _decode(response: httpx.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamFetchError(f"GitHub API returned invalid JSON for {url}") from exc

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._get(url, params)
        if response.status_code == 204:
            return None
        return self._decode(response, url)

    async def _probe(self, url: str) -> Any:
        """GET a resource whose absence is an answer rather than a failure."""
        try:
            return await self._get_json(url)
        except UpstreamFetchError as exc:
            if exc.status_code == 404:
                raise ProbeNotFound(url) from exc
            raise

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        return await self._get_json(f"/repos/{owner}/{repo}")

    async def list_contributors(
        self, owner: str, repo: str, per_page: int = 10
    ) -> list[dict[str, Any]]:
        """List the top contributors (single page). Empty repos yield 204."""
        data = await self._get_json(
            f"/repos/{owner}/{repo}/contributors", params={"per_page": per_page}
        )
        return data if isinstance(data, list) else []

    async def get_commit_activity(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """Weekly commit totals for the last year.

        GitHub answers 202 while the statistics are being computed; that is
        reported as an empty series instead of polling.
        """
        url = f"/repos/{owner}/{repo}/stats/commit_activity"
        response = await self._get(url)
        if response.status_code in (202, 204):
            logger.info(
                "%s/%s: commit activity not available yet (HTTP %d)",
                owner,
                repo,
                response.status_code,
            )
            return []
        data = self._decode(response, url)
        return data if isinstance(data, list) else []

    async def list_issues(
        self,
        owner: str,
        repo: str,
        state: str = "open",
        since: str | None = None,
        per_page: int = 100,
    ) -> list[dict[str, Any]]:
        """List issues (excluding pull requests), one page of up to ``per_page``."""
        params: dict[str, Any] = {"state": state, "per_page": per_page}
        if since:
            params["since"] = since
        results = await self._get_json(f"/repos/{owner}/{repo}/issues", params=params)
        # GitHub issues API includes PRs; filter them out
        return [i for i in results or [] if "pull_request" not in i]

    async def list_releases(
        self, owner: str, repo: str, per_page: int = 10
    ) -> list[dict[str, Any]]:
        data = await self._get_json(
            f"/repos/{owner}/{repo}/releases", params={"per_page": per_page}
        )
        return data if isinstance(data, list) else []

    async def get_readme(self, owner: str, repo: str) -> dict[str, Any]:
        return await self._probe(f"/repos/{owner}/{repo}/readme")

    async def get_content(self, owner: str, repo: str, path: str) -> Any:
        return await self._probe(f"/repos/{owner}/{repo}/contents/{path}")

    async def get_license(self, owner: str, repo: str) -> dict[str, Any]:
        return await self._probe(f"/repos/{owner}/{repo}/license")

    async def list_workflows(self, owner: str, repo: str) -> dict[str, Any]:
        return await self._probe(f"/repos/{owner}/{repo}/actions/workflows")

    async def list_workflow_runs(
        self, owner: str, repo: str, per_page: int = 1
    ) -> list[dict[str, Any]]:
        data = await self._get_json(
            f"/repos/{owner}/{repo}/actions/runs", params={"per_page": per_page}
        )
        return (data or {}).get("workflow_runs", [])
