"""Documentation and CI/CD existence probes."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Any

from ..errors import ProbeNotFound
from ..models import BuildStatus, CICDStatus, Documentation
from .client import GitHubClient

logger = logging.getLogger(__name__)


async def _exists(probe: Awaitable[Any]) -> bool:
    try:
        await probe
    except ProbeNotFound:
        return False
    return True


async def check_documentation(
    client: GitHubClient, owner: str, repo: str, repo_data: dict[str, Any]
) -> Documentation:
    """Probe README, CONTRIBUTING.md, CODE_OF_CONDUCT.md and the license.

    Missing files come back as False; other upstream failures propagate.
    The wiki flag is read from the repository payload already fetched.
    """
    documentation = Documentation(
        readme=await _exists(client.get_readme(owner, repo)),
        contributing=await _exists(client.get_content(owner, repo, "CONTRIBUTING.md")),
        code_of_conduct=await _exists(
            client.get_content(owner, repo, "CODE_OF_CONDUCT.md")
        ),
        license=await _exists(client.get_license(owner, repo)),
        wiki=bool(repo_data.get("has_wiki")),
    )
    logger.debug("%s/%s: documentation %s", owner, repo, documentation)
    return documentation


async def check_cicd(client: GitHubClient, owner: str, repo: str) -> CICDStatus:
    try:
        workflows = await client.list_workflows(owner, repo)
    except ProbeNotFound:
        logger.info("%s/%s: Actions not available", owner, repo)
        return CICDStatus()

    if not workflows or workflows.get("total_count", 0) == 0:
        return CICDStatus()

    runs = await client.list_workflow_runs(owner, repo, per_page=1)
    latest = runs[0] if runs else {}
    return CICDStatus(
        has_workflows=True,
        last_build=latest.get("updated_at"),
        build_status=BuildStatus.from_conclusion(latest.get("conclusion")),
    )
