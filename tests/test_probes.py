"""Tests for documentation and CI/CD probes."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from repo_health.errors import ProbeNotFound, UpstreamFetchError
from repo_health.github.client import GitHubClient
from repo_health.github.probes import check_cicd, check_documentation
from repo_health.models import BuildStatus, CICDStatus


@pytest.fixture
def client():
    client = AsyncMock(spec=GitHubClient)
    client.get_readme.return_value = {"name": "README.md"}
    client.get_content.return_value = {"name": "file"}
    client.get_license.return_value = {"license": {"key": "mit"}}
    client.list_workflows.return_value = {"total_count": 2, "workflows": [{}, {}]}
    client.list_workflow_runs.return_value = [
        {"conclusion": "success", "updated_at": "2024-06-14T10:00:00Z"}
    ]
    return client


@pytest.mark.asyncio
async def test_documentation_all_present(client):
    docs = await check_documentation(client, "o", "r", {"has_wiki": True})
    assert docs.readme and docs.contributing and docs.code_of_conduct and docs.license
    assert docs.wiki is True


@pytest.mark.asyncio
async def test_documentation_missing_contributing_is_false(client):
    async def content(owner, repo, path):
        if path == "CONTRIBUTING.md":
            raise ProbeNotFound(path)
        return {"name": path}

    client.get_content.side_effect = content
    docs = await check_documentation(client, "o", "r", {})
    assert docs.contributing is False
    assert docs.code_of_conduct is True
    assert docs.wiki is False


@pytest.mark.asyncio
async def test_documentation_nothing_found(client):
    client.get_readme.side_effect = ProbeNotFound("readme")
    client.get_content.side_effect = ProbeNotFound("content")
    client.get_license.side_effect = ProbeNotFound("license")
    docs = await check_documentation(client, "o", "r", {"has_wiki": False})
    assert not any([docs.readme, docs.contributing, docs.code_of_conduct, docs.license])


@pytest.mark.asyncio
async def test_documentation_upstream_failure_propagates(client):
    client.get_license.side_effect = UpstreamFetchError("boom", status_code=500)
    with pytest.raises(UpstreamFetchError):
        await check_documentation(client, "o", "r", {})


@pytest.mark.asyncio
async def test_cicd_no_workflows(client):
    client.list_workflows.return_value = {"total_count": 0, "workflows": []}
    cicd = await check_cicd(client, "o", "r")
    assert cicd == CICDStatus(has_workflows=False, last_build=None, build_status=BuildStatus.UNKNOWN)
    client.list_workflow_runs.assert_not_called()


@pytest.mark.asyncio
async def test_cicd_actions_disabled(client):
    client.list_workflows.side_effect = ProbeNotFound("workflows")
    cicd = await check_cicd(client, "o", "r")
    assert cicd.has_workflows is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "conclusion,status",
    [
        ("success", BuildStatus.PASSING),
        ("failure", BuildStatus.FAILING),
        (None, BuildStatus.UNKNOWN),
        ("cancelled", BuildStatus.UNKNOWN),
    ],
)
async def test_cicd_latest_run(client, conclusion, status):
    client.list_workflow_runs.return_value = [
        {"conclusion": conclusion, "updated_at": "2024-06-14T10:00:00Z"}
    ]
    cicd = await check_cicd(client, "o", "r")
    assert cicd.has_workflows is True
    assert cicd.build_status is status
    assert cicd.last_build == "2024-06-14T10:00:00Z"


@pytest.mark.asyncio
async def test_cicd_workflows_without_runs(client):
    client.list_workflow_runs.return_value = []
    cicd = await check_cicd(client, "o", "r")
    assert cicd.has_workflows is True
    assert cicd.last_build is None
    assert cicd.build_status is BuildStatus.UNKNOWN
