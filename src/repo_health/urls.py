"""Repository URL resolution."""

from __future__ import annotations

from urllib.parse import urlsplit

from .config import DEFAULT_HOST
from .errors import InvalidRepositoryUrl


def parse_repository_url(url: str, host: str = DEFAULT_HOST) -> tuple[str, str]:
    """Extract ``(owner, repo)`` from a repository URL like https://github.com/o/r.

    Extra path segments (``/tree/main``) are ignored and a trailing ``.git``
    is dropped. Case is preserved.
    """
    parts = urlsplit(url.strip())
    if parts.scheme not in ("http", "https") or host not in parts.netloc.lower():
        raise InvalidRepositoryUrl(f"Invalid GitHub repository URL: {url!r}")
    segments = [s for s in parts.path.split("/") if s]
    if len(segments) < 2:
        raise InvalidRepositoryUrl(f"Invalid GitHub repository URL: {url!r}")
    owner, repo = segments[0], segments[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        raise InvalidRepositoryUrl(f"Invalid GitHub repository URL: {url!r}")
    return owner, repo


def is_valid_repository_url(url: str, host: str = DEFAULT_HOST) -> bool:
    try:
        parse_repository_url(url, host=host)
    except InvalidRepositoryUrl:
        return False
    return True
