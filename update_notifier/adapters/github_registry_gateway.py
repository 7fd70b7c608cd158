from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

import httpx
from packaging.version import Version

from update_notifier.adapters._http import get_json
from update_notifier.ports.registry_gateway import (
    LookupFailure,
    LookupFailureCause,
    RegistryGateway,
    Release,
)
from update_notifier.versions import parse_version

GITHUB_API_URL = "https://api.github.com"
STABLE_DISTRIBUTION_TAG = "latest"

TOKEN_HINT = (
    "Unable to fetch the GitHub releases. "
    "Did you export a GITHUB_TOKEN environment variable?"
)


class GitHubRegistryGateway(RegistryGateway):
    """Reads the release list of an ``owner/repo`` GitHub repository.

    The answer is the highest tagged version, not the most recently
    published one, so a backport released after a major version never
    hides it.
    """

    def __init__(
        self,
        repository: str,
        *,
        distribution_tag: str = STABLE_DISTRIBUTION_TAG,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
        base_url: str = GITHUB_API_URL,
    ) -> None:
        owner, _, name = repository.partition("/")
        if not owner or not name or "/" in name:
            raise ValueError(f"Expected an 'owner/repo' slug, got {repository!r}")
        self._releases_path = f"/repos/{owner}/{name}/releases"
        self._include_prereleases = distribution_tag != STABLE_DISTRIBUTION_TAG
        self._token = token
        self._client = client
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

    async def fetch_release(self) -> Release | None:
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        releases = await get_json(
            self._base_url,
            self._releases_path,
            headers=headers,
            client=self._client,
            timeout=self._timeout,
            not_found_message=TOKEN_HINT,
        )
        if not isinstance(releases, list):
            raise LookupFailure(cause=LookupFailureCause.INVALID_RESPONSE)

        candidates = list(self._candidates(releases))
        if not candidates:
            return None
        _, tag = max(candidates)
        return Release(version=tag)

    def _candidates(self, releases: Iterable[Any]) -> Iterator[tuple[Version, str]]:
        for release in releases:
            if not isinstance(release, dict) or release.get("draft"):
                continue
            tag = _strip_tag_prefix(release.get("tag_name"))
            version = parse_version(tag) if tag else None
            if version is None:
                continue
            flagged = bool(release.get("prerelease")) or version.is_prerelease
            if flagged and not self._include_prereleases:
                continue
            yield version, tag


def _strip_tag_prefix(tag_name: Any) -> str | None:
    if not isinstance(tag_name, str):
        return None
    tag = tag_name.strip()
    return tag[1:] if tag[:1] in ("v", "V") else tag or None
