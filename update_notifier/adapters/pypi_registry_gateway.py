from __future__ import annotations

import httpx
from packaging.utils import (
    InvalidSdistFilename,
    InvalidWheelFilename,
    canonicalize_name,
    parse_sdist_filename,
    parse_wheel_filename,
)
from packaging.version import InvalidVersion, Version

from update_notifier.adapters._http import get_json
from update_notifier.ports.registry_gateway import (
    LookupFailure,
    LookupFailureCause,
    RegistryGateway,
    Release,
)

PYPI_BASE_URL = "https://pypi.org"
STABLE_DISTRIBUTION_TAG = "latest"


class PyPIRegistryGateway(RegistryGateway):
    def __init__(
        self,
        project_name: str,
        *,
        distribution_tag: str = STABLE_DISTRIBUTION_TAG,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
        base_url: str = PYPI_BASE_URL,
    ) -> None:
        self._project_name = canonicalize_name(project_name)
        self._include_prereleases = distribution_tag != STABLE_DISTRIBUTION_TAG
        self._client = client
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

    async def fetch_release(self) -> Release | None:
        data = await get_json(
            self._base_url,
            f"/simple/{self._project_name}/",
            headers={"Accept": "application/vnd.pypi.simple.v1+json"},
            client=self._client,
            timeout=self._timeout,
            not_found_message=f"Package {self._project_name} was not found on PyPI.",
        )
        if not isinstance(data, dict):
            raise LookupFailure(cause=LookupFailureCause.INVALID_RESPONSE)

        installable = _installable_versions(data.get("files") or [])
        candidates: list[tuple[Version, str]] = []
        for raw in data.get("versions") or []:
            try:
                version = Version(raw)
            except (InvalidVersion, TypeError):
                continue
            if version not in installable:
                continue
            if version.is_prerelease and not self._include_prereleases:
                continue
            candidates.append((version, raw))

        if not candidates:
            return None

        _, latest = max(candidates)
        return Release(version=latest)


def _installable_versions(files: list[dict]) -> set[Version]:
    # a version counts only if at least one of its files is not yanked
    versions: set[Version] = set()
    for file in files:
        if file.get("yanked"):
            continue
        if version := _version_from_filename(file.get("filename") or ""):
            versions.add(version)
    return versions


def _version_from_filename(filename: str) -> Version | None:
    try:
        if filename.endswith(".whl"):
            return parse_wheel_filename(filename)[1]
        if filename.endswith((".tar.gz", ".zip")):
            return parse_sdist_filename(filename)[1]
    except (InvalidWheelFilename, InvalidSdistFilename, InvalidVersion):
        return None
    return None
