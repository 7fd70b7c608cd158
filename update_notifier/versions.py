from __future__ import annotations

from packaging.version import InvalidVersion, Version


def parse_version(raw: str) -> Version | None:
    try:
        return Version(raw)
    except InvalidVersion:
        pass
    # "1.6.1-jetbrains" style suffixes are not PEP 440, read them as local labels
    try:
        return Version(raw.replace("-", "+"))
    except InvalidVersion:
        return None


def is_newer(latest: str, current: str) -> bool:
    latest_version = parse_version(latest)
    current_version = parse_version(current)
    if latest_version is None or current_version is None:
        return False
    return latest_version > current_version


def release_type(current: str, latest: str) -> str | None:
    """Name the kind of bump between two versions.

    Returns ``"major"``, ``"minor"`` or ``"patch"`` (prefixed with ``"pre"``
    when ``latest`` is a pre-release), ``"prerelease"`` when only the
    pre-release part moved, ``"build"`` for post/dev/local-only changes, and
    ``None`` when ``latest`` is not newer or either side cannot be parsed.
    """
    current_version = parse_version(current)
    latest_version = parse_version(latest)
    if current_version is None or latest_version is None:
        return None
    if latest_version <= current_version:
        return None

    if latest_version.major != current_version.major:
        kind = "major"
    elif latest_version.minor != current_version.minor:
        kind = "minor"
    elif latest_version.micro != current_version.micro:
        kind = "patch"
    elif latest_version.is_prerelease or current_version.is_prerelease:
        return "prerelease"
    else:
        return "build"

    return f"pre{kind}" if latest_version.is_prerelease else kind
