from __future__ import annotations

from collections.abc import Callable
import os
from pathlib import Path


class GlobalPath:
    def __init__(self, resolver: Callable[[], Path]) -> None:
        self._resolver = resolver

    @property
    def path(self) -> Path:
        return self._resolver()


def _get_config_home() -> Path:
    if config_home := os.getenv("UPDATE_NOTIFIER_CONFIG_HOME"):
        return Path(config_home).expanduser().resolve()
    if xdg_config_home := os.getenv("XDG_CONFIG_HOME"):
        return Path(xdg_config_home).expanduser() / "configstore"
    return Path.home() / ".config" / "configstore"


CONFIG_HOME = GlobalPath(_get_config_home)
LOG_FILE = GlobalPath(lambda: CONFIG_HOME.path / "update-notifier.log")


def state_file_name(package_name: str) -> str:
    # scoped names such as "@scope/pkg" must stay a single path component
    return f"update-notifier-{package_name.replace('/', '-')}.json"
