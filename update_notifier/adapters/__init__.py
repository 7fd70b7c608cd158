from __future__ import annotations

import os

from update_notifier.adapters.filesystem_check_state_repository import (
    FileSystemCheckStateRepository,
)
from update_notifier.adapters.github_registry_gateway import GitHubRegistryGateway
from update_notifier.adapters.pypi_registry_gateway import PyPIRegistryGateway
from update_notifier.config import NotifierConfig
from update_notifier.ports.registry_gateway import RegistryGateway


def build_registry_gateway(config: NotifierConfig) -> RegistryGateway:
    extra = {"base_url": config.registry_url} if config.registry_url else {}
    if config.registry == "github":
        return GitHubRegistryGateway(
            config.github_repository or "",
            distribution_tag=config.distribution_tag,
            token=os.getenv("GITHUB_TOKEN"),
            **extra,
        )
    return PyPIRegistryGateway(
        config.package_name, distribution_tag=config.distribution_tag, **extra
    )


__all__ = [
    "FileSystemCheckStateRepository",
    "GitHubRegistryGateway",
    "PyPIRegistryGateway",
    "build_registry_gateway",
]
