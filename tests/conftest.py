from __future__ import annotations

from collections.abc import Callable
import io
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from tests.adapters.fake_check_state_repository import FakeCheckStateRepository
from tests.adapters.fake_lifecycle import FakeLifecycle
from tests.adapters.fake_registry_gateway import FakeRegistryGateway
from update_notifier.config import NotifierConfig
from update_notifier.context import RuntimeContext
from update_notifier.coordinator import UpdateNotifier
from update_notifier.emitter import DeferredEmitter

CURRENT_TIMESTAMP_MS = 1_765_278_683_000


@pytest.fixture(autouse=True)
def config_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> Path:
    config_home = tmp_path_factory.mktemp("configstore")
    monkeypatch.setenv("UPDATE_NOTIFIER_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=100, color_system=None)


@pytest.fixture
def lifecycle() -> FakeLifecycle:
    return FakeLifecycle()


class SpawnRecorder:
    def __init__(self) -> None:
        self.calls: list[NotifierConfig] = []

    def __call__(self, config: NotifierConfig) -> None:
        self.calls.append(config)


@pytest.fixture
def spawner() -> SpawnRecorder:
    return SpawnRecorder()


@pytest.fixture
def build_notifier(
    console: Console, lifecycle: FakeLifecycle, spawner: SpawnRecorder
) -> Callable[..., UpdateNotifier]:
    def _build(
        *,
        repository: FakeCheckStateRepository | None = None,
        context: RuntimeContext | None = None,
        gateway: FakeRegistryGateway | None = None,
        now: int = CURRENT_TIMESTAMP_MS,
        **options: Any,
    ) -> UpdateNotifier:
        config = {"package_name": "pkgtool", "package_version": "1.0.0", **options}
        resolved_repository = repository or FakeCheckStateRepository()

        def factory(name: str, defaults: dict[str, Any]) -> FakeCheckStateRepository:
            for key, value in defaults.items():
                resolved_repository.document.setdefault(key, value)
            return resolved_repository

        return UpdateNotifier(
            config,
            context=context or RuntimeContext(is_interactive=True),
            gateway=gateway or FakeRegistryGateway(),
            spawner=spawner,
            emitter=DeferredEmitter(console=console, lifecycle=lifecycle),
            repository_factory=factory,
            get_current_timestamp_ms=lambda: now,
        )

    return _build


def console_output(console: Console) -> str:
    assert isinstance(console.file, io.StringIO)
    return console.file.getvalue()
