from __future__ import annotations

__version__ = "1.0.0"

from update_notifier.adapters import (  # noqa: E402
    FileSystemCheckStateRepository,
    GitHubRegistryGateway,
    PyPIRegistryGateway,
    build_registry_gateway,
)
from update_notifier.background_check import (  # noqa: E402
    run_check,
    spawn_detached_check,
)
from update_notifier.config import ONE_DAY_MS, NotifierConfig  # noqa: E402
from update_notifier.context import RuntimeContext  # noqa: E402
from update_notifier.coordinator import (  # noqa: E402
    UpdateNotifier,
    create_update_notifier,
)
from update_notifier.emitter import DeferredEmitter, ProcessLifecycle  # noqa: E402
from update_notifier.errors import (  # noqa: E402
    ConfigurationError,
    StoreAccessError,
    UpdateNotifierError,
)
from update_notifier.gate import should_notify  # noqa: E402
from update_notifier.ports.check_state_repository import (  # noqa: E402
    CheckState,
    CheckStateRepository,
    PendingUpdate,
)
from update_notifier.ports.registry_gateway import (  # noqa: E402
    LookupFailure,
    LookupFailureCause,
    RegistryGateway,
    Release,
)

__all__ = [
    "ONE_DAY_MS",
    "CheckState",
    "CheckStateRepository",
    "ConfigurationError",
    "DeferredEmitter",
    "FileSystemCheckStateRepository",
    "GitHubRegistryGateway",
    "LookupFailure",
    "LookupFailureCause",
    "NotifierConfig",
    "PendingUpdate",
    "ProcessLifecycle",
    "PyPIRegistryGateway",
    "RegistryGateway",
    "Release",
    "RuntimeContext",
    "StoreAccessError",
    "UpdateNotifier",
    "UpdateNotifierError",
    "__version__",
    "build_registry_gateway",
    "create_update_notifier",
    "run_check",
    "should_notify",
    "spawn_detached_check",
]
