"""Out-of-process registry lookup.

The coordinator launches this module detached with the serialized
``NotifierConfig`` as its only argument. It performs one lookup, records
the outcome in the package's state file and exits; the parent never hears
back except through that file.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
import logging
import os
import subprocess
import sys
import time

from pydantic import ValidationError

from update_notifier.adapters import (
    FileSystemCheckStateRepository,
    build_registry_gateway,
)
from update_notifier.config import NotifierConfig
from update_notifier.errors import StoreAccessError
from update_notifier.paths import LOG_FILE
from update_notifier.ports.check_state_repository import (
    LAST_UPDATE_CHECK_KEY,
    UPDATE_KEY,
    CheckStateRepository,
    PendingUpdate,
)
from update_notifier.ports.registry_gateway import (
    LookupFailure,
    LookupFailureCause,
    RegistryGateway,
)
from update_notifier.versions import release_type

logger = logging.getLogger(__name__)

DEBUG_ENV_VAR = "UPDATE_NOTIFIER_DEBUG"


def _current_timestamp_ms() -> int:
    return int(time.time() * 1000)


async def lookup_update(
    config: NotifierConfig, gateway: RegistryGateway
) -> PendingUpdate:
    release = await gateway.fetch_release()
    if release is None:
        raise LookupFailure(cause=LookupFailureCause.NOT_FOUND)

    return PendingUpdate(
        latest=release.version,
        current=config.package_version,
        type=release_type(config.package_version, release.version)
        or config.distribution_tag,
        name=config.package_name,
    )


async def run_check(
    config: NotifierConfig,
    repository: CheckStateRepository,
    gateway: RegistryGateway,
    get_current_timestamp_ms: Callable[[], int] = _current_timestamp_ms,
) -> PendingUpdate | None:
    """Look up the newest release once and persist it if it is an upgrade.

    Nothing is written unless the lookup succeeds; the timestamp and the
    pending result land in a single write.
    """
    try:
        async with asyncio.timeout(config.lookup_timeout_seconds):
            update = await lookup_update(config, gateway)
    except TimeoutError as exc:
        raise LookupFailure(cause=LookupFailureCause.TIMEOUT) from exc

    values: dict[str, object] = {LAST_UPDATE_CHECK_KEY: get_current_timestamp_ms()}
    is_upgrade = release_type(config.package_version, update.latest) is not None
    if is_upgrade:
        values[UPDATE_KEY] = update.to_record()
    repository.set_many(values)

    return update if is_upgrade else None


# run with -m; it is never imported by the package itself
WORKER_MODULE = "update_notifier._worker"


def spawn_detached_check(config: NotifierConfig) -> None:
    command = [
        sys.executable,
        "-m",
        WORKER_MODULE,
        config.model_dump_json(),
    ]
    options: dict[str, object] = {
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
        "close_fds": True,
    }
    if sys.platform == "win32":
        options["creationflags"] = (
            subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
        )
    else:
        options["start_new_session"] = True

    try:
        subprocess.Popen(command, **options)
    except OSError:
        logger.debug("Could not start the background update check.", exc_info=True)


def _configure_logging() -> None:
    if not os.getenv(DEBUG_ENV_VAR):
        return
    try:
        LOG_FILE.path.parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(
            filename=LOG_FILE.path,
            level=logging.DEBUG,
            format="%(asctime)s %(process)d %(name)s %(levelname)s %(message)s",
        )
    except OSError:
        return


def main(argv: Sequence[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    _configure_logging()

    if len(args) != 1:
        logger.debug("Expected the serialized config as the only argument.")
        return 1

    try:
        config = NotifierConfig.model_validate_json(args[0])
    except ValidationError:
        logger.debug("Invalid notifier config received.", exc_info=True)
        return 1

    try:
        repository = FileSystemCheckStateRepository(config.package_name)
        update = asyncio.run(
            run_check(config, repository, build_registry_gateway(config))
        )
    except (LookupFailure, StoreAccessError, ValueError):
        logger.debug(
            "Background update check for %s failed.",
            config.package_name,
            exc_info=True,
        )
        return 1

    logger.debug(
        "Background update check for %s finished: %s",
        config.package_name,
        update.latest if update else "up to date",
    )
    return 0

