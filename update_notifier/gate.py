from __future__ import annotations

from update_notifier.ports.check_state_repository import PendingUpdate
from update_notifier.versions import is_newer


def should_notify(
    *,
    is_interactive: bool,
    is_package_manager_script: bool,
    allow_in_package_manager_script: bool,
    update: PendingUpdate | None,
) -> bool:
    if not is_interactive:
        return False
    if is_package_manager_script and not allow_in_package_manager_script:
        return False
    if update is None:
        return False
    return is_newer(update.latest, update.current)
