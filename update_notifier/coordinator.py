from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
import re
import time
from typing import Any

from rich import box
from rich.align import Align
from rich.errors import MarkupError
from rich.markup import escape
from rich.padding import Padding
from rich.panel import Panel
from rich.text import Text

from update_notifier.adapters import (
    FileSystemCheckStateRepository,
    build_registry_gateway,
)
from update_notifier.background_check import lookup_update, spawn_detached_check
from update_notifier.config import NotifierConfig
from update_notifier.context import RuntimeContext
from update_notifier.emitter import DeferredEmitter
from update_notifier.errors import StoreAccessError
from update_notifier.gate import should_notify
from update_notifier.paths import CONFIG_HOME
from update_notifier.ports.check_state_repository import (
    LAST_UPDATE_CHECK_KEY,
    OPT_OUT_KEY,
    UPDATE_KEY,
    CheckState,
    CheckStateRepository,
    PendingUpdate,
)
from update_notifier.ports.registry_gateway import RegistryGateway

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = (
    "Update available [dim]{current_version}[/dim] → [green]{latest_version}[/green]"
    " \nRun [cyan]{update_command}[/cyan] to update"
)

DEFAULT_BOX_OPTIONS: dict[str, Any] = {
    "padding": 1,
    "margin": 1,
    "align": "center",
    "border_style": "yellow",
    "box": box.ROUNDED,
}

RepositoryFactory = Callable[[str, Mapping[str, Any]], CheckStateRepository]
Spawner = Callable[[NotifierConfig], None]


def _current_timestamp_ms() -> int:
    return int(time.time() * 1000)


_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def _fill_template(template: str, values: Mapping[str, str]) -> str:
    # unknown names, positional fields and stray braces are left as written
    return _PLACEHOLDER.sub(lambda match: values.get(match[1], match[0]), template)


class UpdateNotifier:
    def __init__(
        self,
        config: NotifierConfig | Mapping[str, Any],
        *,
        context: RuntimeContext | None = None,
        gateway: RegistryGateway | None = None,
        spawner: Spawner | None = None,
        emitter: DeferredEmitter | None = None,
        repository_factory: RepositoryFactory | None = None,
        get_current_timestamp_ms: Callable[[], int] = _current_timestamp_ms,
    ) -> None:
        self.config = (
            config
            if isinstance(config, NotifierConfig)
            else NotifierConfig.from_options(config)
        )
        self.context = context or RuntimeContext.from_process()
        self.disabled = self.context.disables_checks
        self.update: PendingUpdate | None = None
        self.store: CheckStateRepository | None = None
        self._store_access_reported = False

        self._gateway = gateway
        self._spawner = spawner or spawn_detached_check
        self._emitter = emitter or DeferredEmitter()
        self._get_current_timestamp_ms = get_current_timestamp_ms

        if self.disabled:
            return

        factory = repository_factory or (
            lambda name, defaults: FileSystemCheckStateRepository(name, defaults)
        )
        try:
            # start the interval clock now so the first run never checks
            self.store = factory(
                self.config.package_name,
                {OPT_OUT_KEY: False, LAST_UPDATE_CHECK_KEY: get_current_timestamp_ms()},
            )
        except StoreAccessError:
            logger.debug("Update check state is not accessible.", exc_info=True)
            self._report_store_access()

    @property
    def package_name(self) -> str:
        return self.config.package_name

    @property
    def package_version(self) -> str:
        return self.config.package_version

    def check(self) -> None:
        if self.store is None or self.disabled:
            return

        try:
            state = CheckState.from_document(self.store.all)
            if state.opt_out:
                return

            if state.pending_update is not None:
                # the cached "current" is whatever was running when the check ran
                self.update = PendingUpdate(
                    latest=state.pending_update.latest,
                    current=self.package_version,
                    type=state.pending_update.type,
                    name=state.pending_update.name or self.package_name,
                )
                self.store.delete(UPDATE_KEY)

            if not self.config.schedules_checks:
                return

            now = self._get_current_timestamp_ms()
            if now - state.last_update_check < self.config.update_check_interval_ms:
                return

            self.store.set(LAST_UPDATE_CHECK_KEY, now)
        except StoreAccessError:
            logger.debug("Update check state became inaccessible.", exc_info=True)
            self._report_store_access()
            return

        self._spawner(self.config)

    async def fetch_info(self) -> PendingUpdate:
        gateway = self._gateway or build_registry_gateway(self.config)
        return await lookup_update(self.config, gateway)

    def notify(
        self,
        *,
        defer: bool = True,
        message: str | None = None,
        is_global: bool | None = None,
        is_uv_tool: bool | None = None,
        box_options: Mapping[str, Any] | None = None,
    ) -> UpdateNotifier:
        update = self.update
        if update is None or not should_notify(
            is_interactive=self.context.is_interactive,
            is_package_manager_script=self.context.is_package_manager_script,
            allow_in_package_manager_script=self.config.allow_notify_in_package_manager_script,
            update=update,
        ):
            return self

        update_command = self.install_command(
            is_global=self.context.is_installed_globally if is_global is None else is_global,
            is_uv_tool=self.context.is_uv_tool if is_uv_tool is None else is_uv_tool,
        )
        text = _fill_template(
            message or DEFAULT_TEMPLATE,
            {
                "package_name": escape(self.package_name),
                "current_version": escape(update.current),
                "latest_version": escape(update.latest),
                "update_command": escape(update_command),
            },
        )
        self._emitter.emit(
            _boxed(text, {**DEFAULT_BOX_OPTIONS, **(box_options or {})}), defer=defer
        )
        return self

    def install_command(self, *, is_global: bool, is_uv_tool: bool) -> str:
        if is_uv_tool:
            return f"uv tool upgrade {self.package_name}"
        if is_global:
            return f"pipx upgrade {self.package_name}"
        if self.context.has_uv_project:
            return f"uv add --upgrade {self.package_name}"
        return f"pip install --upgrade {self.package_name}"

    def opt_out(self) -> None:
        if self.store is not None:
            self.store.set(OPT_OUT_KEY, True)

    def opt_in(self) -> None:
        if self.store is not None:
            self.store.set(OPT_OUT_KEY, False)

    def _report_store_access(self) -> None:
        if self._store_access_reported:
            return
        self._store_access_reported = True
        self._emitter.emit(self._store_access_notice(), defer=True)

    def _store_access_notice(self) -> Padding:
        text = (
            f"[yellow] {escape(self.package_name)} update check failed [/yellow]\n"
            " Try running with [cyan]sudo[/cyan] or get access\n"
            " to the local update config store via\n"
            f"[cyan] sudo chown -R $USER:$(id -gn $USER) {escape(str(CONFIG_HOME.path))} [/cyan]"
        )
        return _boxed(text, {"align": "center", "box": box.ROUNDED})


def _boxed(markup: str, options: Mapping[str, Any]) -> Padding:
    align = options.get("align", "left")
    try:
        content = Text.from_markup(markup, justify=align)
    except MarkupError:
        logger.debug("Showing the notice without markup.", exc_info=True)
        content = Text(markup, justify=align)
    panel = Panel(
        content,
        box=options.get("box", box.SQUARE),
        border_style=options.get("border_style", "none"),
        padding=options.get("padding", 0),
        expand=False,
    )
    return Padding(Align(panel, align=align), options.get("margin", 0))


def create_update_notifier(
    options: NotifierConfig | Mapping[str, Any] | None = None, /, **kwargs: Any
) -> UpdateNotifier:
    """Construct a notifier and schedule a background check in one call."""
    config = (
        options
        if isinstance(options, NotifierConfig)
        else NotifierConfig.from_options(options, **kwargs)
    )
    notifier = UpdateNotifier(config)
    notifier.check()
    return notifier
