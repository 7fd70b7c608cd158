from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import os
from pathlib import Path
import sys
from typing import TextIO

from update_notifier import detection

OPT_OUT_ENV_VAR = "NO_UPDATE_NOTIFIER"
TEST_MODE_ENV_VAR = "PYTEST_CURRENT_TEST"
DISABLE_FLAG = "--no-update-notifier"


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Snapshot of the process-wide state the notifier depends on."""

    opted_out_by_env: bool = False
    is_test_mode: bool = False
    has_disable_flag: bool = False
    is_ci: bool = False
    is_interactive: bool = True
    is_package_manager_script: bool = False
    is_installed_globally: bool = False
    is_uv_tool: bool = False
    has_uv_project: bool = False

    @property
    def disables_checks(self) -> bool:
        return (
            self.opted_out_by_env
            or self.is_test_mode
            or self.has_disable_flag
            or self.is_ci
        )

    @classmethod
    def from_process(
        cls,
        *,
        environ: Mapping[str, str] | None = None,
        argv: Sequence[str] | None = None,
        stdout: TextIO | None = None,
        cwd: Path | None = None,
        prefix: Path | None = None,
    ) -> RuntimeContext:
        environ = os.environ if environ is None else environ
        argv = sys.argv if argv is None else argv
        stdout = sys.stdout if stdout is None else stdout
        prefix = Path(sys.prefix) if prefix is None else prefix
        if cwd is None:
            try:
                cwd = Path.cwd()
            except FileNotFoundError:
                cwd = Path.home()

        return cls(
            opted_out_by_env=OPT_OUT_ENV_VAR in environ,
            is_test_mode=TEST_MODE_ENV_VAR in environ,
            has_disable_flag=DISABLE_FLAG in argv,
            is_ci=detection.is_ci(environ),
            is_interactive=_is_tty(stdout),
            is_package_manager_script=detection.is_package_manager_script(environ),
            is_installed_globally=detection.is_installed_globally(prefix),
            is_uv_tool=detection.is_uv_tool(prefix),
            has_uv_project=detection.has_uv_project(cwd),
        )


def _is_tty(stream: TextIO | None) -> bool:
    if stream is None:
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())
