"""Best-effort checks of the environment a CLI tool is running in.

Every function takes the values it inspects as arguments so the caller
decides where they come from; only ``RuntimeContext.from_process`` feeds
them the real process state.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

CI_ENVIRONMENT_VARIABLES = (
    "CI",
    "CONTINUOUS_INTEGRATION",
    "BUILD_NUMBER",
    "RUN_ID",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "CIRCLECI",
    "TRAVIS",
    "JENKINS_URL",
    "BUILDKITE",
    "TF_BUILD",
    "TEAMCITY_VERSION",
    "APPVEYOR",
    "CODEBUILD_BUILD_ID",
    "BITBUCKET_BUILD_NUMBER",
    "DRONE",
    "SEMAPHORE",
)

PACKAGE_MANAGER_SCRIPT_VARIABLES = (
    "npm_lifecycle_event",
    "UV_RUN_RECURSION_DEPTH",
    "POETRY_ACTIVE",
    "HATCH_ENV_ACTIVE",
    "PDM_RUN_CWD",
)

PACKAGE_MANAGER_USER_AGENTS = ("npm/", "yarn/", "pnpm/")


def is_ci(environ: Mapping[str, str]) -> bool:
    if environ.get("CI", "").lower() == "false":
        return False
    return any(environ.get(name) for name in CI_ENVIRONMENT_VARIABLES)


def is_package_manager_script(environ: Mapping[str, str]) -> bool:
    user_agent = environ.get("npm_config_user_agent", "")
    if user_agent.startswith(PACKAGE_MANAGER_USER_AGENTS):
        return True
    return any(environ.get(name) for name in PACKAGE_MANAGER_SCRIPT_VARIABLES)


def is_uv_tool(prefix: Path) -> bool:
    # uv tool environments live in <uv data dir>/tools/<name>
    return prefix.parent.name == "tools" and "uv" in prefix.parent.parent.name


def is_installed_globally(prefix: Path) -> bool:
    # pipx environments live in <pipx home>/venvs/<name>
    if prefix.parent.name == "venvs" and "pipx" in prefix.parts:
        return True
    return is_uv_tool(prefix)


def has_uv_project(cwd: Path) -> bool:
    return (cwd / "uv.lock").is_file()
