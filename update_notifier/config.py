from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from update_notifier.errors import ConfigurationError

ONE_DAY_MS = 24 * 60 * 60 * 1000
DEFAULT_DISTRIBUTION_TAG = "latest"
DEFAULT_LOOKUP_TIMEOUT_SECONDS = 30.0


class NotifierConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    package_name: str = Field(min_length=1)
    package_version: str = Field(min_length=1)
    update_check_interval_ms: int = ONE_DAY_MS
    distribution_tag: str = DEFAULT_DISTRIBUTION_TAG
    allow_notify_in_package_manager_script: bool = False
    registry: Literal["pypi", "github"] = "pypi"
    github_repository: str | None = None
    registry_url: str | None = None
    lookup_timeout_seconds: float = Field(default=DEFAULT_LOOKUP_TIMEOUT_SECONDS, gt=0)

    @model_validator(mode="after")
    def _check_github_repository(self) -> NotifierConfig:
        if self.registry == "github":
            owner, _, name = (self.github_repository or "").partition("/")
            if not owner or not name or "/" in name:
                raise ValueError(
                    "github_repository must be an 'owner/repo' slug for the github registry"
                )
        return self

    @property
    def schedules_checks(self) -> bool:
        return self.update_check_interval_ms >= 0

    @classmethod
    def from_options(
        cls, options: Mapping[str, Any] | None = None, /, **kwargs: Any
    ) -> NotifierConfig:
        """Build a config, accepting the ``pkg={"name", "version"}`` shorthand.

        Raises ``ConfigurationError`` when the package identity is missing or
        any option is invalid.
        """
        values = {**(options or {}), **kwargs}
        pkg = values.pop("pkg", None) or {}
        if not isinstance(pkg, Mapping):
            raise ConfigurationError("pkg must be a mapping with name and version")

        values["package_name"] = pkg.get("name") or values.get("package_name")
        values["package_version"] = pkg.get("version") or values.get("package_version")
        if not values["package_name"] or not values["package_version"]:
            raise ConfigurationError("package name and package version are required")

        try:
            return cls.model_validate(
                {key: value for key, value in values.items() if value is not None}
            )
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc
