from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

OPT_OUT_KEY = "optOut"
LAST_UPDATE_CHECK_KEY = "lastUpdateCheck"
UPDATE_KEY = "update"


@dataclass(frozen=True, slots=True)
class PendingUpdate:
    """Result of a registry lookup, kept in the state file until shown once."""

    latest: str
    current: str
    type: str
    name: str

    def to_record(self) -> dict[str, str]:
        return {
            "latest": self.latest,
            "current": self.current,
            "type": self.type,
            "name": self.name,
        }

    @classmethod
    def from_record(cls, record: Any) -> PendingUpdate | None:
        if not isinstance(record, Mapping):
            return None
        latest = record.get("latest")
        current = record.get("current")
        if not isinstance(latest, str) or not isinstance(current, str):
            return None
        release_type = record.get("type")
        name = record.get("name")
        return cls(
            latest=latest,
            current=current,
            type=release_type if isinstance(release_type, str) else "",
            name=name if isinstance(name, str) else "",
        )


@dataclass(frozen=True, slots=True)
class CheckState:
    opt_out: bool
    last_update_check: int
    pending_update: PendingUpdate | None = None

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> CheckState:
        last_update_check = document.get(LAST_UPDATE_CHECK_KEY)
        return cls(
            opt_out=document.get(OPT_OUT_KEY) is True,
            last_update_check=(
                last_update_check if isinstance(last_update_check, int) else 0
            ),
            pending_update=PendingUpdate.from_record(document.get(UPDATE_KEY)),
        )


class CheckStateRepository(Protocol):
    @property
    def path(self) -> Path: ...
    @property
    def all(self) -> dict[str, Any]: ...
    def get(self, key: str) -> Any | None: ...
    def set(self, key: str, value: Any) -> None: ...
    def set_many(self, values: Mapping[str, Any]) -> None: ...
    def delete(self, key: str) -> None: ...
