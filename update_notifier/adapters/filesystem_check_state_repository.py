from __future__ import annotations

from collections.abc import Mapping
import json
import os
from pathlib import Path
import tempfile
from typing import Any

from update_notifier.errors import StoreAccessError
from update_notifier.paths import CONFIG_HOME, state_file_name
from update_notifier.ports.check_state_repository import CheckStateRepository


class FileSystemCheckStateRepository(CheckStateRepository):
    """One JSON document per package, rewritten whole on every change.

    Writes go through a temporary file in the same directory followed by
    ``os.replace`` so a reader (or an interrupted background check) never
    sees a torn document.
    """

    def __init__(
        self,
        package_name: str,
        defaults: Mapping[str, Any] | None = None,
        base_path: Path | str | None = None,
    ) -> None:
        self._base_path = Path(base_path) if base_path is not None else CONFIG_HOME.path
        self._path = self._base_path / state_file_name(package_name)

        # written back even when unchanged, so an unwritable store fails here
        self._write({**(defaults or {}), **self._read()})

    @property
    def path(self) -> Path:
        return self._path

    @property
    def all(self) -> dict[str, Any]:
        return self._read()

    def get(self, key: str) -> Any | None:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        self.set_many({key: value})

    def set_many(self, values: Mapping[str, Any]) -> None:
        document = self._read()
        document.update(values)
        self._write(document)

    def delete(self, key: str) -> None:
        document = self._read()
        if key not in document:
            return
        del document[key]
        self._write(document)

    def _read(self) -> dict[str, Any]:
        try:
            content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StoreAccessError(self._path, exc.strerror or str(exc)) from exc

        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            return {}

        return data if isinstance(data, dict) else {}

    def _write(self, document: Mapping[str, Any]) -> None:
        temp_path: Path | None = None
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                suffix=".json.tmp",
                dir=str(self._base_path),
                delete=False,
                encoding="utf-8",
            ) as f:
                temp_path = Path(f.name)
                f.write(json.dumps(document, indent="\t"))
                f.flush()
                os.fsync(f.fileno())

            os.replace(temp_path, self._path)
        except OSError as exc:
            raise StoreAccessError(self._path, exc.strerror or str(exc)) from exc
        finally:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
