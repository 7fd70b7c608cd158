from __future__ import annotations


class UpdateNotifierError(Exception):
    pass


class ConfigurationError(UpdateNotifierError):
    pass


class StoreAccessError(UpdateNotifierError):
    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot access update check state at {path}: {reason}")
