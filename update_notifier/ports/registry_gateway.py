from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from update_notifier.errors import UpdateNotifierError


@dataclass(frozen=True, slots=True)
class Release:
    """Newest release a registry offers for the configured distribution tag."""

    version: str


class LookupFailureCause(StrEnum):
    TOO_MANY_REQUESTS = "too_many_requests"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    REQUEST_FAILED = "request_failed"
    ERROR_RESPONSE = "error_response"
    INVALID_RESPONSE = "invalid_response"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"

    def describe(self) -> str:
        return _DESCRIPTIONS.get(self, _DESCRIPTIONS[LookupFailureCause.UNKNOWN])


_DESCRIPTIONS = {
    LookupFailureCause.TOO_MANY_REQUESTS: "The registry is rate limiting update checks.",
    LookupFailureCause.FORBIDDEN: "The registry refused the update check.",
    LookupFailureCause.NOT_FOUND: "No release of the package was found in the registry.",
    LookupFailureCause.REQUEST_FAILED: "Network error while checking for updates.",
    LookupFailureCause.ERROR_RESPONSE: "The registry answered the update check with an error.",
    LookupFailureCause.INVALID_RESPONSE: "The registry sent a response that could not be read.",
    LookupFailureCause.TIMEOUT: "Timed out while checking for updates.",
    LookupFailureCause.UNKNOWN: "Could not tell whether an update is available.",
}


class LookupFailure(UpdateNotifierError):
    """A registry lookup that produced no usable answer.

    ``user_message`` carries a registry-specific hint when the adapter has
    one; otherwise the exception text falls back to the cause's description.
    """

    def __init__(
        self, *, cause: LookupFailureCause, message: str | None = None
    ) -> None:
        self.cause = cause
        self.user_message = message
        super().__init__(message or cause.describe())


class RegistryGateway(Protocol):
    async def fetch_release(self) -> Release | None: ...
