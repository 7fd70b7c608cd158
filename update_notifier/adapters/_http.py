from __future__ import annotations

from typing import Any

import httpx

from update_notifier.ports.registry_gateway import LookupFailure, LookupFailureCause

USER_AGENT = "update-notifier"

_STATUS_CAUSES = {
    httpx.codes.TOO_MANY_REQUESTS: LookupFailureCause.TOO_MANY_REQUESTS,
    httpx.codes.FORBIDDEN: LookupFailureCause.FORBIDDEN,
    httpx.codes.NOT_FOUND: LookupFailureCause.NOT_FOUND,
}


async def get_json(
    base_url: str,
    path: str,
    *,
    headers: dict[str, str],
    client: httpx.AsyncClient | None,
    timeout: float,
    not_found_message: str | None = None,
) -> Any:
    """GET ``path`` and decode the body, mapping every failure to ``LookupFailure``."""
    headers = {"User-Agent": USER_AGENT, **headers}
    try:
        if client is not None:
            response = await client.get(
                f"{base_url}{path}", headers=headers, timeout=timeout
            )
        else:
            async with httpx.AsyncClient(base_url=base_url, timeout=timeout) as owned:
                response = await owned.get(path, headers=headers)
    except httpx.RequestError as exc:
        raise LookupFailure(cause=LookupFailureCause.REQUEST_FAILED) from exc

    if _rate_limit_exhausted(response):
        raise LookupFailure(cause=LookupFailureCause.TOO_MANY_REQUESTS)

    if cause := _STATUS_CAUSES.get(response.status_code):
        message = not_found_message if cause is LookupFailureCause.NOT_FOUND else None
        raise LookupFailure(cause=cause, message=message)

    if response.is_error:
        raise LookupFailure(cause=LookupFailureCause.ERROR_RESPONSE)

    try:
        return response.json()
    except ValueError as exc:
        raise LookupFailure(cause=LookupFailureCause.INVALID_RESPONSE) from exc


def _rate_limit_exhausted(response: httpx.Response) -> bool:
    # GitHub answers 403 with this header once the hourly quota is spent
    return response.headers.get("X-RateLimit-Remaining") == "0"
