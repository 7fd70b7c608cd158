from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
import respx

from update_notifier.adapters.pypi_registry_gateway import PyPIRegistryGateway
from update_notifier.ports.registry_gateway import (
    LookupFailure,
    LookupFailureCause,
    Release,
)

PYPI_API_URL = "https://pypi.org"


def _simple_index(versions: list[str], files: list[tuple[str, bool]]) -> dict:
    return {
        "versions": versions,
        "files": [
            {"filename": filename, "yanked": yanked} for filename, yanked in files
        ],
    }


async def _fetch(handler: Callable[[httpx.Request], httpx.Response], **kwargs):
    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url=PYPI_API_URL) as client:
        gateway = PyPIRegistryGateway(project_name="pkg-tool", client=client, **kwargs)
        return await gateway.fetch_release()


@pytest.mark.asyncio
async def test_retrieves_nothing_when_no_versions_are_available() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=httpx.codes.OK, json=_simple_index([], []))

    assert await _fetch(handler) is None


@pytest.mark.asyncio
async def test_retrieves_the_latest_non_yanked_version() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Accept"] == "application/vnd.pypi.simple.v1+json"
        assert request.url.path == "/simple/pkg-tool/"
        return httpx.Response(
            status_code=httpx.codes.OK,
            json=_simple_index(
                ["1.0.0", "1.0.1", "1.0.2", "1.0.3"],
                [
                    ("pkg_tool-1.0.0-py3-none-any.whl", False),
                    ("pkg_tool-1.0.1-py3-none-any.whl", False),
                    ("pkg_tool-1.0.2.tar.gz", False),
                    ("pkg_tool-1.0.3-py3-none-any.whl", True),
                ],
            ),
        )

    assert await _fetch(handler) == Release(version="1.0.2")


@pytest.mark.asyncio
async def test_canonicalizes_the_project_name_in_the_request_path() -> None:
    seen_paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_paths.append(request.url.path)
        return httpx.Response(status_code=httpx.codes.OK, json=_simple_index([], []))

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url=PYPI_API_URL) as client:
        await PyPIRegistryGateway("Pkg_Tool", client=client).fetch_release()

    assert seen_paths == ["/simple/pkg-tool/"]


@pytest.mark.asyncio
async def test_skips_prereleases_on_the_latest_channel() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=httpx.codes.OK,
            json=_simple_index(
                ["1.0.0", "2.0.0b1"],
                [
                    ("pkg_tool-1.0.0-py3-none-any.whl", False),
                    ("pkg_tool-2.0.0b1-py3-none-any.whl", False),
                ],
            ),
        )

    assert await _fetch(handler) == Release(version="1.0.0")
    assert await _fetch(handler, distribution_tag="next") == Release(version="2.0.0b1")


@pytest.mark.asyncio
async def test_retrieves_nothing_when_only_yanked_versions_are_available() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=httpx.codes.OK,
            json=_simple_index(["1.0.0"], [("pkg_tool-1.0.0-py3-none-any.whl", True)]),
        )

    assert await _fetch(handler) is None


@pytest.mark.asyncio
async def test_does_not_match_versions_by_substring() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=httpx.codes.OK,
            json=_simple_index(["1.0.1"], [("pkg_tool-1.0.10-py3-none-any.whl", False)]),
        )

    assert await _fetch(handler) is None


def _raise_connect_timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectTimeout("boom", request=request)


@pytest.mark.parametrize(
    ("handler", "expected_cause"),
    [
        (
            lambda _: httpx.Response(status_code=httpx.codes.NOT_FOUND),
            LookupFailureCause.NOT_FOUND,
        ),
        (
            lambda _: httpx.Response(status_code=httpx.codes.FORBIDDEN),
            LookupFailureCause.FORBIDDEN,
        ),
        (
            lambda _: httpx.Response(status_code=httpx.codes.TOO_MANY_REQUESTS),
            LookupFailureCause.TOO_MANY_REQUESTS,
        ),
        (
            lambda _: httpx.Response(status_code=httpx.codes.INTERNAL_SERVER_ERROR),
            LookupFailureCause.ERROR_RESPONSE,
        ),
        (
            lambda _: httpx.Response(status_code=httpx.codes.OK, content=b"{not-json"),
            LookupFailureCause.INVALID_RESPONSE,
        ),
        (
            lambda _: httpx.Response(status_code=httpx.codes.OK, json=["1.0.0"]),
            LookupFailureCause.INVALID_RESPONSE,
        ),
        (_raise_connect_timeout, LookupFailureCause.REQUEST_FAILED),
    ],
)
@pytest.mark.asyncio
async def test_raises_lookup_failure_when_fetching_fails(
    handler: Callable[[httpx.Request], httpx.Response],
    expected_cause: LookupFailureCause,
) -> None:
    with pytest.raises(LookupFailure) as excinfo:
        await _fetch(handler)

    assert excinfo.value.cause == expected_cause


@pytest.mark.asyncio
async def test_opens_its_own_client_when_none_is_given(
    respx_mock: respx.MockRouter,
) -> None:
    route = respx_mock.get("https://mirror.test/simple/pkg-tool/").mock(
        return_value=httpx.Response(
            200,
            json=_simple_index(["0.3.0"], [("pkg_tool-0.3.0.tar.gz", False)]),
        )
    )

    gateway = PyPIRegistryGateway("pkg-tool", base_url="https://mirror.test/")
    release = await gateway.fetch_release()

    assert route.called
    assert release == Release(version="0.3.0")
