"""Tests for the GitLab HTTP facade."""

from typing import TYPE_CHECKING

import httpx
import pytest
from httpx import Response

from gitlab_mr.http_facade import GitLabAPIError, GitLabHttpFacade
from gitlab_mr.models import MergeRequest
from tests.factories import build_merge_request_payload

if TYPE_CHECKING:
    from respx import MockRouter

    from gitlab_mr.config import ClientSettings

API_BASE = "https://gitlab.example.com/api/v4"


@pytest.mark.asyncio
async def test_requests_carry_authentication_headers(
    settings: "ClientSettings",
    respx_mock: "MockRouter",
) -> None:
    """Every request should send the private token and accept JSON."""
    route = respx_mock.put(f"{API_BASE}/projects/1/merge_requests/3").mock(
        return_value=Response(200, json=build_merge_request_payload(3)),
    )

    async with GitLabHttpFacade(settings) as facade:
        merge_request = await facade.put("/projects/1/merge_requests/3", {"title": "t"}, MergeRequest)

    assert merge_request.iid == 3
    headers = route.calls.last.request.headers
    assert headers["PRIVATE-TOKEN"] == "token"
    assert headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_paged_list_keeps_query_and_adds_paging(
    settings: "ClientSettings",
    respx_mock: "MockRouter",
) -> None:
    """Paging parameters are merged with the query string built by the caller."""
    route = respx_mock.get(f"{API_BASE}/merge_requests")
    route.side_effect = [
        Response(200, json=[build_merge_request_payload(1)], headers={"X-Next-Page": "2"}),
        Response(200, json=[build_merge_request_payload(2)]),
    ]

    async with GitLabHttpFacade(settings) as facade:
        items = await facade.get_paged_list("/merge_requests?state=opened", MergeRequest)

    assert [item.iid for item in items] == [1, 2]
    second = route.calls[1].request.url.params
    assert second["state"] == "opened"
    assert second["per_page"] == "2"
    assert second["page"] == "2"


@pytest.mark.asyncio
async def test_paged_list_rejects_non_list_payload(
    settings: "ClientSettings",
    respx_mock: "MockRouter",
) -> None:
    """A listing answered with an object is reported as an API error."""
    respx_mock.get(f"{API_BASE}/merge_requests").mock(return_value=Response(200, json={"id": 1}))

    async with GitLabHttpFacade(settings) as facade:
        with pytest.raises(GitLabAPIError, match="Unexpected response payload"):
            await facade.get_paged_list("/merge_requests", MergeRequest)


@pytest.mark.asyncio
async def test_error_message_prefers_server_error_field(
    settings: "ClientSettings",
    respx_mock: "MockRouter",
) -> None:
    """GitLab's error field is used when no message is present."""
    respx_mock.delete(f"{API_BASE}/projects/1/merge_requests/2").mock(
        return_value=Response(403, json={"error": "insufficient_scope"}),
    )

    async with GitLabHttpFacade(settings) as facade:
        with pytest.raises(GitLabAPIError) as excinfo:
            await facade.delete("/projects/1/merge_requests/2")

    assert excinfo.value.status_code == 403
    assert excinfo.value.message == "GitLab API returned 403: insufficient_scope"


@pytest.mark.asyncio
async def test_error_falls_back_to_plain_body(
    settings: "ClientSettings",
    respx_mock: "MockRouter",
) -> None:
    """Non-JSON error bodies are reported verbatim."""
    respx_mock.put(f"{API_BASE}/projects/1/merge_requests/2/merge").mock(
        return_value=Response(502, text="Bad Gateway from proxy"),
    )

    async with GitLabHttpFacade(settings) as facade:
        with pytest.raises(GitLabAPIError) as excinfo:
            await facade.put("/projects/1/merge_requests/2/merge", {"merge_commit_message": "m"}, MergeRequest)

    assert excinfo.value.status_code == 502
    assert excinfo.value.response_body == "Bad Gateway from proxy"


@pytest.mark.asyncio
async def test_invalid_json_raises_api_error(
    settings: "ClientSettings",
    respx_mock: "MockRouter",
) -> None:
    """Successful responses with undecodable bodies are API errors."""
    respx_mock.post(f"{API_BASE}/projects/1/merge_requests").mock(
        return_value=Response(201, text="<html></html>", headers={"Content-Type": "text/html"}),
    )

    async with GitLabHttpFacade(settings) as facade:
        with pytest.raises(GitLabAPIError, match="invalid JSON payload"):
            await facade.post("/projects/1/merge_requests", {"title": "t"}, MergeRequest)


@pytest.mark.asyncio
async def test_payload_mismatch_raises_api_error(
    settings: "ClientSettings",
    respx_mock: "MockRouter",
) -> None:
    """Payloads that do not describe the expected model are API errors."""
    respx_mock.post(f"{API_BASE}/projects/1/merge_requests").mock(
        return_value=Response(201, json={"id": 1}),
    )

    async with GitLabHttpFacade(settings) as facade:
        with pytest.raises(GitLabAPIError, match="does not match MergeRequest") as excinfo:
            await facade.post("/projects/1/merge_requests", {"title": "t"}, MergeRequest)

    assert excinfo.value.status_code == 201


@pytest.mark.asyncio
async def test_transport_errors_propagate_unchanged(
    settings: "ClientSettings",
    respx_mock: "MockRouter",
) -> None:
    """Network failures are not wrapped or retried."""
    route = respx_mock.get(f"{API_BASE}/merge_requests").mock(
        side_effect=httpx.ConnectError("connection refused"),
    )

    async with GitLabHttpFacade(settings) as facade:
        with pytest.raises(httpx.ConnectError):
            await facade.get_paged_list("/merge_requests", MergeRequest)

    assert route.call_count == 1


@pytest.mark.asyncio
async def test_paged_list_keeps_every_filter_on_every_page(
    settings: "ClientSettings",
    respx_mock: "MockRouter",
) -> None:
    """Filters built into the query, including repeated keys, survive paging."""
    route = respx_mock.get(f"{API_BASE}/projects/group%2Frepo/merge_requests")
    route.side_effect = [
        Response(200, json=[build_merge_request_payload(4)], headers={"X-Next-Page": "2"}),
        Response(200, json=[build_merge_request_payload(8)]),
    ]

    async with GitLabHttpFacade(settings) as facade:
        items = await facade.get_paged_list(
            "/projects/group%2Frepo/merge_requests?state=merged&labels=bug%2Cui&iids%5B%5D=4&iids%5B%5D=8",
            MergeRequest,
        )

    assert [item.iid for item in items] == [4, 8]
    for call, page in zip(route.calls, [None, "2"], strict=True):
        params = call.request.url.params
        assert params["state"] == "merged"
        assert params["labels"] == "bug,ui"
        assert params.get_list("iids[]") == ["4", "8"]
        assert params["per_page"] == "2"
        assert params.get("page") == page


@pytest.mark.asyncio
async def test_paged_list_item_mismatch_reports_status(
    settings: "ClientSettings",
    respx_mock: "MockRouter",
) -> None:
    """A malformed listing item carries the status of the page it came from."""
    respx_mock.get(f"{API_BASE}/merge_requests").mock(
        return_value=Response(203, json=[build_merge_request_payload(1), {"id": 2}]),
    )

    async with GitLabHttpFacade(settings) as facade:
        with pytest.raises(GitLabAPIError, match="does not match MergeRequest") as excinfo:
            await facade.get_paged_list("/merge_requests?state=opened", MergeRequest)

    assert excinfo.value.status_code == 203
