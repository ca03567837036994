"""Async HTTP facade shared by the GitLab resource clients."""

import logging
from types import TracebackType
from typing import Any, Protocol, Self, TYPE_CHECKING, TypeVar, cast
from collections.abc import AsyncIterator, Mapping

import httpx
from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from gitlab_mr.config import ClientSettings

LOGGER = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_NEXT_PAGE_HEADER = "X-Next-Page"
_UNEXPECTED_PAYLOAD_MESSAGE = "Unexpected response payload type"


class GitLabAPIError(RuntimeError):
    """Raised when the GitLab API does not indicate success."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        """Attach HTTP status metadata to the exception instance."""
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

    @classmethod
    def from_response(cls, response: httpx.Response) -> "GitLabAPIError":
        """Build an error from a non-success response."""
        body = response.text
        server_message = _extract_server_message(response) or body or response.reason_phrase
        return cls(
            f"GitLab API returned {response.status_code}: {server_message}",
            status_code=response.status_code,
            response_body=body,
        )


class HttpFacade(Protocol):
    """Capability the resource clients need from the HTTP layer."""

    async def get_paged_list(self, query: str, model: type[ModelT]) -> list[ModelT]:
        """Return every item of a paginated listing."""
        ...

    async def post(self, path: str, body: Mapping[str, Any], model: type[ModelT]) -> ModelT:
        """Create a resource and return the server representation."""
        ...

    async def put(self, path: str, body: Mapping[str, Any], model: type[ModelT]) -> ModelT:
        """Update a resource and return the server representation."""
        ...

    async def delete(self, path: str) -> None:
        """Delete a resource."""
        ...

    async def aclose(self) -> None:
        """Release the underlying connections."""
        ...


class GitLabHttpFacade:
    """Authenticated JSON client for the GitLab REST API built on httpx."""

    def __init__(
        self,
        settings: "ClientSettings",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Configure the HTTP client with authentication headers."""
        self._settings = settings
        headers = {
            "User-Agent": "gitlab-mr-client/0.1",
            "Accept": "application/json",
            "PRIVATE-TOKEN": settings.gitlab_token.get_secret_value(),
        }
        self._client = httpx.AsyncClient(
            base_url=str(settings.gitlab_api_base),
            headers=headers,
            timeout=httpx.Timeout(settings.request_timeout),
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        """Enter the async context manager and return the facade."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Ensure the underlying HTTP client is closed when exiting the context."""
        del exc_type, exc, tb
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: httpx.QueryParams | Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request and raise GitLabAPIError unless the status is 2xx."""
        LOGGER.debug("%s %s params=%s", method, path, params)
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.TransportError as exc:
            LOGGER.error("Transport failure for %s %s: %s", method, path, exc)
            raise
        if not response.is_success:
            error = GitLabAPIError.from_response(response)
            LOGGER.warning("%s %s failed: %s", method, path, error)
            raise error
        return response

    async def paginate(self, query: str) -> AsyncIterator[tuple[int, list[dict[str, Any]]]]:
        """Iterate over every page of a GitLab listing with its status code.

        The query string of ``query`` is kept on every page request; ``per_page``
        and ``page`` are added to it.
        """
        path, _, query_string = query.partition("?")
        params = httpx.QueryParams(query_string).merge({"per_page": self._settings.per_page})
        while True:
            response = await self.request("GET", path, params=params)
            payload = self.parse_json(response)
            if not isinstance(payload, list):
                raise GitLabAPIError(_UNEXPECTED_PAYLOAD_MESSAGE, status_code=response.status_code)
            yield response.status_code, cast("list[dict[str, Any]]", payload)
            next_page = response.headers.get(_NEXT_PAGE_HEADER)
            if not next_page:
                break
            params = params.set("page", next_page)

    async def get_paged_list(self, query: str, model: type[ModelT]) -> list[ModelT]:
        """Collect all pages of a listing into a single ordered list."""
        items = [
            _validate(model, payload, status_code=status_code)
            async for status_code, page in self.paginate(query)
            for payload in page
        ]
        LOGGER.debug("Fetched %s items from %s", len(items), query)
        return items

    async def post(self, path: str, body: Mapping[str, Any], model: type[ModelT]) -> ModelT:
        """POST a JSON body and decode the created resource."""
        response = await self.request("POST", path, json=body)
        return _validate(model, self.parse_json(response), status_code=response.status_code)

    async def put(self, path: str, body: Mapping[str, Any], model: type[ModelT]) -> ModelT:
        """PUT a JSON body and decode the updated resource."""
        response = await self.request("PUT", path, json=body)
        return _validate(model, self.parse_json(response), status_code=response.status_code)

    async def delete(self, path: str) -> None:
        """DELETE a resource; any response body is ignored."""
        await self.request("DELETE", path)

    def parse_json(self, response: httpx.Response) -> Any:
        """Decode a JSON response or raise a GitLabAPIError on failure."""
        try:
            return response.json()
        except ValueError as exc:
            content_type = response.headers.get("Content-Type", "unknown")
            message = (
                "GitLab API returned an invalid JSON payload "
                f"(status {response.status_code}, content-type {content_type})"
            )
            raise GitLabAPIError(
                message,
                status_code=response.status_code,
                response_body=response.text,
            ) from exc


def _validate(model: type[ModelT], payload: Any, *, status_code: int | None = None) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        message = f"GitLab API returned a payload that does not match {model.__name__}: {exc}"
        raise GitLabAPIError(message, status_code=status_code) from exc


def _extract_server_message(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    payload_dict = cast("dict[str, Any]", payload)
    for key in ("message", "error"):
        value = payload_dict.get(key)
        if value:
            return value if isinstance(value, str) else str(value)
    return None
