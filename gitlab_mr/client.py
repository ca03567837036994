"""Entry point wiring the HTTP facade to the resource clients."""

import logging
from types import TracebackType
from typing import Self

from gitlab_mr.config import ClientSettings, load_settings
from gitlab_mr.http_facade import GitLabHttpFacade, HttpFacade
from gitlab_mr.query import MergeRequestsQueryBuilder, ProjectMergeRequestsQueryBuilder
from gitlab_mr.resources.merge_requests import MergeRequestsClient

LOGGER = logging.getLogger(__name__)


class GitLabClient:
    """Asynchronous GitLab client exposing the merge request operations."""

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        facade: HttpFacade | None = None,
    ) -> None:
        """Create the client from settings, or around an existing facade."""
        if facade is None:
            settings = settings or load_settings()
            facade = GitLabHttpFacade(settings)
            LOGGER.debug("GitLab client configured for %s", settings.gitlab_api_base)
        self._facade = facade
        self.merge_requests = MergeRequestsClient(
            facade,
            MergeRequestsQueryBuilder(),
            ProjectMergeRequestsQueryBuilder(),
        )

    async def __aenter__(self) -> Self:
        """Enter the async context manager and return the client."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the facade when exiting the context."""
        del exc_type, exc, tb
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP facade."""
        await self._facade.aclose()
