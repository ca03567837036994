"""Merge request operations against the GitLab REST API."""

import logging
from typing import TYPE_CHECKING

from gitlab_mr.guard import encode_project_id, ensure_not_empty, ensure_positive
from gitlab_mr.models import MergeCommitMessage, MergeRequest
from gitlab_mr.query import (
    MergeRequestsQueryBuilder,
    MergeRequestsQueryOptions,
    ProjectMergeRequestsQueryBuilder,
    ProjectMergeRequestsQueryOptions,
)

if TYPE_CHECKING:
    from gitlab_mr.http_facade import HttpFacade
    from gitlab_mr.models import CreateMergeRequest, ProjectId, UpdateMergeRequest

LOGGER = logging.getLogger(__name__)


class MergeRequestsClient:
    """Retrieve, create, update, accept and delete merge requests.

    Every call must be authenticated. Calls raise ``GitLabAPIError`` when GitLab
    does not indicate success, ``httpx.TransportError`` when the request itself
    fails, and ``ValueError`` for invalid arguments before anything is sent.
    """

    def __init__(
        self,
        facade: "HttpFacade",
        query_builder: MergeRequestsQueryBuilder | None = None,
        project_query_builder: ProjectMergeRequestsQueryBuilder | None = None,
    ) -> None:
        """Bind the client to the HTTP facade and query builders."""
        self._facade = facade
        self._query_builder = query_builder or MergeRequestsQueryBuilder()
        self._project_query_builder = project_query_builder or ProjectMergeRequestsQueryBuilder()

    async def get(
        self,
        project_id: "ProjectId | None" = None,
        options: MergeRequestsQueryOptions | None = None,
    ) -> list[MergeRequest]:
        """Return merge requests of a project, or of every accessible project.

        By default only opened merge requests created by anyone are returned.
        All pages are fetched and concatenated in server order.
        """
        if project_id is None:
            if isinstance(options, ProjectMergeRequestsQueryOptions):
                msg = "ProjectMergeRequestsQueryOptions (iids, project scope) require a project_id"
                raise ValueError(msg)
            query = self._query_builder.build("/merge_requests", options or MergeRequestsQueryOptions())
        else:
            query = self._project_query_builder.build(
                f"{_project_path(project_id)}/merge_requests",
                options or ProjectMergeRequestsQueryOptions(),
            )
        return await self._facade.get_paged_list(query, MergeRequest)

    async def create(self, request: "CreateMergeRequest") -> MergeRequest:
        """Open a merge request and return it as stored by GitLab."""
        path = f"{_project_path(request.project_id)}/merge_requests"
        merge_request = await self._facade.post(path, request.to_payload(), MergeRequest)
        LOGGER.info("Created merge request !%s in project %s", merge_request.iid, request.project_id)
        return merge_request

    async def update(self, request: "UpdateMergeRequest") -> MergeRequest:
        """Apply the set fields of the request and return the updated merge request."""
        path = _merge_request_path(request.project_id, request.merge_request_id)
        return await self._facade.put(path, request.to_payload(), MergeRequest)

    async def accept(
        self,
        project_id: "ProjectId",
        merge_request_id: int,
        merge_commit_message: str | None,
        *,
        should_remove_source_branch: bool | None = None,
        squash: bool | None = None,
        sha: str | None = None,
    ) -> MergeRequest:
        """Merge the merge request with the given commit message."""
        body = MergeCommitMessage(
            merge_commit_message=ensure_not_empty(merge_commit_message, "merge_commit_message"),
            should_remove_source_branch=should_remove_source_branch,
            squash=squash,
            sha=sha,
        )
        path = f"{_merge_request_path(project_id, merge_request_id)}/merge"
        merge_request = await self._facade.put(path, body.to_payload(), MergeRequest)
        LOGGER.info("Accepted merge request !%s in project %s", merge_request_id, project_id)
        return merge_request

    async def delete(self, project_id: "ProjectId", merge_request_id: int) -> None:
        """Delete the merge request."""
        await self._facade.delete(_merge_request_path(project_id, merge_request_id))
        LOGGER.info("Deleted merge request !%s in project %s", merge_request_id, project_id)


def _project_path(project_id: "ProjectId") -> str:
    return f"/projects/{encode_project_id(project_id)}"


def _merge_request_path(project_id: "ProjectId", merge_request_id: int) -> str:
    iid = ensure_positive(merge_request_id, "merge_request_id")
    return f"{_project_path(project_id)}/merge_requests/{iid}"
