"""Merge request listing options and the query strings built from them."""

from collections.abc import Iterable
from datetime import datetime
from typing import Literal
from urllib.parse import urlencode

from pydantic import AwareDatetime, BaseModel, ConfigDict

QueryState = Literal["opened", "closed", "locked", "merged", "all"]
QueryScope = Literal["created_by_me", "assigned_to_me", "all"]
QueryOrder = Literal["created_at", "updated_at", "title"]
SortOrder = Literal["asc", "desc"]


class MergeRequestsQueryOptions(BaseModel):
    """Filters for listing merge requests across every accessible project.

    The defaults list opened merge requests created by anyone. Fields left at
    ``None`` are not sent, so GitLab applies its own default for them.

    Attributes:
        state: Merge request state to return, ``"all"`` disables the filter.
        scope: Whose merge requests to return.
        order_by: Field used to order results.
        sort: Ascending or descending order.
        milestone: Milestone title.
        simple_view: Ask GitLab for the lightweight representation.
        labels: Labels every returned merge request must carry.
        created_after: Only merge requests created at or after this instant.
            All four timestamp filters must be timezone aware.
        created_before: Only merge requests created at or before this instant.
        updated_after: Only merge requests updated at or after this instant.
        updated_before: Only merge requests updated at or before this instant.
        author_id: Numeric id of the author.
        author_username: Username of the author.
        assignee_id: Numeric id of the assignee.
        reviewer_id: Numeric id of a reviewer.
        source_branch: Source branch name.
        target_branch: Target branch name.
        search: Text searched in title and description.
        draft: Only draft (``True``) or only ready (``False``) merge requests.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    state: QueryState = "opened"
    scope: QueryScope | None = "all"
    order_by: QueryOrder | None = None
    sort: SortOrder | None = None
    milestone: str | None = None
    simple_view: bool = False
    labels: tuple[str, ...] = ()
    created_after: AwareDatetime | None = None
    created_before: AwareDatetime | None = None
    updated_after: AwareDatetime | None = None
    updated_before: AwareDatetime | None = None
    author_id: int | None = None
    author_username: str | None = None
    assignee_id: int | None = None
    reviewer_id: int | None = None
    source_branch: str | None = None
    target_branch: str | None = None
    search: str | None = None
    draft: bool | None = None


class ProjectMergeRequestsQueryOptions(MergeRequestsQueryOptions):
    """Filters for listing the merge requests of a single project.

    Attributes:
        iids: Project-scoped merge request ids to restrict the listing to.
    """

    scope: QueryScope | None = None
    iids: tuple[int, ...] = ()


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class MergeRequestsQueryBuilder:
    """Serialize merge request options into a path with a query string."""

    def build(self, base_path: str, options: MergeRequestsQueryOptions) -> str:
        """Return ``base_path`` followed by the query parameters the options set."""
        params = [(name, _format_value(value)) for name, value in self._params(options)]
        if not params:
            return base_path
        return f"{base_path}?{urlencode(params)}"

    def _params(self, options: MergeRequestsQueryOptions) -> Iterable[tuple[str, object]]:
        yield "state", options.state
        optional: list[tuple[str, object | None]] = [
            ("scope", options.scope),
            ("order_by", options.order_by),
            ("sort", options.sort),
            ("milestone", options.milestone),
        ]
        yield from ((name, value) for name, value in optional if value is not None)
        if options.simple_view:
            yield "view", "simple"
        if options.labels:
            yield "labels", ",".join(options.labels)
        optional = [
            ("created_after", options.created_after),
            ("created_before", options.created_before),
            ("updated_after", options.updated_after),
            ("updated_before", options.updated_before),
            ("author_id", options.author_id),
            ("author_username", options.author_username),
            ("assignee_id", options.assignee_id),
            ("reviewer_id", options.reviewer_id),
            ("source_branch", options.source_branch),
            ("target_branch", options.target_branch),
            ("search", options.search),
            ("draft", options.draft),
        ]
        yield from ((name, value) for name, value in optional if value is not None)


class ProjectMergeRequestsQueryBuilder(MergeRequestsQueryBuilder):
    """Query builder for the project scoped endpoint, which also accepts ``iids[]``."""

    def _params(self, options: MergeRequestsQueryOptions) -> Iterable[tuple[str, object]]:
        yield from super()._params(options)
        if isinstance(options, ProjectMergeRequestsQueryOptions):
            for iid in options.iids:
                yield "iids[]", iid
