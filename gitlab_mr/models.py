"""Pydantic models describing GitLab merge requests and their request payloads."""

from datetime import date, datetime
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_serializer

MergeRequestState = Literal["opened", "closed", "locked", "merged"]
ProjectId = int | str


class GitLabUser(BaseModel):
    """Subset of GitLab user metadata embedded in merge request payloads."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    username: str
    name: str | None = None
    state: str | None = None
    avatar_url: HttpUrl | None = None
    web_url: HttpUrl | None = None


class Milestone(BaseModel):
    """Milestone a merge request is attached to."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    iid: int
    project_id: int | None = None
    title: str
    description: str | None = None
    state: str | None = None
    due_date: date | None = None
    web_url: HttpUrl | None = None


def _empty_users() -> list[GitLabUser]:
    return []


def _empty_labels() -> list[str]:
    return []


class MergeRequest(BaseModel):
    """Snapshot of a merge request as returned by the GitLab API."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    iid: int
    project_id: int
    title: str
    description: str | None = None
    state: MergeRequestState
    created_at: datetime
    updated_at: datetime
    merged_at: datetime | None = None
    closed_at: datetime | None = None
    merged_by: GitLabUser | None = None
    closed_by: GitLabUser | None = None
    author: GitLabUser
    assignee: GitLabUser | None = None
    assignees: list[GitLabUser] = Field(default_factory=_empty_users)
    reviewers: list[GitLabUser] = Field(default_factory=_empty_users)
    source_branch: str
    target_branch: str
    source_project_id: int | None = None
    target_project_id: int | None = None
    labels: list[str] = Field(default_factory=_empty_labels)
    draft: bool = False
    work_in_progress: bool = False
    milestone: Milestone | None = None
    merge_when_pipeline_succeeds: bool = False
    merge_status: str | None = None
    detailed_merge_status: str | None = None
    sha: str | None = None
    merge_commit_sha: str | None = None
    squash_commit_sha: str | None = None
    user_notes_count: int = 0
    upvotes: int = 0
    downvotes: int = 0
    should_remove_source_branch: bool | None = None
    force_remove_source_branch: bool | None = None
    squash: bool = False
    web_url: HttpUrl | None = None


class _RequestPayload(BaseModel):
    """Base for request bodies whose identifiers travel in the URL path."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path_fields: ClassVar[frozenset[str]] = frozenset()

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body, omitting path identifiers and unset fields."""
        return self.model_dump(mode="json", exclude=set(self.path_fields), exclude_none=True)


def _join_labels(labels: list[str] | None) -> str | None:
    if labels is None:
        return None
    return ",".join(labels)


class CreateMergeRequest(_RequestPayload):
    """Payload used to open a new merge request."""

    path_fields: ClassVar[frozenset[str]] = frozenset({"project_id"})

    project_id: ProjectId
    source_branch: str = Field(min_length=1)
    target_branch: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str | None = None
    assignee_id: int | None = None
    assignee_ids: list[int] | None = None
    reviewer_ids: list[int] | None = None
    target_project_id: int | None = None
    labels: list[str] | None = None
    milestone_id: int | None = None
    remove_source_branch: bool | None = None
    allow_collaboration: bool | None = None
    squash: bool | None = None

    @field_serializer("labels")
    def _serialize_labels(self, labels: list[str] | None) -> str | None:
        return _join_labels(labels)


class UpdateMergeRequest(_RequestPayload):
    """Payload used to change an existing merge request.

    Only the fields that are set are sent, so GitLab leaves the rest untouched.
    """

    path_fields: ClassVar[frozenset[str]] = frozenset({"project_id", "merge_request_id"})

    project_id: ProjectId
    merge_request_id: int = Field(ge=1)
    target_branch: str | None = None
    title: str | None = None
    description: str | None = None
    assignee_id: int | None = None
    assignee_ids: list[int] | None = None
    reviewer_ids: list[int] | None = None
    labels: list[str] | None = None
    add_labels: list[str] | None = None
    remove_labels: list[str] | None = None
    milestone_id: int | None = None
    state_event: Literal["close", "reopen"] | None = None
    remove_source_branch: bool | None = None
    squash: bool | None = None
    discussion_locked: bool | None = None
    allow_collaboration: bool | None = None

    @field_serializer("labels", "add_labels", "remove_labels")
    def _serialize_labels(self, labels: list[str] | None) -> str | None:
        return _join_labels(labels)


class MergeCommitMessage(_RequestPayload):
    """Body of the request that merges a merge request."""

    merge_commit_message: str
    should_remove_source_branch: bool | None = None
    squash: bool | None = None
    sha: str | None = None
