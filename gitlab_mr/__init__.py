"""Typed asynchronous client for the GitLab merge request API."""

from gitlab_mr.client import GitLabClient
from gitlab_mr.config import ClientSettings, load_settings
from gitlab_mr.http_facade import GitLabAPIError, GitLabHttpFacade, HttpFacade
from gitlab_mr.models import (
    CreateMergeRequest,
    GitLabUser,
    MergeRequest,
    Milestone,
    UpdateMergeRequest,
)
from gitlab_mr.query import MergeRequestsQueryOptions, ProjectMergeRequestsQueryOptions
from gitlab_mr.resources.merge_requests import MergeRequestsClient

__all__ = [
    "ClientSettings",
    "CreateMergeRequest",
    "GitLabAPIError",
    "GitLabClient",
    "GitLabHttpFacade",
    "GitLabUser",
    "HttpFacade",
    "MergeRequest",
    "MergeRequestsClient",
    "MergeRequestsQueryOptions",
    "Milestone",
    "ProjectMergeRequestsQueryOptions",
    "UpdateMergeRequest",
    "load_settings",
]
