"""Resource clients for the GitLab REST API."""

from . import merge_requests

__all__ = [
    "merge_requests",
]
