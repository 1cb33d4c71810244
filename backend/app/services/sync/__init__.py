from .mappers import (
    map_commit,
    map_issue,
    map_members,
    map_organization,
    map_pull_request,
    map_repository_fields,
    map_timeline,
    map_timeline_event,
)
from .merge import (
    mark_failed,
    merge_commits,
    merge_issues,
    merge_kind,
    merge_pull_requests,
)

__all__ = [
    "map_commit",
    "map_issue",
    "map_members",
    "map_organization",
    "map_pull_request",
    "map_repository_fields",
    "map_timeline",
    "map_timeline_event",
    "mark_failed",
    "merge_commits",
    "merge_issues",
    "merge_kind",
    "merge_pull_requests",
]
