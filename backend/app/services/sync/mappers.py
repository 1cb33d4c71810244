"""
Map raw GitHub REST payloads into the stored entity shapes.

Every mapper accepts the JSON object exactly as GitHub returns it and never
raises on missing optional keys.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import TypeAdapter

from app.entities.organization import OrganizationMember, OrganizationMetadata
from app.entities.repository import (
    Commit,
    CommitAuthor,
    CommitCommitter,
    CommitFile,
    CommitStats,
    GithubTimestamps,
    Issue,
    Label,
    PullRequest,
    RepositoryOwner,
    RepositoryStats,
    UserRef,
)
from app.entities.timeline import TimelineEvent

_timeline_event_adapter = TypeAdapter(TimelineEvent)


def _user_ref(raw: Optional[Dict[str, Any]]) -> Optional[UserRef]:
    if not raw:
        return None
    return UserRef(
        login=raw.get("login"),
        avatar_url=raw.get("avatar_url"),
        html_url=raw.get("html_url"),
    )


def _labels(raw_labels: Optional[Iterable[Dict[str, Any]]]) -> List[Label]:
    return [
        Label(
            name=label.get("name"),
            color=label.get("color"),
            description=label.get("description"),
        )
        for label in raw_labels or []
        if isinstance(label, dict)
    ]


def map_commit(raw: Dict[str, Any]) -> Commit:
    git_commit = raw.get("commit") or {}
    git_author = git_commit.get("author") or {}
    git_committer = git_commit.get("committer") or {}
    account = raw.get("author") or {}

    stats = raw.get("stats")
    return Commit(
        sha=raw["sha"],
        message=git_commit.get("message"),
        author=CommitAuthor(
            name=git_author.get("name"),
            email=git_author.get("email"),
            date=git_author.get("date"),
            login=account.get("login"),
            avatar_url=account.get("avatar_url"),
        ),
        committer=CommitCommitter(
            name=git_committer.get("name"),
            email=git_committer.get("email"),
            date=git_committer.get("date"),
        ),
        html_url=raw.get("html_url"),
        stats=CommitStats(**stats) if stats else None,
        files=[
            CommitFile(
                filename=f.get("filename"),
                status=f.get("status"),
                additions=f.get("additions"),
                deletions=f.get("deletions"),
                changes=f.get("changes"),
            )
            for f in raw.get("files") or []
        ],
    )


def map_pull_request(raw: Dict[str, Any]) -> PullRequest:
    return PullRequest(
        number=raw["number"],
        title=raw.get("title"),
        state=raw.get("state"),
        user=_user_ref(raw.get("user")) or UserRef(),
        body=raw.get("body"),
        html_url=raw.get("html_url"),
        created_at=raw.get("created_at"),
        updated_at=raw.get("updated_at"),
        closed_at=raw.get("closed_at"),
        merged_at=raw.get("merged_at"),
        merged_by=_user_ref(raw.get("merged_by")),
        labels=_labels(raw.get("labels")),
        comments=raw.get("comments"),
        review_comments=raw.get("review_comments"),
        commits=raw.get("commits"),
        additions=raw.get("additions"),
        deletions=raw.get("deletions"),
        changed_files=raw.get("changed_files"),
    )


def map_timeline_event(raw: Dict[str, Any]) -> TimelineEvent:
    actor = raw.get("actor")
    label = raw.get("label")
    assignee = raw.get("assignee")

    event: Dict[str, Any] = {
        "event": raw.get("event") or "unknown",
        "created_at": raw.get("created_at"),
        "actor": (
            {
                "login": actor.get("login"),
                "avatar_url": actor.get("avatar_url"),
                "html_url": actor.get("html_url"),
            }
            if actor
            else None
        ),
        "html_url": raw.get("html_url"),
    }
    if raw.get("body") is not None:
        event["body"] = raw["body"]
    if label:
        event["label"] = {"name": label.get("name"), "color": label.get("color")}
    if assignee:
        event["assignee"] = {
            "login": assignee.get("login"),
            "avatar_url": assignee.get("avatar_url"),
        }
    return _timeline_event_adapter.validate_python(event)


def map_timeline(raw_events: Optional[Iterable[Dict[str, Any]]]) -> List[TimelineEvent]:
    return [map_timeline_event(event) for event in raw_events or []]


def map_issue(raw: Dict[str, Any]) -> Issue:
    """
    Map an issue payload.

    A ``timeline`` key, when present, holds raw timeline events attached
    during the prefetch step and is mapped along with the issue.
    """
    timeline = map_timeline(raw.get("timeline"))
    return Issue(
        number=raw["number"],
        title=raw.get("title"),
        state=raw.get("state"),
        user=_user_ref(raw.get("user")) or UserRef(),
        body=raw.get("body"),
        html_url=raw.get("html_url"),
        labels=_labels(raw.get("labels")),
        assignees=[
            ref for ref in (_user_ref(a) for a in raw.get("assignees") or []) if ref
        ],
        comments=raw.get("comments"),
        created_at=raw.get("created_at"),
        updated_at=raw.get("updated_at"),
        closed_at=raw.get("closed_at"),
        closed_by=_user_ref(raw.get("closed_by")),
        timeline=timeline,
        timeline_count=len(timeline),
    )


def map_members(raw_members: Optional[Iterable[Dict[str, Any]]]) -> List[OrganizationMember]:
    return [
        OrganizationMember(
            login=member.get("login"),
            id=member.get("id"),
            avatar_url=member.get("avatar_url"),
            html_url=member.get("html_url"),
            type=member.get("type"),
            site_admin=member.get("site_admin"),
            role=member.get("role"),
        )
        for member in raw_members or []
    ]


def map_organization(
    raw: Dict[str, Any], members: Optional[Iterable[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Build the organization field set written on every sync."""
    metadata = OrganizationMetadata(
        company=raw.get("company"),
        blog=raw.get("blog"),
        location=raw.get("location"),
        email=raw.get("email"),
        public_repos=raw.get("public_repos"),
        public_gists=raw.get("public_gists"),
        followers=raw.get("followers"),
        following=raw.get("following"),
        created_at=raw.get("created_at"),
        updated_at=raw.get("updated_at"),
    )
    return {
        "github_id": raw.get("id"),
        "login": raw.get("login"),
        "name": raw.get("name") or raw.get("login"),
        "description": raw.get("description") or raw.get("bio"),
        "avatar_url": raw.get("avatar_url"),
        "html_url": raw.get("html_url"),
        "type": raw.get("type"),
        "metadata": metadata.model_dump(),
        "members": [m.model_dump() for m in map_members(members)],
    }


def map_repository_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Build the repository's own field set; child collections are never included."""
    owner = raw.get("owner") or {}
    return {
        "github_id": raw.get("id"),
        "name": raw.get("name"),
        "full_name": raw.get("full_name"),
        "description": raw.get("description"),
        "owner": RepositoryOwner(
            login=owner.get("login"),
            avatar_url=owner.get("avatar_url"),
            type=owner.get("type"),
        ).model_dump(),
        "html_url": raw.get("html_url"),
        "private": bool(raw.get("private", False)),
        "language": raw.get("language"),
        "default_branch": raw.get("default_branch"),
        "stats": RepositoryStats(
            stargazers_count=raw.get("stargazers_count"),
            watchers_count=raw.get("watchers_count"),
            forks_count=raw.get("forks_count"),
            open_issues_count=raw.get("open_issues_count"),
            size=raw.get("size"),
        ).model_dump(),
        "github_timestamps": GithubTimestamps(
            created_at=raw.get("created_at"),
            updated_at=raw.get("updated_at"),
            pushed_at=raw.get("pushed_at"),
        ).model_dump(),
        "topics": raw.get("topics") or [],
    }
