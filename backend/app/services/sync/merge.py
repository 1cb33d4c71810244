"""
Merge freshly fetched GitHub pages into a repository aggregate.

These functions only mutate the in-memory ``Repository``; the caller
persists it. Commits are deduplicated by ``sha`` and never rewritten once
stored. Pull requests and issues are upserted by ``number``: a record with a
known number replaces the stored one in place, an unknown number is appended.

Callers skip invocation for an empty batch, so a repeated empty fetch never
touches ``sync_details``.
"""

from typing import Any, Dict, Iterable, List

from app.entities.enums import SyncKind, SyncKindStatus
from app.entities.repository import Issue, Repository, SyncDetail
from app.services.sync.mappers import map_commit, map_issue, map_pull_request


def merge_commits(repository: Repository, raw_commits: Iterable[Dict[str, Any]]) -> SyncDetail:
    existing_shas = {commit.sha for commit in repository.commits}

    new_commits = []
    for raw in raw_commits:
        sha = raw.get("sha")
        if not sha or sha in existing_shas:
            continue
        # Guards against the same sha twice within one page
        existing_shas.add(sha)
        new_commits.append(map_commit(raw))

    repository.commits.extend(new_commits)
    repository.data_counts.commits = len(repository.commits)

    detail = SyncDetail(
        status=SyncKindStatus.COMPLETED,
        count=len(new_commits),
        added=len(new_commits),
    )
    repository.sync_details.commits = detail
    repository.last_synced_at = detail.last_synced
    return detail


def merge_pull_requests(
    repository: Repository, raw_pulls: Iterable[Dict[str, Any]]
) -> SyncDetail:
    positions = {pull.number: i for i, pull in enumerate(repository.pull_requests)}

    incoming = 0
    added = 0
    updated = 0
    for raw in raw_pulls:
        pull = map_pull_request(raw)
        incoming += 1
        if pull.number in positions:
            repository.pull_requests[positions[pull.number]] = pull
            updated += 1
        else:
            positions[pull.number] = len(repository.pull_requests)
            repository.pull_requests.append(pull)
            added += 1

    repository.data_counts.pull_requests = len(repository.pull_requests)

    detail = SyncDetail(
        status=SyncKindStatus.COMPLETED, count=incoming, added=added, updated=updated
    )
    repository.sync_details.pull_requests = detail
    repository.last_synced_at = detail.last_synced
    return detail


def _keep_cached_timeline(stored: Issue, incoming: Issue) -> Issue:
    """Carry a previously fetched timeline over when the re-fetched issue has none."""
    if incoming.timeline or not stored.timeline:
        return incoming
    return incoming.model_copy(
        update={"timeline": stored.timeline, "timeline_count": len(stored.timeline)}
    )


def merge_issues(repository: Repository, raw_issues: Iterable[Dict[str, Any]]) -> SyncDetail:
    positions = {issue.number: i for i, issue in enumerate(repository.issues)}

    incoming = 0
    added = 0
    updated = 0
    for raw in raw_issues:
        issue = map_issue(raw)
        incoming += 1
        if issue.number in positions:
            index = positions[issue.number]
            repository.issues[index] = _keep_cached_timeline(repository.issues[index], issue)
            updated += 1
        else:
            positions[issue.number] = len(repository.issues)
            repository.issues.append(issue)
            added += 1

    repository.data_counts.issues = len(repository.issues)

    detail = SyncDetail(
        status=SyncKindStatus.COMPLETED, count=incoming, added=added, updated=updated
    )
    repository.sync_details.issues = detail
    repository.last_synced_at = detail.last_synced
    return detail


def mark_failed(repository: Repository, kind: SyncKind, error: str) -> SyncDetail:
    """Record a failed fetch for one data kind; stored records are left untouched."""
    detail = SyncDetail(status=SyncKindStatus.FAILED, error=error)
    setattr(repository.sync_details, SyncKind(kind).value, detail)
    return detail


MERGERS = {
    SyncKind.COMMITS: merge_commits,
    SyncKind.PULL_REQUESTS: merge_pull_requests,
    SyncKind.ISSUES: merge_issues,
}


def merge_kind(
    repository: Repository, kind: SyncKind, records: List[Dict[str, Any]]
) -> SyncDetail:
    return MERGERS[SyncKind(kind)](repository, records)
