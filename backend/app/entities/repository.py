"""
Repository Entity - a mirrored GitHub repository aggregate.

Unique per (user_id, organization_login, name). The repository owns three
embedded child collections keyed by natural key:

- commits: keyed by ``sha``; append-only, never mutated once stored
- pull_requests / issues: keyed by ``number``; overwritten in place on re-sync

Each child collection has a matching counter in ``data_counts`` and an
independent ``{status, count, last_synced}`` record in ``sync_details``.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.entities.base import BaseEntity, utc_now
from app.entities.enums import RepositorySyncStatus, SyncKindStatus
from app.entities.timeline import Timeline


class UserRef(BaseModel):
    login: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None


class Label(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None


# =============================================================================
# Commits
# =============================================================================


class CommitAuthor(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    date: Optional[datetime] = None
    login: Optional[str] = None
    avatar_url: Optional[str] = None


class CommitCommitter(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    date: Optional[datetime] = None


class CommitStats(BaseModel):
    additions: Optional[int] = None
    deletions: Optional[int] = None
    total: Optional[int] = None


class CommitFile(BaseModel):
    filename: Optional[str] = None
    status: Optional[str] = None
    additions: Optional[int] = None
    deletions: Optional[int] = None
    changes: Optional[int] = None


class Commit(BaseModel):
    sha: str
    message: Optional[str] = None
    author: CommitAuthor = Field(default_factory=CommitAuthor)
    committer: CommitCommitter = Field(default_factory=CommitCommitter)
    html_url: Optional[str] = None
    stats: Optional[CommitStats] = None
    files: List[CommitFile] = Field(default_factory=list)
    stored_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Pull requests and issues
# =============================================================================


class PullRequest(BaseModel):
    number: int
    title: Optional[str] = None
    state: Optional[str] = None  # open, closed
    user: UserRef = Field(default_factory=UserRef)
    body: Optional[str] = None
    html_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None
    merged_by: Optional[UserRef] = None
    labels: List[Label] = Field(default_factory=list)
    comments: Optional[int] = None
    review_comments: Optional[int] = None
    commits: Optional[int] = None
    additions: Optional[int] = None
    deletions: Optional[int] = None
    changed_files: Optional[int] = None


class Issue(BaseModel):
    number: int
    title: Optional[str] = None
    state: Optional[str] = None
    user: UserRef = Field(default_factory=UserRef)
    body: Optional[str] = None
    html_url: Optional[str] = None
    labels: List[Label] = Field(default_factory=list)
    assignees: List[UserRef] = Field(default_factory=list)
    comments: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    closed_by: Optional[UserRef] = None
    timeline: Timeline = Field(default_factory=list)
    timeline_count: int = 0


# =============================================================================
# Repository aggregate
# =============================================================================


class RepositoryOwner(BaseModel):
    login: Optional[str] = None
    avatar_url: Optional[str] = None
    type: Optional[str] = None


class RepositoryStats(BaseModel):
    stargazers_count: Optional[int] = None
    watchers_count: Optional[int] = None
    forks_count: Optional[int] = None
    open_issues_count: Optional[int] = None
    size: Optional[int] = None


class GithubTimestamps(BaseModel):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None


class DataCounts(BaseModel):
    commits: int = 0
    pull_requests: int = 0
    issues: int = 0


class SyncDetail(BaseModel):
    """
    Outcome of the last sync of one data kind.

    ``count`` is the number of records written by that sync: newly appended
    commits for the commit path, every incoming record for pulls/issues.
    ``added`` and ``updated`` break that number down.
    """

    model_config = ConfigDict(use_enum_values=True)

    status: SyncKindStatus
    count: int = 0
    added: int = 0
    updated: int = 0
    last_synced: datetime = Field(default_factory=utc_now)
    error: Optional[str] = None


class SyncDetails(BaseModel):
    commits: Optional[SyncDetail] = None
    pull_requests: Optional[SyncDetail] = None
    issues: Optional[SyncDetail] = None


class Repository(BaseEntity):
    user_id: str
    organization_login: str
    github_id: int
    name: str
    full_name: Optional[str] = None
    description: Optional[str] = None
    owner: RepositoryOwner = Field(default_factory=RepositoryOwner)
    html_url: Optional[str] = None
    private: bool = False

    language: Optional[str] = None
    default_branch: Optional[str] = None
    stats: RepositoryStats = Field(default_factory=RepositoryStats)
    github_timestamps: GithubTimestamps = Field(default_factory=GithubTimestamps)
    topics: List[str] = Field(default_factory=list)

    commits: List[Commit] = Field(default_factory=list)
    pull_requests: List[PullRequest] = Field(default_factory=list)
    issues: List[Issue] = Field(default_factory=list)
    data_counts: DataCounts = Field(default_factory=DataCounts)

    last_synced_at: datetime = Field(default_factory=utc_now)
    sync_status: RepositorySyncStatus = RepositorySyncStatus.PENDING
    sync_details: SyncDetails = Field(default_factory=SyncDetails)
    sync_error: Optional[str] = None

    def find_issue(self, number: int) -> Optional[Issue]:
        return next((issue for issue in self.issues if issue.number == number), None)
