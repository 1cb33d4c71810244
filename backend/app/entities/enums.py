"""
Shared enums for entities.

This module contains enums that are used across multiple entity files.
"""

from enum import Enum


class Provider(str, Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"


class IntegrationStatus(str, Enum):
    """Connection status of a provider integration."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


class OrganizationSyncStatus(str, Enum):
    PENDING = "pending"
    SYNCING = "syncing"
    COMPLETED = "completed"
    FAILED = "failed"


class RepositorySyncStatus(str, Enum):
    """Aggregate sync status; PARTIAL means at least one data kind failed."""

    PENDING = "pending"
    SYNCING = "syncing"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class SyncKindStatus(str, Enum):
    """Per data-kind (commits/pulls/issues) sync status."""

    COMPLETED = "completed"
    FAILED = "failed"


class SyncKind(str, Enum):
    COMMITS = "commits"
    PULL_REQUESTS = "pull_requests"
    ISSUES = "issues"
