"""Shared fixtures and GitHub payload builders."""

from unittest.mock import MagicMock

import pytest

from app.entities.repository import Repository
from app.services.github.github_client import GitHubClient


def raw_commit(sha, message="Update README", login="alice"):
    return {
        "sha": sha,
        "commit": {
            "message": message,
            "author": {
                "name": "Alice",
                "email": "alice@example.com",
                "date": "2024-03-01T10:00:00Z",
            },
            "committer": {
                "name": "Alice",
                "email": "alice@example.com",
                "date": "2024-03-01T10:00:00Z",
            },
        },
        "author": {"login": login, "avatar_url": f"https://avatars/{login}"},
        "html_url": f"https://github.com/acme/widgets/commit/{sha}",
    }


def raw_pull(number, title="Add feature", state="open"):
    return {
        "number": number,
        "title": title,
        "state": state,
        "user": {"login": "bob", "avatar_url": "https://avatars/bob"},
        "html_url": f"https://github.com/acme/widgets/pull/{number}",
        "created_at": "2024-03-02T10:00:00Z",
        "updated_at": "2024-03-03T10:00:00Z",
        "merged_at": None,
        "labels": [{"name": "enhancement", "color": "a2eeef"}],
    }


def raw_issue(number, title="Crash on start", state="open", timeline=None):
    issue = {
        "number": number,
        "title": title,
        "state": state,
        "user": {"login": "carol"},
        "html_url": f"https://github.com/acme/widgets/issues/{number}",
        "labels": [{"name": "bug", "color": "d73a4a"}],
        "assignees": [{"login": "dave"}],
        "comments": 2,
        "created_at": "2024-03-04T10:00:00Z",
        "updated_at": "2024-03-05T10:00:00Z",
    }
    if timeline is not None:
        issue["timeline"] = timeline
    return issue


def raw_timeline():
    return [
        {
            "event": "commented",
            "created_at": "2024-03-04T11:00:00Z",
            "actor": {"login": "dave", "avatar_url": "https://avatars/dave"},
            "body": "Can reproduce",
            "html_url": "https://github.com/acme/widgets/issues/1#issuecomment-1",
        },
        {
            "event": "labeled",
            "created_at": "2024-03-04T12:00:00Z",
            "actor": {"login": "carol"},
            "label": {"name": "bug", "color": "d73a4a"},
        },
        {
            "event": "closed",
            "created_at": "2024-03-05T10:00:00Z",
            "actor": {"login": "carol"},
        },
    ]


def raw_repo(name="widgets", owner="acme", repo_id=101):
    return {
        "id": repo_id,
        "name": name,
        "full_name": f"{owner}/{name}",
        "description": "Widget factory",
        "owner": {"login": owner, "avatar_url": None, "type": "Organization"},
        "html_url": f"https://github.com/{owner}/{name}",
        "private": False,
        "language": "Python",
        "default_branch": "main",
        "stargazers_count": 5,
        "watchers_count": 5,
        "forks_count": 1,
        "open_issues_count": 2,
        "size": 120,
        "topics": ["tools"],
        "created_at": "2023-01-01T00:00:00Z",
        "updated_at": "2024-03-01T00:00:00Z",
        "pushed_at": "2024-03-01T00:00:00Z",
    }


def make_repository(**overrides) -> Repository:
    fields = {
        "user_id": "user-1",
        "organization_login": "acme",
        "github_id": 101,
        "name": "widgets",
        "owner": {"login": "acme"},
    }
    fields.update(overrides)
    return Repository(**fields)


@pytest.fixture
def repository():
    return make_repository()


@pytest.fixture
def github_client():
    """A GitHubClient double usable as a context manager."""
    client = MagicMock(spec=GitHubClient)
    client.__enter__.return_value = client
    return client
