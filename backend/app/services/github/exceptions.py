"""Custom exceptions for the GitHub integration."""

from __future__ import annotations


class GithubError(Exception):
    """Base exception for GitHub integration failures."""


class GithubConfigurationError(GithubError):
    """Raised when required configuration (OAuth app, access token) is missing."""


class GithubOAuthError(GithubError):
    """Raised when the OAuth authorization round trip cannot be completed."""

    def __init__(self, message: str, reason: str = "auth_failed"):
        super().__init__(message)
        self.reason = reason
