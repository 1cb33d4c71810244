from .exceptions import GithubConfigurationError, GithubError, GithubOAuthError
from .github_client import ApiResult, GitHubClient, get_user_github_client
from .github_oauth import (
    build_authorize_url,
    create_oauth_state,
    exchange_code_for_token,
)

__all__ = [
    "ApiResult",
    "GitHubClient",
    "get_user_github_client",
    "GithubError",
    "GithubConfigurationError",
    "GithubOAuthError",
    "build_authorize_url",
    "create_oauth_state",
    "exchange_code_for_token",
]
