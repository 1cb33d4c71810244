"""GitHub OAuth helper utilities (MongoDB)."""

from __future__ import annotations

import logging
import uuid
from typing import Optional
from urllib.parse import urlencode

import httpx
from pymongo.database import Database

from app.config import settings
from app.entities.base import utc_now
from app.entities.enums import Provider
from app.entities.integration import Integration
from app.entities.oauth_state import OAuthState
from app.repositories.integration import IntegrationRepository
from app.repositories.oauth_state import OAuthStateRepository
from app.services.errors import ValidationError
from app.services.github.exceptions import GithubOAuthError

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"

logger = logging.getLogger(__name__)


def _require_github_credentials() -> None:
    if not settings.GITHUB_CLIENT_ID or not settings.GITHUB_CLIENT_SECRET:
        raise ValidationError(
            "GitHub OAuth credentials are not configured. Set GITHUB_CLIENT_ID/SECRET."
        )


def build_authorize_url(state: str) -> str:
    query = urlencode(
        {
            "client_id": settings.GITHUB_CLIENT_ID,
            "redirect_uri": settings.GITHUB_REDIRECT_URI,
            "scope": " ".join(settings.GITHUB_SCOPES),
            "state": state,
        }
    )
    return f"{GITHUB_AUTHORIZE_URL}?{query}"


def create_oauth_state(db: Database, user_id: Optional[str]) -> OAuthState:
    """Create a one-shot state token bound to ``user_id``."""
    if not user_id:
        raise ValidationError("User ID is required")
    _require_github_credentials()
    return OAuthStateRepository(db).create_state(uuid.uuid4().hex, user_id)


async def _fetch_github_user(
    client: httpx.AsyncClient, access_token: str
) -> dict:
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {access_token}",
    }
    api_url = settings.GITHUB_API_URL.rstrip("/")

    user_response = await client.get(f"{api_url}/user", headers=headers)
    user_response.raise_for_status()
    user_data = user_response.json()

    if not user_data.get("email"):
        try:
            emails_response = await client.get(f"{api_url}/user/emails", headers=headers)
            emails_response.raise_for_status()
            emails = emails_response.json()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code != 404:
                raise
            emails = []
        primary = next((item.get("email") for item in emails if item.get("primary")), None)
        user_data["email"] = primary or (emails[0].get("email") if emails else None)

    return user_data


async def exchange_code_for_token(
    db: Database,
    code: Optional[str],
    state: Optional[str],
    transport: httpx.AsyncBaseTransport | None = None,
) -> Integration:
    """
    Complete the OAuth round trip and store the user's integration.

    Raises:
        GithubOAuthError: with ``reason`` set to the flag the callback
            redirects with (missing_params, invalid_state, no_token, auth_failed)
    """
    if not code or not state:
        raise GithubOAuthError("Missing code or state", reason="missing_params")

    oauth_state = OAuthStateRepository(db).consume(state)
    if not oauth_state:
        raise GithubOAuthError("Invalid or expired OAuth state", reason="invalid_state")

    try:
        _require_github_credentials()
        async with httpx.AsyncClient(
            timeout=settings.GITHUB_HTTP_TIMEOUT, transport=transport
        ) as client:
            token_response = await client.post(
                GITHUB_TOKEN_URL,
                headers={"Accept": "application/json"},
                data={
                    "client_id": settings.GITHUB_CLIENT_ID,
                    "client_secret": settings.GITHUB_CLIENT_SECRET,
                    "code": code,
                    "redirect_uri": settings.GITHUB_REDIRECT_URI,
                },
            )
            token_response.raise_for_status()
            token_data = token_response.json()

            access_token = token_data.get("access_token")
            if not access_token:
                error_details = (
                    token_data.get("error_description")
                    or token_data.get("error")
                    or str(token_data)
                )
                logger.warning(f"GitHub OAuth Error: {error_details}")
                raise GithubOAuthError(
                    f"GitHub did not return an access token. Error: {error_details}",
                    reason="no_token",
                )

            user_data = await _fetch_github_user(client, access_token)
    except (httpx.HTTPError, ValueError, ValidationError) as exc:
        logger.error(f"GitHub OAuth exchange failed: {exc}")
        raise GithubOAuthError(str(exc), reason="auth_failed") from exc

    now = utc_now()
    integration = IntegrationRepository(db).find_or_create(
        {
            "user_id": oauth_state.user_id,
            "provider": Provider.GITHUB.value,
            "provider_user_id": str(user_data.get("id")),
            "username": user_data.get("login"),
            "email": user_data.get("email"),
            "display_name": user_data.get("name") or user_data.get("login"),
            "avatar_url": user_data.get("avatar_url"),
            "profile_url": user_data.get("html_url"),
            "access_token": access_token,
            "token_type": token_data.get("token_type") or "bearer",
            "scope": token_data.get("scope"),
            "connected_at": now,
            "metadata": {
                "bio": user_data.get("bio"),
                "company": user_data.get("company"),
                "location": user_data.get("location"),
                "public_repos": user_data.get("public_repos"),
                "followers": user_data.get("followers"),
                "following": user_data.get("following"),
            },
        }
    )
    logger.info(
        f"GitHub integration connected for user {oauth_state.user_id} "
        f"as {integration.username}"
    )
    return integration
