"""OAuth connection and integration management endpoints."""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from pymongo.database import Database

from app.config import settings
from app.database.mongo import get_db
from app.dtos import (
    GithubAuthUrlResponse,
    IntegrationListResponse,
    IntegrationResponse,
    IntegrationStatusResponse,
    MessageResponse,
)
from app.services.github.exceptions import GithubOAuthError
from app.services.github.github_oauth import (
    build_authorize_url,
    create_oauth_state,
    exchange_code_for_token,
)
from app.services.integration_service import IntegrationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/integrations", tags=["Integrations"])

ENDPOINTS = {
    # OAuth
    "GET /api/integrations/github/auth?userId=<userId>": "Get GitHub OAuth authorization URL",
    "GET /api/integrations/github/callback": "GitHub OAuth callback (auto-redirect)",
    # Management
    "GET /api/integrations/status/<userId>?provider=<provider>": "Get integration status",
    "GET /api/integrations/<userId>": "Get all integrations for user",
    "DELETE /api/integrations/<userId>/<provider>": "Disconnect integration",
    # Live GitHub data
    "GET /api/integrations/github/data/organizations/<userId>": "Get user's organizations",
    "GET /api/integrations/github/data/organizations/<orgName>/repos?userId=<userId>": "Get organization repositories",
    "GET /api/integrations/github/data/organizations/<orgName>/members?userId=<userId>": "Get organization members",
    "GET /api/integrations/github/data/organizations/<orgName>/complete?userId=<userId>": "Get complete organization snapshot",
    "GET /api/integrations/github/data/repos/<owner>/<repo>/commits?userId=<userId>": "Get repository commits",
    "GET /api/integrations/github/data/repos/<owner>/<repo>/pulls?userId=<userId>": "Get repository pull requests",
    "GET /api/integrations/github/data/repos/<owner>/<repo>/issues?userId=<userId>": "Get repository issues",
    "GET /api/integrations/github/data/repos/<owner>/<repo>/issues/<issueNumber>/timeline?userId=<userId>": "Get issue timeline",
    # Sync to store
    "POST /api/integrations/github/sync/organization/<orgName>": "Sync organization and members",
    "POST /api/integrations/github/sync/repository/<owner>/<repo>": "Sync repository commits, pulls and issues",
    "POST /api/integrations/github/sync/organization/<orgName>/repositories": "Sync an organization's repositories",
    "POST /api/integrations/github/sync/issue-timeline/<owner>/<repo>/<issueNumber>": "Fetch and store one issue's timeline",
    # Stored data
    "GET /api/integrations/github/stored/organizations/<userId>": "List stored organizations",
    "GET /api/integrations/github/stored/organizations/<orgName>/repositories?userId=<userId>": "List stored repositories",
    "GET /api/integrations/github/stored/repositories/<owner>/<repo>?userId=<userId>": "Get stored repository details",
    # Grid
    "GET /api/integrations/github/collections?userId=<userId>": "List grid collections",
    "GET /api/integrations/github/collection-schema/<collection>?userId=<userId>": "Get grid column schema",
    "GET /api/integrations/github/grid-data/<collection>?userId=<userId>": "Get paginated grid rows",
}


def get_integration_service(db: Database = Depends(get_db)) -> IntegrationService:
    return IntegrationService(db)


def _frontend_redirect(**params: str) -> RedirectResponse:
    target = f"{settings.FRONTEND_BASE_URL.rstrip('/')}/integrations?{urlencode(params)}"
    return RedirectResponse(url=target)


@router.get("")
def list_endpoints():
    """List the available integration endpoints."""
    return {
        "success": True,
        "message": "Integration API",
        "categories": {
            "oauth": "OAuth Authentication",
            "management": "Integration Management",
            "data": "GitHub Data Fetching",
            "sync": "GitHub Data Sync",
            "grid": "Stored Data Grid",
        },
        "endpoints": ENDPOINTS,
    }


@router.get("/github/auth", response_model=GithubAuthUrlResponse)
def get_github_auth_url(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Database = Depends(get_db),
):
    """Create a state token and return the GitHub authorization URL."""
    oauth_state = create_oauth_state(db, user_id)
    return GithubAuthUrlResponse(
        auth_url=build_authorize_url(oauth_state.state), state=oauth_state.state
    )


@router.get("/github/callback")
async def github_oauth_callback(
    code: Optional[str] = Query(None, description="GitHub authorization code"),
    state: Optional[str] = Query(None, description="OAuth state token"),
    db: Database = Depends(get_db),
):
    """Handle the GitHub OAuth callback and redirect back to the frontend."""
    try:
        await exchange_code_for_token(db, code=code, state=state)
    except GithubOAuthError as exc:
        logger.warning(f"GitHub OAuth callback failed ({exc.reason}): {exc}")
        return _frontend_redirect(error=exc.reason)

    return _frontend_redirect(success="true", provider="github")


@router.get("/status/{user_id}", response_model=IntegrationStatusResponse)
def get_integration_status(
    user_id: str,
    provider: Optional[str] = Query(None),
    service: IntegrationService = Depends(get_integration_service),
):
    status = service.get_status(user_id, provider)
    return IntegrationStatusResponse(
        connected=status["connected"],
        count=status["count"],
        message=None if status["connected"] else "No integrations found",
        integrations=[IntegrationResponse.from_entity(i) for i in status["integrations"]],
    )


@router.get("/{user_id}", response_model=IntegrationListResponse)
def get_user_integrations(
    user_id: str,
    service: IntegrationService = Depends(get_integration_service),
):
    integrations = service.list_integrations(user_id)
    return IntegrationListResponse(
        count=len(integrations),
        data=[IntegrationResponse.from_entity(i) for i in integrations],
    )


@router.delete("/{user_id}/{provider}", response_model=MessageResponse)
def disconnect_integration(
    user_id: str,
    provider: str,
    service: IntegrationService = Depends(get_integration_service),
):
    service.disconnect(user_id, provider)
    return MessageResponse(message="Integration disconnected successfully")
