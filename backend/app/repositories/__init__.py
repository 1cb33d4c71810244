"""Repository layer for database operations"""

from .base import BaseRepository
from .integration import IntegrationRepository
from .oauth_state import OAuthStateRepository
from .organization import OrganizationRepository
from .repository import RepositoryRepository

__all__ = [
    "BaseRepository",
    "IntegrationRepository",
    "OAuthStateRepository",
    "OrganizationRepository",
    "RepositoryRepository",
]
