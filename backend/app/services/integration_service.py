import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from app.entities.integration import Integration
from app.repositories.integration import IntegrationRepository
from app.services.errors import NotFoundError, require_fields

logger = logging.getLogger(__name__)


class IntegrationService:
    def __init__(self, db: Database):
        self.db = db
        self.integrations = IntegrationRepository(db)

    def get_status(self, user_id: str, provider: Optional[str] = None) -> Dict[str, Any]:
        require_fields({"userId": user_id}, ["userId"])
        integrations = self.integrations.list_by_user(user_id, provider)
        return {
            "connected": bool(integrations),
            "count": len(integrations),
            "integrations": integrations,
        }

    def list_integrations(self, user_id: str) -> List[Integration]:
        require_fields({"userId": user_id}, ["userId"])
        return self.integrations.list_by_user(user_id)

    def disconnect(self, user_id: str, provider: str) -> None:
        require_fields({"userId": user_id, "provider": provider}, ["userId", "provider"])
        if not self.integrations.delete_by_provider(user_id, provider):
            raise NotFoundError("Integration not found")
        logger.info(f"Disconnected {provider} integration for user {user_id}")
