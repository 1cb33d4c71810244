"""Integration repository for provider connections"""

from typing import Any, Dict, List, Optional

from pymongo.database import Database

from app.entities.base import utc_now
from app.entities.enums import IntegrationStatus, Provider
from app.entities.integration import Integration
from app.repositories.base import BaseRepository


class IntegrationRepository(BaseRepository[Integration]):
    """Repository for Integration entities - one per (user, provider)."""

    def __init__(self, db: Database) -> None:
        super().__init__(db, "github_integrations", Integration)

    def find_active(
        self, user_id: str, provider: str = Provider.GITHUB.value
    ) -> Optional[Integration]:
        """Find the active integration used to call the provider API."""
        return self.find_one(
            {
                "user_id": user_id,
                "provider": provider,
                "status": IntegrationStatus.ACTIVE.value,
            }
        )

    def list_by_user(
        self, user_id: str, provider: Optional[str] = None
    ) -> List[Integration]:
        query: Dict[str, Any] = {"user_id": user_id}
        if provider:
            query["provider"] = provider
        return self.find_many(query, sort=[("connected_at", -1)])

    def find_or_create(self, data: Dict[str, Any]) -> Integration:
        """
        Create the integration or overwrite an existing one for the same
        (user, provider), marking it active again.
        """
        provider = data.get("provider") or Provider.GITHUB.value
        query = {"user_id": data["user_id"], "provider": provider}
        updates = {
            **data,
            "provider": provider,
            "status": IntegrationStatus.ACTIVE.value,
            "last_synced_at": utc_now(),
        }
        return self.upsert_one(query, updates)

    def delete_by_provider(self, user_id: str, provider: str) -> bool:
        return self.delete_one_by_query({"user_id": user_id, "provider": provider})
