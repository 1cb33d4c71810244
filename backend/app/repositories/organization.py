"""Repository for mirrored GitHub organizations"""

from typing import Any, Dict, List, Optional

from pymongo.database import Database

from app.entities.base import utc_now
from app.entities.organization import Organization
from app.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    def __init__(self, db: Database) -> None:
        super().__init__(db, "organizations", Organization)

    def find_by_login(self, user_id: str, login: str) -> Optional[Organization]:
        return self.find_one({"user_id": user_id, "login": login})

    def list_by_user(self, user_id: str) -> List[Organization]:
        return self.find_many({"user_id": user_id}, sort=[("last_synced_at", -1)])

    def upsert_by_login(
        self, user_id: str, login: str, data: Dict[str, Any]
    ) -> Organization:
        """
        Upsert an organization by (user_id, login).

        ``data`` replaces every scalar field and the member list as given;
        nothing is merged with the stored document.
        """
        return self.upsert_one(
            {"user_id": user_id, "login": login},
            {**data, "last_synced_at": utc_now()},
        )

    def update_repository_count(
        self, user_id: str, login: str, count: int
    ) -> Optional[Organization]:
        organization = self.find_by_login(user_id, login)
        if not organization:
            return None
        return self.update_one(
            organization.id, {"repository_count": count, "updated_at": utc_now()}
        )
