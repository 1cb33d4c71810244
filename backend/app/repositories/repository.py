"""Repository repository for database operations"""

from typing import Any, Dict, List, Optional

from pymongo.database import Database

from app.entities.base import utc_now
from app.entities.repository import Repository
from app.repositories.base import BaseRepository

# Embedded child collections left out of list views
CHILD_COLLECTIONS = ("commits", "pull_requests", "issues")
LIST_PROJECTION = {field: 0 for field in CHILD_COLLECTIONS}


class RepositoryRepository(BaseRepository[Repository]):
    """Repository for mirrored repository aggregates (yes, repo of repos!)"""

    def __init__(self, db: Database) -> None:
        super().__init__(db, "repositories", Repository)

    def find_by_name(
        self, user_id: str, organization_login: str, name: str
    ) -> Optional[Repository]:
        return self.find_one(
            {"user_id": user_id, "organization_login": organization_login, "name": name}
        )

    def find_by_owner(self, user_id: str, owner: str, name: str) -> Optional[Repository]:
        """Find a repository whose organization or GitHub owner login is ``owner``."""
        return self.find_one(
            {
                "user_id": user_id,
                "name": name,
                "$or": [{"organization_login": owner}, {"owner.login": owner}],
            }
        )

    def list_by_organization(
        self, user_id: str, organization_login: str
    ) -> List[Repository]:
        """List an organization's repositories without their child collections."""
        return self.find_many(
            {"user_id": user_id, "organization_login": organization_login},
            sort=[("last_synced_at", -1)],
            projection=LIST_PROJECTION,
        )

    def upsert_base(
        self,
        user_id: str,
        organization_login: str,
        name: str,
        data: Dict[str, Any],
    ) -> Repository:
        """
        Upsert the repository's own fields by (user, organization, name).

        Embedded commits, pull requests and issues are never part of ``data``,
        so re-syncing a repository keeps everything merged so far.
        """
        fields = {k: v for k, v in data.items() if k not in CHILD_COLLECTIONS}
        return self.upsert_one(
            {"user_id": user_id, "organization_login": organization_login, "name": name},
            {**fields, "last_synced_at": utc_now()},
        )
