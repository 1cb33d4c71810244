"""OAuth state repository - one-shot tokens for the authorization round trip"""

from typing import Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from app.entities.base import utc_now
from app.entities.oauth_state import OAuthState
from app.repositories.base import BaseRepository


class OAuthStateRepository(BaseRepository[OAuthState]):
    def __init__(self, db: Database) -> None:
        super().__init__(db, "oauth_states", OAuthState)

    def create_state(self, state: str, user_id: str) -> OAuthState:
        return self.insert_one(OAuthState(state=state, user_id=user_id))

    def consume(self, state: str) -> Optional[OAuthState]:
        """Atomically mark an unused state as used and return it."""
        now = utc_now()
        doc = self.collection.find_one_and_update(
            {"state": state, "used": False},
            {"$set": {"used": True, "used_at": now, "updated_at": now}},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)
