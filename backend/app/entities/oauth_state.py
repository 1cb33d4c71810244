"""OAuth state entity - one-shot CSRF token binding a callback to a user."""

from datetime import datetime
from typing import Optional

from app.entities.base import BaseEntity


class OAuthState(BaseEntity):
    state: str
    user_id: str
    used: bool = False
    used_at: Optional[datetime] = None
