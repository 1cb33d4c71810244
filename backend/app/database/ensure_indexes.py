"""Database index management for MongoDB collections."""

import logging
from typing import List, Tuple

from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import OperationFailure

logger = logging.getLogger(__name__)


def ensure_indexes(db: Database) -> None:
    """
    Ensure all required indexes exist.

    The unique compound indexes enforce the natural key of each
    aggregate: one integration per (user, provider), one organization per
    (user, login) and one repository per (user, organization login, name).
    """
    _ensure_integration_indexes(db)
    _ensure_oauth_state_indexes(db)
    _ensure_organization_indexes(db)
    _ensure_repository_indexes(db)
    logger.info("Database indexes ensured successfully")


def _create_index(
    collection: Collection,
    keys: List[Tuple[str, int]],
    name: str,
    **options,
) -> None:
    try:
        collection.create_index(keys, name=name, background=True, **options)
        logger.debug(f"Created index: {name}")
    except OperationFailure as e:
        # Index may already exist with different options
        if "already exists" not in str(e):
            logger.warning(f"Failed to create {name} index: {e}")


def _ensure_integration_indexes(db: Database) -> None:
    """Create indexes for github_integrations collection."""
    _create_index(
        db.github_integrations,
        [("user_id", 1), ("provider", 1)],
        name="user_provider_unique",
        unique=True,
    )


def _ensure_oauth_state_indexes(db: Database) -> None:
    """Create indexes for oauth_states collection."""
    _create_index(db.oauth_states, [("state", 1)], name="state_unique", unique=True)


def _ensure_organization_indexes(db: Database) -> None:
    """Create indexes for organizations collection."""
    collection = db.organizations

    _create_index(
        collection,
        [("user_id", 1), ("login", 1)],
        name="user_login_unique",
        unique=True,
    )
    _create_index(
        collection,
        [("user_id", 1), ("github_id", 1)],
        name="user_github_id_idx",
    )
    _create_index(
        collection,
        [("user_id", 1), ("last_synced_at", -1)],
        name="user_last_synced_idx",
    )


def _ensure_repository_indexes(db: Database) -> None:
    """Create indexes for repositories collection."""
    collection = db.repositories

    # Business key deduplication: re-syncing the same repo updates in place
    _create_index(
        collection,
        [("user_id", 1), ("organization_login", 1), ("name", 1)],
        name="user_org_name_unique",
        unique=True,
    )
    _create_index(
        collection,
        [("user_id", 1), ("github_id", 1)],
        name="user_github_id_idx",
    )
    _create_index(
        collection,
        [("user_id", 1), ("owner.login", 1), ("name", 1)],
        name="user_owner_name_idx",
    )
    _create_index(
        collection,
        [("user_id", 1), ("last_synced_at", -1)],
        name="user_last_synced_idx",
    )
