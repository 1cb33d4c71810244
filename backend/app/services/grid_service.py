"""
Paginated, sortable, searchable views over stored organizations and repositories.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional, Union

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from app.config import settings
from app.grid.columns import SCHEMA_VERSION, get_columns, sortable_fields
from app.repositories.base import BaseRepository
from app.repositories.organization import OrganizationRepository
from app.repositories.repository import (
    CHILD_COLLECTIONS,
    LIST_PROJECTION,
    RepositoryRepository,
)
from app.services.errors import ValidationError, require_fields

logger = logging.getLogger(__name__)

COLLECTIONS: Dict[str, Dict[str, Any]] = {
    "organizations": {
        "label": "Organizations",
        "description": "GitHub organizations and user accounts",
        "search_fields": ["login", "name", "description"],
        "projection": None,
        "row_exclude": None,
    },
    "repositories": {
        "label": "Repositories",
        "description": "GitHub repositories with commits, pulls, and issues",
        "search_fields": [
            "name",
            "full_name",
            "description",
            "language",
            "organization_login",
        ],
        "projection": LIST_PROJECTION,
        "row_exclude": set(CHILD_COLLECTIONS),
    },
}

DEFAULT_SORT_FIELD = "last_synced_at"


def _contains(value: str) -> Dict[str, str]:
    """Case-insensitive literal substring match."""
    return {"$regex": re.escape(value), "$options": "i"}


def parse_filters(filters: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
    """Decode the ``filters`` JSON object; malformed input is logged and ignored."""
    if not filters:
        return {}
    if isinstance(filters, dict):
        return filters
    try:
        parsed = json.loads(filters)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to parse grid filters {filters!r}: {e}")
        return {}
    if not isinstance(parsed, dict):
        logger.warning(f"Ignoring grid filters that are not an object: {filters!r}")
        return {}
    return parsed


def build_query(
    user_id: str,
    search_fields: List[str],
    search: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {"user_id": user_id}

    for field, value in (filters or {}).items():
        if value is None or value == "":
            continue
        if field == "user_id" or field.startswith("$"):
            continue
        # Non-string values match exactly, never as query operators
        query[field] = _contains(value) if isinstance(value, str) else {"$eq": value}

    if search:
        query["$or"] = [{field: _contains(search)} for field in search_fields]

    return query


def build_pagination(page: int, page_size: int, total_count: int) -> Dict[str, Any]:
    total_pages = math.ceil(total_count / page_size) if page_size else 0
    return {
        "page": page,
        "page_size": page_size,
        "total_count": total_count,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }


class GridService:
    def __init__(self, db: Database):
        self.db = db
        self._repositories: Dict[str, BaseRepository] = {
            "organizations": OrganizationRepository(db),
            "repositories": RepositoryRepository(db),
        }

    @staticmethod
    def _validate_collection(collection: str) -> Dict[str, Any]:
        if collection not in COLLECTIONS:
            raise ValidationError(
                f"Invalid collection. Must be one of: {', '.join(COLLECTIONS)}"
            )
        return COLLECTIONS[collection]

    def list_collections(self, user_id: str) -> List[Dict[str, Any]]:
        require_fields({"userId": user_id}, ["userId"])
        return [
            {
                "name": name,
                "label": config["label"],
                "count": self._repositories[name].count({"user_id": user_id}),
                "description": config["description"],
            }
            for name, config in COLLECTIONS.items()
        ]

    def get_schema(self, collection: str, user_id: str) -> Dict[str, Any]:
        require_fields({"userId": user_id}, ["userId"])
        self._validate_collection(collection)
        return {
            "collection": collection,
            "version": SCHEMA_VERSION,
            "fields": get_columns(collection),
        }

    def get_grid_data(
        self,
        collection: str,
        user_id: str,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_order: str = "asc",
        search: Optional[str] = None,
        filters: Union[str, Dict[str, Any], None] = None,
    ) -> Dict[str, Any]:
        require_fields({"userId": user_id}, ["userId"])
        config = self._validate_collection(collection)

        page = max(int(page or 1), 1)
        page_size = int(page_size or settings.GRID_DEFAULT_PAGE_SIZE)
        page_size = min(max(page_size, 1), settings.GRID_MAX_PAGE_SIZE)

        query = build_query(user_id, config["search_fields"], search, parse_filters(filters))

        if sort_field:
            if sort_field not in sortable_fields(collection):
                raise ValidationError(f"Cannot sort {collection} by {sort_field}")
            sort = [(sort_field, DESCENDING if sort_order == "desc" else ASCENDING)]
        else:
            sort = [(DEFAULT_SORT_FIELD, DESCENDING)]

        rows, total_count = self._repositories[collection].paginate(
            query,
            sort=sort,
            skip=(page - 1) * page_size,
            limit=page_size,
            projection=config["projection"],
        )

        return {
            "data": [
                row.model_dump(mode="json", exclude=config["row_exclude"]) for row in rows
            ],
            "pagination": build_pagination(page, page_size, total_count),
            "collection": collection,
        }
