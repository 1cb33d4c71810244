from __future__ import annotations

"""Base repository pattern for MongoDB operations"""

from abc import ABC
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.entities.base import BaseEntity, utc_now
from app.services.errors import PersistenceError

T = TypeVar("T", bound=BaseEntity)


class BaseRepository(ABC, Generic[T]):
    """Base repository providing common CRUD operations for MongoDB collections"""

    def __init__(self, db: Database, collection_name: str, model_class: Type[T]):
        self.db = db
        self.collection: Collection = db[collection_name]
        self.model_class = model_class

    def find_by_id(self, entity_id: str | ObjectId) -> Optional[T]:
        """Find a document by its ID"""
        identifier = self._to_object_id(entity_id)
        if identifier is None:
            return None
        doc = self.collection.find_one({"_id": identifier})
        return self._to_model(doc)

    def find_one(self, query: Dict[str, Any]) -> Optional[T]:
        """Find a single document matching the query"""
        doc = self.collection.find_one(query)
        return self._to_model(doc)

    def find_many(
        self,
        query: Dict[str, Any],
        sort: Optional[List[tuple]] = None,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[Dict[str, Any]] = None,
    ) -> List[T]:
        """Find multiple documents matching the query"""
        cursor = self.collection.find(query, projection)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [self._to_model(doc) for doc in cursor if doc]

    def paginate(
        self,
        query: Dict[str, Any],
        sort: Optional[List[tuple]] = None,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[Dict[str, Any]] = None,
    ) -> tuple[List[T], int]:
        """Return paginated results plus total count for the query."""
        items = self.find_many(
            query, sort=sort, skip=skip, limit=limit, projection=projection
        )
        total = self.count(query)
        return items, total

    def insert_one(self, document: T) -> T:
        """Insert a single document"""
        doc_dict = document.to_mongo()
        try:
            result = self.collection.insert_one(doc_dict)
        except PyMongoError as exc:
            raise PersistenceError(
                f"Failed to insert into {self.collection.name}: {exc}"
            ) from exc
        doc_dict["_id"] = result.inserted_id
        return self._to_model(doc_dict)

    def save(self, entity: T) -> T:
        """
        Persist the whole aggregate.

        Replaces the stored document by ``_id``; entities without an id are
        inserted instead.
        """
        if entity.id is None:
            return self.insert_one(entity)

        entity.updated_at = utc_now()
        try:
            self.collection.replace_one({"_id": entity.id}, entity.to_mongo())
        except PyMongoError as exc:
            raise PersistenceError(
                f"Failed to save {self.collection.name} document {entity.id}: {exc}"
            ) from exc
        return entity

    def update_one(self, entity_id: str | ObjectId, updates: Dict[str, Any]) -> Optional[T]:
        """Update a document by ID"""
        identifier = self._to_object_id(entity_id)
        if identifier is None:
            return None
        try:
            self.collection.update_one({"_id": identifier}, {"$set": updates})
        except PyMongoError as exc:
            raise PersistenceError(
                f"Failed to update {self.collection.name} document {identifier}: {exc}"
            ) from exc
        return self.find_by_id(identifier)

    def delete_one_by_query(self, query: Dict[str, Any]) -> bool:
        """Delete the first document matching the query"""
        try:
            result = self.collection.delete_one(query)
        except PyMongoError as exc:
            raise PersistenceError(
                f"Failed to delete from {self.collection.name}: {exc}"
            ) from exc
        return result.deleted_count > 0

    def count(self, query: Dict[str, Any] = None) -> int:
        """Count documents matching the query"""
        if query is None:
            query = {}
        return self.collection.count_documents(query)

    def upsert_one(
        self,
        query: Dict[str, Any],
        data: Dict[str, Any],
    ) -> T:
        """
        Insert or update a document matching the query.

        Args:
            query: Natural-key filter to find the existing document
            data: Fields to set (merged with query fields on insert)

        Returns:
            The upserted/updated document as model
        """
        now = utc_now()
        update_data = {**query, **data, "updated_at": now}
        try:
            doc = self.collection.find_one_and_update(
                query,
                {"$set": update_data, "$setOnInsert": {"created_at": now}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise PersistenceError(
                f"Failed to upsert into {self.collection.name}: {exc}"
            ) from exc
        return self._to_model(doc)

    def _to_model(self, doc: Optional[Dict[str, Any]]) -> Optional[T]:
        """Convert a dictionary to a model instance"""
        if not doc:
            return None
        return self.model_class.model_validate(doc)

    @staticmethod
    def _to_object_id(value: str | ObjectId | None) -> ObjectId | None:
        """Convert a string ID to ObjectId"""
        if value is None:
            return None
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, str):
            try:
                return ObjectId(value)
            except (InvalidId, TypeError):
                return None
        return None
