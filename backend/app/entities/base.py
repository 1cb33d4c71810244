"""Base entity and ObjectId helpers shared by all MongoDB documents."""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_object_id(v: Any) -> ObjectId:
    """Validate and convert a value to ObjectId."""
    if isinstance(v, ObjectId):
        return v
    if isinstance(v, str) and ObjectId.is_valid(v):
        return ObjectId(v)
    raise ValueError("Invalid ObjectId")


def validate_object_id_str(v: Any) -> str:
    """Validate and convert ObjectId to string."""
    if isinstance(v, ObjectId):
        return str(v)
    if isinstance(v, str) and ObjectId.is_valid(v):
        return v
    raise ValueError("Invalid ObjectId")


PyObjectId = Annotated[
    ObjectId,
    BeforeValidator(validate_object_id),
    PlainSerializer(str, return_type=str, when_used="json"),
]

PyObjectIdStr = Annotated[str, BeforeValidator(validate_object_id_str)]


class BaseEntity(BaseModel):
    """Common fields for documents persisted in MongoDB."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
        validate_default=True,
    )

    id: Optional[PyObjectId] = Field(None, alias="_id")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_mongo(self) -> Dict[str, Any]:
        """Dump to a MongoDB document, omitting ``_id`` when unset."""
        document = self.model_dump(by_alias=True, exclude={"id"})
        if self.id is not None:
            document["_id"] = self.id
        return document
