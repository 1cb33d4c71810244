"""Grid query DTOs."""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from app.grid.columns import ColumnDescriptor


class CollectionInfo(BaseModel):
    name: str
    label: str
    count: int
    description: str


class CollectionsResponse(BaseModel):
    success: bool = True
    collections: List[CollectionInfo]


class CollectionSchemaResponse(BaseModel):
    success: bool = True
    collection: str
    version: int
    fields: List[ColumnDescriptor]


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(..., alias="pageSize")
    total_count: int = Field(..., alias="totalCount")
    total_pages: int = Field(..., alias="totalPages")
    has_next_page: bool = Field(..., alias="hasNextPage")
    has_prev_page: bool = Field(..., alias="hasPrevPage")


class GridDataResponse(BaseModel):
    success: bool = True
    data: List[Dict[str, Any]]
    pagination: Pagination
    collection: str
