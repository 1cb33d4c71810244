"""Generic grid endpoints over stored organizations and repositories."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from app.database.mongo import get_db
from app.dtos import CollectionSchemaResponse, CollectionsResponse, GridDataResponse
from app.services.grid_service import GridService

router = APIRouter(prefix="/integrations/github", tags=["Grid"])


def get_grid_service(db: Database = Depends(get_db)) -> GridService:
    return GridService(db)


@router.get("/collections", response_model=CollectionsResponse)
def list_collections(
    user_id: Optional[str] = Query(None, alias="userId"),
    service: GridService = Depends(get_grid_service),
):
    return CollectionsResponse(collections=service.list_collections(user_id))


@router.get("/collection-schema/{collection}", response_model=CollectionSchemaResponse)
def get_collection_schema(
    collection: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    service: GridService = Depends(get_grid_service),
):
    """Column descriptors for a collection, from the versioned column table."""
    return CollectionSchemaResponse(**service.get_schema(collection, user_id))


@router.get("/grid-data/{collection}", response_model=GridDataResponse)
def get_grid_data(
    collection: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    sort_field: Optional[str] = Query(None, alias="sortField"),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    search: Optional[str] = Query(None),
    filters: Optional[str] = Query(None, description="JSON object of field filters"),
    service: GridService = Depends(get_grid_service),
):
    """
    Paginated rows of a stored collection.

    String filter values match as case-insensitive substrings, other values
    match exactly; ``search`` is OR-ed across the collection's text fields.
    """
    result = service.get_grid_data(
        collection,
        user_id,
        page=page,
        page_size=page_size,
        sort_field=sort_field,
        sort_order=sort_order,
        search=search,
        filters=filters,
    )
    return GridDataResponse(**result)
