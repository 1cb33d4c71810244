"""Data Transfer Objects (DTOs) for API requests and responses"""

from .github import (
    DataResponse,
    ListResponse,
    SyncOrgRepositoriesRequest,
    SyncRepositoryRequest,
    SyncResponse,
    TimelineSyncResponse,
    UserScopedRequest,
    to_payload,
)
from .grid import (
    CollectionInfo,
    CollectionSchemaResponse,
    CollectionsResponse,
    GridDataResponse,
    Pagination,
)
from .integration import (
    GithubAuthUrlResponse,
    IntegrationListResponse,
    IntegrationResponse,
    IntegrationStatusResponse,
    MessageResponse,
)

__all__ = [
    # GitHub data / sync
    "DataResponse",
    "ListResponse",
    "SyncOrgRepositoriesRequest",
    "SyncRepositoryRequest",
    "SyncResponse",
    "TimelineSyncResponse",
    "UserScopedRequest",
    "to_payload",
    # Grid
    "CollectionInfo",
    "CollectionSchemaResponse",
    "CollectionsResponse",
    "GridDataResponse",
    "Pagination",
    # Integrations
    "GithubAuthUrlResponse",
    "IntegrationListResponse",
    "IntegrationResponse",
    "IntegrationStatusResponse",
    "MessageResponse",
]
