"""
Column descriptors for the grid views of stored collections.

The tables are written out by hand next to the entity definitions and carry
a version that must be bumped whenever a column is added, removed or
retyped. Internal bookkeeping (``_id``, ``user_id``, ``created_at``,
``updated_at``) is never exposed as a column. Nested objects list their
sub-fields as dotted ``children``.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_VERSION = 1

EXCLUDED_FIELDS = frozenset({"_id", "id", "user_id", "created_at", "updated_at"})


class ColumnDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    field: str
    header_name: str = Field(..., alias="headerName")
    type: str = "string"  # string, number, boolean, date, object, array
    sortable: bool = True
    filter: bool = True
    children: Optional[List["ColumnDescriptor"]] = None


def _header(path: str) -> str:
    return path.rsplit(".", 1)[-1].replace("_", " ").title()


def column(path: str, type_: str = "string") -> ColumnDescriptor:
    is_array = type_ == "array"
    return ColumnDescriptor(
        field=path,
        header_name=_header(path),
        type=type_,
        sortable=not is_array,
        filter=not is_array,
    )


def object_column(path: str, children: Dict[str, str]) -> ColumnDescriptor:
    descriptor = column(path, "object")
    descriptor.children = [
        column(f"{path}.{name}", type_) for name, type_ in children.items()
    ]
    return descriptor


ORGANIZATION_COLUMNS: List[ColumnDescriptor] = [
    column("github_id", "number"),
    column("login"),
    column("name"),
    column("description"),
    column("avatar_url"),
    column("html_url"),
    column("type"),
    object_column(
        "metadata",
        {
            "company": "string",
            "blog": "string",
            "location": "string",
            "email": "string",
            "public_repos": "number",
            "public_gists": "number",
            "followers": "number",
            "following": "number",
            "created_at": "date",
            "updated_at": "date",
        },
    ),
    column("members", "array"),
    column("repository_count", "number"),
    column("last_synced_at", "date"),
    column("sync_status"),
    column("sync_error"),
]

REPOSITORY_COLUMNS: List[ColumnDescriptor] = [
    column("organization_login"),
    column("github_id", "number"),
    column("name"),
    column("full_name"),
    column("description"),
    object_column(
        "owner", {"login": "string", "avatar_url": "string", "type": "string"}
    ),
    column("html_url"),
    column("private", "boolean"),
    column("language"),
    column("default_branch"),
    object_column(
        "stats",
        {
            "stargazers_count": "number",
            "watchers_count": "number",
            "forks_count": "number",
            "open_issues_count": "number",
            "size": "number",
        },
    ),
    object_column(
        "github_timestamps",
        {"created_at": "date", "updated_at": "date", "pushed_at": "date"},
    ),
    column("topics", "array"),
    column("commits", "array"),
    column("pull_requests", "array"),
    column("issues", "array"),
    object_column(
        "data_counts",
        {"commits": "number", "pull_requests": "number", "issues": "number"},
    ),
    column("last_synced_at", "date"),
    column("sync_status"),
    object_column(
        "sync_details",
        {
            "commits": "object",
            "pull_requests": "object",
            "issues": "object",
        },
    ),
    column("sync_error"),
]

COLUMN_TABLES: Dict[str, List[ColumnDescriptor]] = {
    "organizations": ORGANIZATION_COLUMNS,
    "repositories": REPOSITORY_COLUMNS,
}


def get_columns(collection: str) -> List[ColumnDescriptor]:
    """Return the column table for ``collection``; KeyError for unknown names."""
    return COLUMN_TABLES[collection]


def sortable_fields(collection: str) -> frozenset:
    """Dotted paths of every sortable column, nested children included."""
    fields = set()
    pending = list(get_columns(collection))
    while pending:
        descriptor = pending.pop()
        if descriptor.sortable:
            fields.add(descriptor.field)
        pending.extend(descriptor.children or [])
    return frozenset(fields)
