from .columns import (
    COLUMN_TABLES,
    EXCLUDED_FIELDS,
    SCHEMA_VERSION,
    ColumnDescriptor,
    get_columns,
)

__all__ = [
    "COLUMN_TABLES",
    "EXCLUDED_FIELDS",
    "SCHEMA_VERSION",
    "ColumnDescriptor",
    "get_columns",
]
