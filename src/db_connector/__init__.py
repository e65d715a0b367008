"""db-connector: a small persistence layer for MySQL and SQLite.

Tables are described with pydantic models, statements are synthesized from
those descriptions and run over one connection per ``Database``, and
annotated Python types are marshalled to and from rows.

Example::

    from db_connector import Column, ColumnType, Database, TableSpec

    with Database.from_file("game.db") as db:
        db.create_table(
            TableSpec(name="players", primary_key="name")
            .add_column(ColumnType.VARCHAR, "name")
            .add_column(Column(type=ColumnType.INT, name="score", length=11))
        )
        db.insert("players", {"name": "Ann", "score": 12})
        db.get("players", "name", "Ann", "score")
"""

__version__ = "0.1.0"

from db_connector.database import Database
from db_connector.exceptions import (
    DatabaseError,
    ExecutionError,
    ExportError,
    IllegalStateError,
    InvalidIdentifierError,
    InvalidSchemaError,
    MarshalAbortError,
    MarshalError,
    MissingColumnError,
    NoDesignatedConstructorError,
    UnboundParameterError,
    UnsupportedOperationError,
)
from db_connector.models import (
    Column,
    ColumnBinding,
    ColumnType,
    DatabaseConfig,
    InsertSpec,
    LoginSpec,
    NotPersisted,
    QueryResult,
    TableSpec,
    WhereSpec,
    designated_constructor,
)

__all__ = [
    "Column",
    "ColumnBinding",
    "ColumnType",
    "Database",
    "DatabaseConfig",
    "DatabaseError",
    "ExecutionError",
    "ExportError",
    "IllegalStateError",
    "InsertSpec",
    "InvalidIdentifierError",
    "InvalidSchemaError",
    "LoginSpec",
    "MarshalAbortError",
    "MarshalError",
    "MissingColumnError",
    "NoDesignatedConstructorError",
    "NotPersisted",
    "QueryResult",
    "TableSpec",
    "UnboundParameterError",
    "UnsupportedOperationError",
    "WhereSpec",
    "designated_constructor",
    "__version__",
]
