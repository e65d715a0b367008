"""Table and column descriptors used to synthesize DDL."""

from enum import Enum
from typing import Optional, Union, overload

from pydantic import BaseModel, Field


class ColumnType(str, Enum):
    """Column types a table description can declare."""

    VARCHAR = "VARCHAR"
    INT = "INT"
    DOUBLE = "DOUBLE"
    BOOLEAN = "BOOLEAN"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    LONG = "LONG"
    BYTE = "BYTE"
    DECIMAL = "DECIMAL"
    BLOB = "BLOB"
    TINYINT = "TINYINT"

    def __str__(self) -> str:
        return self.value


class Column(BaseModel):
    """A single column of a table description."""

    type: ColumnType = Field(..., description="Column data type")
    name: str = Field(..., description="Column name")
    length: int = Field(default=255, ge=1, description="Parenthesized type length")
    allow_null: bool = Field(default=False, description="Whether NULL is allowed")
    default_value: Optional[str] = Field(
        None, description="Default value applied after the table is created"
    )


class TableSpec(BaseModel):
    """Description of a table: its name, ordered columns and primary key.

    The primary key, when set, must name one of the columns; that is left to
    the caller and not checked here.
    """

    name: str = Field(..., description="Table name")
    columns: list[Column] = Field(
        default_factory=list, description="Columns in declaration (DDL) order"
    )
    primary_key: Optional[str] = Field(None, description="Primary key column name")

    @overload
    def add_column(self, column: Column) -> "TableSpec": ...

    @overload
    def add_column(self, column: Union[ColumnType, str], name: str) -> "TableSpec": ...

    def add_column(self, column, name=None):
        """Append a column, either as a Column or as (type, name)."""
        if not isinstance(column, Column):
            if name is None:
                raise TypeError("add_column(type, name) requires a column name")
            column = Column(type=ColumnType(column), name=name)
        self.columns.append(column)
        return self

    @property
    def column_names(self) -> list[str]:
        """Column names in declaration order."""
        return [column.name for column in self.columns]

    def get_column(self, name: str) -> Optional[Column]:
        """Get a column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "users",
                    "columns": [
                        {"type": "INT", "name": "id"},
                        {"type": "VARCHAR", "name": "name", "length": 255},
                    ],
                    "primary_key": "id",
                }
            ]
        }
    }
