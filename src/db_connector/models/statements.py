"""Per-call statement descriptions: insert value sets and where-clauses."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class InsertSpec(BaseModel):
    """Target table plus an ordered column -> value mapping."""

    table: Optional[str] = Field(None, description="Table to insert into")
    values: dict[str, Any] = Field(
        default_factory=dict, description="Column values in insertion order"
    )

    def into(self, table: str) -> "InsertSpec":
        self.table = table
        return self

    def value(self, column: str, value: Any) -> "InsertSpec":
        self.values[column] = value
        return self


class WhereSpec(BaseModel):
    """Single ``key = value`` equality filter."""

    key: Optional[str] = Field(None, description="Column to compare")
    value: Any = Field(None, description="Value the column must equal")

    def where(self, key: str) -> "WhereSpec":
        self.key = key
        return self

    def equals(self, value: Any) -> "WhereSpec":
        self.value = value
        return self


class Statement(BaseModel):
    """Synthesized SQL text and the bind parameters it expects."""

    sql: str = Field(..., description="Statement text with :name placeholders")
    params: dict[str, Any] = Field(
        default_factory=dict, description="Bind parameters by placeholder name"
    )

    def __str__(self) -> str:
        return self.sql
