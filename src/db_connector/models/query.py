"""Query result model."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from db_connector.utils import convert_rows_to_json_safe


class QueryResult(BaseModel):
    """Materialized result of a row-returning statement."""

    query: str = Field(..., description="Executed SQL statement")
    rows: list[dict[str, Any]] = Field(..., description="Result rows as dictionaries")
    row_count: int = Field(..., description="Number of rows returned")
    columns: list[str] = Field(..., description="Column names in result order")
    execution_time_ms: Optional[float] = Field(
        None, description="Execution time in milliseconds"
    )

    @property
    def is_empty(self) -> bool:
        """Check if result set is empty."""
        return self.row_count == 0

    @property
    def column_count(self) -> int:
        """Get number of columns."""
        return len(self.columns)

    def first(self) -> Optional[dict[str, Any]]:
        """First row, or None for an empty result."""
        return self.rows[0] if self.rows else None

    def get_column_values(self, column: str) -> list[Any]:
        """Extract all values for a specific column."""
        return [row.get(column) for row in self.rows]

    def iter_values(self):
        """Yield each row's values in column order."""
        for row in self.rows:
            yield [row.get(column) for column in self.columns]

    def to_json_rows(self) -> list[dict[str, Any]]:
        """Rows converted to JSON-serializable values."""
        return convert_rows_to_json_safe(self.rows)

    def to_table_string(self, max_rows: int = 10) -> str:
        """Format result as a simple table string."""
        if self.is_empty:
            return "No rows returned"

        # Header
        result_lines = [" | ".join(self.columns)]
        result_lines.append("-" * len(result_lines[0]))

        # Rows (truncated if needed)
        for values in list(self.iter_values())[:max_rows]:
            result_lines.append(
                " | ".join("NULL" if value is None else str(value) for value in values)
            )

        if len(self.rows) > max_rows:
            result_lines.append(f"... ({self.row_count - max_rows} more rows)")

        return "\n".join(result_lines)
