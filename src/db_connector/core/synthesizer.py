"""SQL text synthesis from table, insert and where descriptions.

Every method is a pure function of its arguments: nothing here touches a
connection. Identifiers are checked against an allow-list and quoted with
backticks; values are bind parameters except where the statement grammar
has no placeholder (DDL defaults, bulk-load paths), in which case they are
rendered through :func:`quote_literal`.
"""

import re
from typing import Any, Iterable, Optional, Union

from db_connector.exceptions import (
    InvalidIdentifierError,
    InvalidSchemaError,
    UnsupportedOperationError,
)
from db_connector.models.statements import Statement
from db_connector.models.table import Column, ColumnType, TableSpec

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")

# Default expressions passed through unquoted
BARE_DEFAULTS = {"NULL", "TRUE", "FALSE", "CURRENT_TIMESTAMP", "CURRENT_DATE"}

NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def quote_identifier(name: str) -> str:
    """Validate a table/column name and wrap it in backticks."""
    if not isinstance(name, str) or not IDENTIFIER_PATTERN.match(name):
        raise InvalidIdentifierError(str(name))
    return f"`{name}`"


def quote_literal(value: Any, backslash_escapes: bool = False) -> str:
    """
    Render a value as a single-quoted SQL string literal.

    Single quotes are doubled, backslashes are doubled for dialects that treat
    them as escape characters, and colons are escaped so the text survives
    SQLAlchemy's ``text()`` bind-parameter parsing.
    """
    text_value = str(value)
    if backslash_escapes:
        text_value = text_value.replace("\\", "\\\\")
    text_value = text_value.replace("'", "''").replace(":", "\\:")
    return f"'{text_value}'"


def render_default(value: Any, backslash_escapes: bool = False) -> str:
    """Render a column default: numbers and keywords bare, anything else quoted."""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)

    text_value = str(value).strip()
    if NUMBER_PATTERN.match(text_value) or text_value.upper() in BARE_DEFAULTS:
        return text_value
    # Already-quoted literal
    if len(text_value) >= 2 and text_value[0] == text_value[-1] == "'":
        text_value = text_value[1:-1].replace("''", "'")
    return quote_literal(text_value, backslash_escapes)


class SQLSynthesizer:
    """Builds MySQL-flavoured statements from descriptors."""

    dialect = "mysql"

    # Whether CREATE TABLE carries DEFAULT clauses itself
    inline_defaults = False

    # MySQL string literals treat backslash as an escape character
    backslash_escapes = True

    def create_table(self, table: TableSpec) -> Statement:
        """
        Build the CREATE TABLE statement for a table description.

        Args:
            table: Table description

        Returns:
            Statement with one column clause per column, in declaration order

        Raises:
            InvalidSchemaError: If the table declares no columns
        """
        if not table.columns:
            raise InvalidSchemaError(f"There are no columns for table {table.name}.")

        clauses = [self._column_clause(column) for column in table.columns]

        sql = f"CREATE TABLE {quote_identifier(table.name)} (\n\t"
        sql += ",\n\t".join(clauses)
        if table.primary_key is not None:
            sql += f",\n\tPRIMARY KEY ({quote_identifier(table.primary_key)})"
        sql += "\n);"
        return Statement(sql=sql)

    def _column_clause(self, column: Column) -> str:
        # Length is emitted for every type, including ones that ignore it
        clause = f"{quote_identifier(column.name)} {column.type.value}({column.length})"
        if not column.allow_null:
            clause += " NOT NULL"
        if self.inline_defaults and column.default_value is not None:
            clause += f" DEFAULT {render_default(column.default_value, self.backslash_escapes)}"
        return clause

    def insert(self, table: str, columns: Iterable[str]) -> Statement:
        """
        Build a parameterized INSERT for the given column order.

        Placeholders are named ``v0 .. vN-1`` in the same order as ``columns``;
        use :meth:`insert_params` to bind values positionally.
        """
        columns = list(columns)
        if not columns:
            raise InvalidSchemaError(f"No values to insert into table {table}.")

        column_list = ", ".join(quote_identifier(column) for column in columns)
        placeholders = ", ".join(f":v{i}" for i in range(len(columns)))
        sql = (
            f"INSERT INTO {quote_identifier(table)} ({column_list}) "
            f"VALUES ({placeholders});"
        )
        return Statement(sql=sql)

    def insert_params(self, values: Iterable[Any]) -> dict[str, Any]:
        """Positional values -> bind parameters for :meth:`insert`."""
        return {f"v{i}": value for i, value in enumerate(values)}

    def insert_row(self, table: str, row: dict[str, Any]) -> Statement:
        """INSERT statement with its parameters already bound."""
        statement = self.insert(table, row.keys())
        return Statement(sql=statement.sql, params=self.insert_params(row.values()))

    def select_all(self, table: str) -> Statement:
        return Statement(sql=f"SELECT * FROM {quote_identifier(table)};")

    def select_where(self, table: str, key: str, value: Any) -> Statement:
        sql = f"SELECT * FROM {quote_identifier(table)} WHERE {quote_identifier(key)} = :value;"
        return Statement(sql=sql, params={"value": value})

    def delete(self, table: str, key: str, value: Any) -> Statement:
        sql = f"DELETE FROM {quote_identifier(table)} WHERE {quote_identifier(key)} = :value;"
        return Statement(sql=sql, params={"value": value})

    def update(
        self, table: str, key: str, value: Any, column: str, new_value: Any
    ) -> Statement:
        """UPDATE one column of the rows where ``key = value``."""
        sql = (
            f"UPDATE {quote_identifier(table)} SET {quote_identifier(column)} = :new_value "
            f"WHERE {quote_identifier(key)} = :value;"
        )
        return Statement(sql=sql, params={"new_value": new_value, "value": value})

    def alter_add_column(
        self,
        table: str,
        column: str,
        column_type: Union[ColumnType, str],
        length: int = 255,
    ) -> Statement:
        column_type = ColumnType(column_type)
        if length < 1:
            raise InvalidSchemaError(f"Column length must be positive, got {length}")
        sql = (
            f"ALTER TABLE {quote_identifier(table)} "
            f"ADD {quote_identifier(column)} {column_type.value}({length});"
        )
        return Statement(sql=sql)

    def alter_drop_column(self, table: str, column: str) -> Statement:
        sql = f"ALTER TABLE {quote_identifier(table)} DROP COLUMN {quote_identifier(column)};"
        return Statement(sql=sql)

    def rename_column(self, table: str, old_name: str, new_name: str) -> Statement:
        sql = (
            f"ALTER TABLE {quote_identifier(table)} "
            f"RENAME COLUMN {quote_identifier(old_name)} TO {quote_identifier(new_name)};"
        )
        return Statement(sql=sql)

    def drop_table(self, table: str) -> Statement:
        return Statement(sql=f"DROP TABLE {quote_identifier(table)};")

    def drop_table_if_exists(self, table: str) -> Statement:
        return Statement(sql=f"DROP TABLE IF EXISTS {quote_identifier(table)};")

    def replace_primary_key(self, table: str, primary_key: str) -> Statement:
        sql = (
            f"ALTER TABLE {quote_identifier(table)} DROP PRIMARY KEY, "
            f"ADD PRIMARY KEY ({quote_identifier(primary_key)});"
        )
        return Statement(sql=sql)

    def copy_into(self, table: str, copy_from: str) -> Statement:
        sql = f"INSERT INTO {quote_identifier(table)} SELECT * FROM {quote_identifier(copy_from)};"
        return Statement(sql=sql)

    def describe(self, table: str) -> Statement:
        return Statement(sql=f"DESCRIBE {quote_identifier(table)};")

    def describe_column(self, table: str, column: str) -> Statement:
        return Statement(
            sql=f"DESCRIBE {quote_identifier(table)} {quote_identifier(column)};"
        )

    def count_rows(self, table: str) -> Statement:
        return Statement(sql=f"SELECT COUNT(*) FROM {quote_identifier(table)};")

    def show_tables(self) -> Statement:
        return Statement(sql="SHOW TABLES;")

    def set_default(self, table: str, column: str, value: Any) -> Statement:
        sql = (
            f"ALTER TABLE {quote_identifier(table)} ALTER {quote_identifier(column)} "
            f"SET DEFAULT {render_default(value, self.backslash_escapes)};"
        )
        return Statement(sql=sql)

    def load_data(self, table: str, file_path: str) -> Statement:
        sql = f"LOAD DATA INFILE {quote_literal(file_path, self.backslash_escapes)} INTO TABLE {quote_identifier(table)};"
        return Statement(sql=sql)

    def default_statements(self, table: TableSpec) -> list[Statement]:
        """Follow-up SET DEFAULT statements for the columns that declare one."""
        if self.inline_defaults:
            return []
        return [
            self.set_default(table.name, column.name, column.default_value)
            for column in table.columns
            if column.default_value is not None
        ]

    def _unsupported(self, operation: str, hint: Optional[str] = None) -> UnsupportedOperationError:
        message = f"{operation} is not supported by the {self.dialect} dialect"
        if hint:
            message += f" ({hint})"
        return UnsupportedOperationError(message)


class SQLiteSynthesizer(SQLSynthesizer):
    """SQLite spellings for the statements MySQL syntax does not cover."""

    dialect = "sqlite"
    inline_defaults = True
    backslash_escapes = False

    def describe(self, table: str) -> Statement:
        quote_identifier(table)
        return Statement(sql=f"SELECT * FROM pragma_table_info({quote_literal(table)});")

    def describe_column(self, table: str, column: str) -> Statement:
        quote_identifier(table)
        sql = (
            f"SELECT * FROM pragma_table_info({quote_literal(table)}) "
            "WHERE name = :column;"
        )
        return Statement(sql=sql, params={"column": column})

    def show_tables(self) -> Statement:
        return Statement(
            sql=(
                "SELECT name FROM sqlite_master "
                "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
                "ORDER BY name;"
            )
        )

    def set_default(self, table: str, column: str, value: Any) -> Statement:
        raise self._unsupported(
            "ALTER COLUMN ... SET DEFAULT", "declare defaults when creating the table"
        )

    def replace_primary_key(self, table: str, primary_key: str) -> Statement:
        raise self._unsupported("Replacing a primary key", "rebuild the table instead")

    def load_data(self, table: str, file_path: str) -> Statement:
        raise self._unsupported("LOAD DATA INFILE")
