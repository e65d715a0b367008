"""Catalog lookups using SQLAlchemy reflection."""

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError

from db_connector.core.connection import DatabaseConnection
from db_connector.exceptions import ExecutionError


class MetadataInspector:
    """Database metadata inspection using SQLAlchemy Inspector."""

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize metadata inspector.

        Args:
            connection: Database connection manager
        """
        self.connection = connection

    def table_exists(self, table_name: str) -> bool:
        """
        Check whether the catalog knows a table of this name.

        Args:
            table_name: Table name

        Returns:
            True if the table exists
        """
        with self.connection.lock:
            try:
                # Inspectors cache reflection results, so each lookup gets its own
                return sa_inspect(self.connection.connection).has_table(table_name)
            except SQLAlchemyError as e:
                raise ExecutionError(f"Could not look up table {table_name}: {e}") from e

    def get_table_names(self) -> list[str]:
        """
        List the tables of the connected database.

        Returns:
            Table names, sorted
        """
        with self.connection.lock:
            try:
                names = sa_inspect(self.connection.connection).get_table_names()
            except SQLAlchemyError as e:
                raise ExecutionError(f"Could not list tables: {e}") from e
        return sorted(names)

    def get_column_names(self, table_name: str) -> list[str]:
        """
        List a table's columns in declaration order.

        Args:
            table_name: Table name

        Returns:
            Column names
        """
        with self.connection.lock:
            try:
                columns = sa_inspect(self.connection.connection).get_columns(table_name)
            except SQLAlchemyError as e:
                raise ExecutionError(
                    f"Could not read columns of table {table_name}: {e}"
                ) from e
        return [column["name"] for column in columns]
