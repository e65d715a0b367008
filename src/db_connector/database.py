"""The persistence facade applications talk to.

Each operation synthesizes one statement, runs it over the instance's single
connection and interprets the result. A ``Database`` is not meant to be
shared: serialize all calls through one owner, or guard each call site with
your own lock. The connection lock only keeps statements from interleaving;
it does not make sequences such as ``replace`` atomic.
"""

import logging
from pathlib import Path
from typing import Any, ContextManager, Iterable, Mapping, Optional, TypeVar, Union

from db_connector.adapters import BaseAdapter, create_adapter
from db_connector.core.connection import DatabaseConnection
from db_connector.core.executor import StatementExecutor, StatementLike
from db_connector.core.inspector import MetadataInspector
from db_connector.core.marshaller import from_row, to_row
from db_connector.core.transaction import TransactionController
from db_connector.exceptions import InvalidSchemaError
from db_connector.models.capabilities import DialectCapabilities
from db_connector.models.config import DatabaseConfig, LoginSpec
from db_connector.models.query import QueryResult
from db_connector.models.statements import InsertSpec, WhereSpec
from db_connector.models.table import ColumnType, TableSpec
from db_connector.utils import convert_value_to_text
from db_connector.utils.export import write_csv

logger = logging.getLogger(__name__)

T = TypeVar("T")

KeyLike = Union[str, WhereSpec]


class Database:
    """Data-access facade over one connection to a MySQL server or SQLite file."""

    def __init__(self, config: DatabaseConfig):
        """
        Initialize the facade. Nothing is opened until connect().

        Args:
            config: Database configuration
        """
        self._config = config
        self._adapter = create_adapter(config)
        self.connection = DatabaseConnection(config, self._adapter)
        self.executor = StatementExecutor(self.connection)
        self.controller = TransactionController(
            self.connection, self.executor, self._adapter
        )
        self.inspector = MetadataInspector(self.connection)
        self.synthesizer = self._adapter.synthesizer

        if config.debug:
            logging.getLogger("db_connector").setLevel(logging.DEBUG)
            logger.info("Debugging enabled")

    @classmethod
    def from_file(cls, path: Union[str, Path], **options: Any) -> "Database":
        """Local-file (SQLite) database; ``":memory:"`` for a private in-memory one."""
        return cls(DatabaseConfig(file_path=str(path), **options))

    @classmethod
    def from_login(cls, login: LoginSpec, **options: Any) -> "Database":
        """Network (MySQL) database from a LoginSpec."""
        return cls(DatabaseConfig.from_login(login, **options))

    @classmethod
    def from_env(cls, prefix: str = "DB_") -> "Database":
        """Database configured from the environment; see DatabaseConfig.from_env."""
        return cls(DatabaseConfig.from_env(prefix))

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def adapter(self) -> BaseAdapter:
        return self._adapter

    @property
    def capabilities(self) -> DialectCapabilities:
        return self._adapter.capabilities

    @property
    def is_connected(self) -> bool:
        return self.connection.is_connected

    @property
    def in_transaction(self) -> bool:
        return self.controller.in_transaction

    # Connection

    def connect(self) -> None:
        """Open the connection. Calling it again while connected does nothing."""
        self.connection.connect()

    def disconnect(self) -> None:
        """
        Close the connection.

        A transaction still open at this point is rolled back by the engine.
        """
        if self.controller.in_transaction:
            self.controller.abandon()
        self.connection.disconnect()

    def test_connection(self) -> bool:
        return self.connection.test_connection()

    def get_version(self) -> str:
        return self.connection.get_version()

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    # Transactions

    def start_transaction(self) -> None:
        """
        Open an explicit transaction.

        Raises:
            IllegalStateError: If a transaction is already open
        """
        self.controller.start_transaction()

    def commit(self) -> None:
        """
        Commit the open transaction.

        Raises:
            IllegalStateError: If no transaction is open
        """
        self.controller.commit()

    def rollback(self) -> None:
        """
        Roll back the open transaction.

        Raises:
            IllegalStateError: If no transaction is open
        """
        self.controller.rollback()

    def transaction(self) -> ContextManager[TransactionController]:
        """
        Context manager running a block in one transaction.

        Example::

            with db.transaction():
                db.delete("players", "name", "Ann")
                db.insert("players", {"name": "Ann", "score": 12})
        """
        return self.controller.transaction()

    # Raw statements

    def query(
        self, statement: StatementLike, params: Optional[dict[str, Any]] = None
    ) -> QueryResult:
        """Run caller-written SQL that returns rows. Values belong in ``params``."""
        return self.executor.execute_query(statement, params)

    def execute(
        self, statement: StatementLike, params: Optional[dict[str, Any]] = None
    ) -> int:
        """Run caller-written SQL that returns no rows; returns the rowcount."""
        return self.executor.execute_command(statement, params)

    # Tables

    def create_table(self, table: TableSpec) -> None:
        """
        Create a table from its description.

        On MySQL every column default is applied afterwards with its own
        ALTER statement; if one of those fails the table stays created.

        Args:
            table: Table description

        Raises:
            InvalidSchemaError: If the table declares no columns
            ExecutionError: If the engine rejects a statement
        """
        statement = self.synthesizer.create_table(table)
        defaults = self.synthesizer.default_statements(table)

        logger.info(f"Creating table {table.name}")
        self.executor.execute_command(statement)
        for default in defaults:
            self.executor.execute_command(default)

    def table_exists(self, name: str) -> bool:
        """Check the catalog for a table."""
        return self.inspector.table_exists(name)

    def delete_table(self, name: str) -> bool:
        """
        Drop a table if the catalog knows it.

        Returns:
            True if the table existed and was dropped
        """
        if not self.table_exists(name):
            logger.debug(f"Table {name} does not exist, nothing to drop")
            return False
        logger.info(f"Dropping table {name}")
        self.executor.execute_command(self.synthesizer.drop_table(name))
        return True

    def delete_table_if_exists(self, name: str) -> None:
        logger.info(f"Dropping table {name} if it exists")
        self.executor.execute_command(self.synthesizer.drop_table_if_exists(name))

    def copy_contents_to_new_table(self, table: str, copy_from: str) -> int:
        """
        Copy every row of ``copy_from`` into ``table``.

        Both tables must already exist with compatible column lists.

        Returns:
            Rows copied as reported by the driver
        """
        logger.info(f"Copying contents of {copy_from} into {table}")
        return self.executor.execute_command(self.synthesizer.copy_into(table, copy_from))

    def add_column_to_table(
        self,
        table: str,
        column: str,
        column_type: Union[ColumnType, str],
        length: int = 255,
    ) -> None:
        logger.info(f"Adding column {column} to table {table}")
        self.executor.execute_command(
            self.synthesizer.alter_add_column(table, column, column_type, length)
        )

    def remove_column_from_table(self, table: str, column: str) -> None:
        logger.info(f"Removing column {column} from table {table}")
        self.executor.execute_command(self.synthesizer.alter_drop_column(table, column))

    def change_column_name(self, table: str, old_name: str, new_name: str) -> None:
        logger.info(f"Renaming column {old_name} of table {table} to {new_name}")
        self.executor.execute_command(
            self.synthesizer.rename_column(table, old_name, new_name)
        )

    def set_column_default_value(self, table: str, column: str, value: Any) -> None:
        """
        Set a column's default value.

        Raises:
            UnsupportedOperationError: On SQLite, which only takes defaults at creation
        """
        statement = self.synthesizer.set_default(table, column, value)
        logger.info(f"Setting default of {table}.{column}")
        self.executor.execute_command(statement)

    def replace_primary_key(self, table: str, primary_key: str) -> None:
        """
        Make ``primary_key`` the table's primary key, dropping the old one.

        Raises:
            UnsupportedOperationError: On SQLite
        """
        statement = self.synthesizer.replace_primary_key(table, primary_key)
        logger.info(f"Replacing primary key of table {table} with {primary_key}")
        self.executor.execute_command(statement)

    # Rows

    def insert(
        self,
        table: Union[str, InsertSpec],
        values: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """
        Insert one row.

        Args:
            table: Table name, or an InsertSpec carrying table and values
            values: Column -> value mapping (when ``table`` is a name)

        Returns:
            Rows inserted as reported by the driver

        Raises:
            InvalidSchemaError: If there are no values or no target table
        """
        if isinstance(table, InsertSpec):
            if values is not None:
                raise TypeError("insert() takes either an InsertSpec or table and values")
            if table.table is None:
                raise InvalidSchemaError("InsertSpec has no target table; call into()")
            table, values = table.table, table.values

        statement = self.synthesizer.insert_row(table, dict(values or {}))
        return self.executor.execute_command(statement)

    def insert_object(self, table: str, obj: Any) -> int:
        """
        Insert one persisted object as a row.

        Raises:
            MarshalError: If the object's type has no usable binding table
        """
        return self.insert(table, to_row(obj))

    def insert_objects(self, table: str, objects: Iterable[Any]) -> int:
        """
        Insert several persisted objects, one INSERT each.

        Every object is converted before the first insert runs. Wrap the call
        in ``transaction()`` to make the batch atomic.

        Returns:
            Number of objects inserted
        """
        rows = [to_row(obj) for obj in objects]
        for row in rows:
            self.insert(table, row)
        logger.debug(f"Inserted {len(rows)} objects into {table}")
        return len(rows)

    def update(self, table: str, where: WhereSpec, column: str, new_value: Any) -> int:
        """
        Set ``column`` to ``new_value`` on the rows matching ``where``.

        Returns:
            Rows updated as reported by the driver
        """
        key, value = _split_where(where, None)
        return self.executor.execute_command(
            self.synthesizer.update(table, key, value, column, new_value)
        )

    def delete(self, table: str, key: KeyLike, value: Any = None) -> int:
        """
        Delete the rows where ``key = value``.

        Args:
            table: Table name
            key: Column name, or a WhereSpec
            value: Value to match (when ``key`` is a column name)

        Returns:
            Rows deleted as reported by the driver
        """
        key, value = _split_where(key, value)
        return self.executor.execute_command(self.synthesizer.delete(table, key, value))

    def row_exists(self, table: str, key: KeyLike, value: Any = None) -> bool:
        """Check whether at least one row has ``key = value``."""
        key, value = _split_where(key, value)
        result = self.executor.execute_query(self.synthesizer.select_where(table, key, value))
        return not result.is_empty

    def replace(
        self,
        table: str,
        key: KeyLike,
        value: Any = None,
        new_row: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Replace the rows where ``key = value`` with ``new_row``.

        Runs as a delete followed by an insert and is only atomic inside an
        explicit transaction. Nothing happens when no row matches.

        Example::

            db.replace("players", "name", "Ann", {"name": "Ann", "score": 20})
            db.replace("players", WhereSpec().where("name").equals("Ann"), new)

        Returns:
            True if a row was replaced
        """
        if isinstance(key, WhereSpec) and new_row is None:
            new_row, value = value, None
        if new_row is None:
            raise TypeError("replace() requires the new row")

        key, value = _split_where(key, value)
        if not self.row_exists(table, key, value):
            return False

        logger.debug(f"Replacing row in {table} where {key} = {value}")
        self.delete(table, key, value)
        self.insert(table, new_row)
        return True

    def count_rows(self, table: str) -> int:
        result = self.executor.execute_query(self.synthesizer.count_rows(table))
        return int(next(result.iter_values())[0])

    # Reads

    def get(self, table: str, key: str, value: Any, column: str) -> Any:
        """
        Get one column of the first row where ``key`` matches ``value``.

        Matching happens in process over every row of the table, comparing
        raw values first and their text forms second, so ``"1"`` matches an
        INT column holding 1.

        Example::

            age = db.get("players", "name", "Ann", "age")

        Args:
            table: Table name
            key: Column to match on
            value: Value to look for
            column: Column whose value to return

        Returns:
            The column value, or None if no row matches
        """
        result = self._select_all_checked(table, key, column)
        for row in result.rows:
            if _values_match(row[key], value):
                return row[column]

        logger.debug(f"No row in {table} where {key} = {value}")
        return None

    def get_list(
        self,
        table: str,
        column: str,
        key: Optional[KeyLike] = None,
        value: Any = None,
    ) -> list[Any]:
        """
        Get one column of every row, or of every row where ``key`` matches ``value``.

        Matching works as in :meth:`get`.

        Returns:
            Column values in table order (empty if nothing matches)
        """
        if key is None:
            return self._select_all_checked(table, column).get_column_values(column)

        key, value = _split_where(key, value)
        result = self._select_all_checked(table, key, column)
        return [row[column] for row in result.rows if _values_match(row[key], value)]

    def get_object(
        self,
        table: str,
        key: KeyLike,
        value: Any = None,
        cls: Optional[type[T]] = None,
    ) -> Optional[T]:
        """
        Read the first row where ``key = value`` into an instance of ``cls``.

        Example::

            player = db.get_object("players", "name", "Ann", Player)
            player = db.get_object("players", WhereSpec(key="name", value="Ann"), Player)

        Returns:
            The instance, or None if no row matches

        Raises:
            MissingColumnError: If the row lacks a column the constructor binds
        """
        if isinstance(key, WhereSpec) and cls is None:
            cls, value = value, None
        if cls is None:
            raise TypeError("get_object() requires the type to build")

        key, value = _split_where(key, value)
        result = self.executor.execute_query(self.synthesizer.select_where(table, key, value))
        row = result.first()
        return None if row is None else from_row(cls, row)

    def get_objects(
        self,
        table: str,
        cls: type[T],
        key: Optional[KeyLike] = None,
        value: Any = None,
    ) -> list[T]:
        """
        Read every row, or every row where ``key = value``, into instances of ``cls``.

        Returns:
            Instances in table order (empty if nothing matches)
        """
        if key is None:
            statement = self.synthesizer.select_all(table)
        else:
            key, value = _split_where(key, value)
            statement = self.synthesizer.select_where(table, key, value)
        result = self.executor.execute_query(statement)
        return [from_row(cls, row) for row in result.rows]

    def get_all_tables(self) -> QueryResult:
        return self.executor.execute_query(self.synthesizer.show_tables())

    def get_table_names(self) -> list[str]:
        """Table names from the catalog, sorted."""
        return self.inspector.get_table_names()

    def get_column_names(self, table: str) -> list[str]:
        """Column names of a table from the catalog, in declaration order."""
        return self.inspector.get_column_names(table)

    def get_all_data_in_table(self, table: str) -> QueryResult:
        return self.executor.execute_query(self.synthesizer.select_all(table))

    def describe_table(self, table: str) -> QueryResult:
        """One row per column: MySQL ``DESCRIBE`` or SQLite ``table_info``."""
        return self.executor.execute_query(self.synthesizer.describe(table))

    def describe_column(self, table: str, column: str) -> QueryResult:
        return self.executor.execute_query(self.synthesizer.describe_column(table, column))

    # Files

    def export_to_csv(self, table: str, path: Union[str, Path]) -> int:
        """
        Write every row of a table to a CSV file, one line per row.

        Returns:
            Number of rows written

        Raises:
            ExportError: If the file cannot be written
        """
        result = self.get_all_data_in_table(table)
        logger.info(f"Exporting table {table} to {path}")
        return write_csv(result, path)

    def import_from_file(self, table: str, path: Union[str, Path]) -> int:
        """
        Bulk-load a file into a table with the engine's own loader.

        The file format is whatever ``LOAD DATA INFILE`` expects, and the path
        is resolved on the database server.

        Raises:
            UnsupportedOperationError: On SQLite
        """
        statement = self.synthesizer.load_data(table, str(path))
        logger.info(f"Importing {path} into table {table}")
        return self.executor.execute_command(statement)

    def _select_all_checked(self, table: str, *columns: str) -> QueryResult:
        result = self.executor.execute_query(self.synthesizer.select_all(table))
        for column in columns:
            if column not in result.columns:
                raise InvalidSchemaError(f"Table {table} has no column {column}")
        return result


def _split_where(key: KeyLike, value: Any) -> tuple[str, Any]:
    if isinstance(key, WhereSpec):
        if key.key is None:
            raise InvalidSchemaError("WhereSpec has no key; call where()")
        return key.key, key.value
    return key, value


def _values_match(raw: Any, value: Any) -> bool:
    if raw is None or value is None:
        return raw is None and value is None
    if raw == value:
        return True
    return convert_value_to_text(raw) == convert_value_to_text(value)

