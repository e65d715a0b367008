"""Statement execution over the single connection."""

import logging
import time
from typing import Any, Optional, Union

from sqlalchemy import CursorResult, text
from sqlalchemy.exc import SQLAlchemyError

from db_connector.core.connection import DatabaseConnection
from db_connector.exceptions import ExecutionError
from db_connector.models.query import QueryResult
from db_connector.models.statements import Statement

StatementLike = Union[str, Statement]


class StatementExecutor:
    """Runs SQL text on the connection as a query or as a command.

    A direct pass-through: no validation, no retries. Driver errors are
    wrapped in ExecutionError with the original chained. Outside an explicit
    transaction each statement is committed as soon as it has run.
    """

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize statement executor.

        Args:
            connection: Database connection manager
        """
        self.connection = connection
        self.logger = logging.getLogger(__name__)

    def execute_query(
        self, statement: StatementLike, params: Optional[dict[str, Any]] = None
    ) -> QueryResult:
        """
        Execute a row-returning statement.

        Args:
            statement: SQL text or synthesized Statement
            params: Bind parameters (merged over the Statement's own)

        Returns:
            Query result with rows and metadata

        Raises:
            ExecutionError: If the engine rejects the statement
        """
        sql, bound = self._resolve(statement, params)
        start_time = time.time()

        with self.connection.lock:
            result = self._run(sql, bound)
            try:
                if result.returns_rows:
                    columns = list(result.keys())
                    rows = [dict(zip(columns, row)) for row in result.fetchall()]
                else:
                    columns, rows = [], []
            except SQLAlchemyError as e:
                self._recover()
                raise ExecutionError(str(e), sql) from e
            self._autocommit()

        execution_time = (time.time() - start_time) * 1000

        return QueryResult(
            query=sql,
            rows=rows,
            row_count=len(rows),
            columns=columns,
            execution_time_ms=execution_time,
        )

    def execute_command(
        self, statement: StatementLike, params: Optional[dict[str, Any]] = None
    ) -> int:
        """
        Execute a statement that returns no rows.

        Args:
            statement: SQL text or synthesized Statement
            params: Bind parameters (merged over the Statement's own)

        Returns:
            Rows affected as reported by the driver (-1 when unknown)

        Raises:
            ExecutionError: If the engine rejects the statement
        """
        sql, bound = self._resolve(statement, params)

        with self.connection.lock:
            result = self._run(sql, bound)
            rowcount = result.rowcount
            result.close()
            self._autocommit()

        return rowcount

    def _resolve(
        self, statement: StatementLike, params: Optional[dict[str, Any]]
    ) -> tuple[str, dict[str, Any]]:
        if isinstance(statement, Statement):
            return statement.sql, {**statement.params, **(params or {})}
        return statement, dict(params or {})

    def _run(self, sql: str, params: dict[str, Any]) -> CursorResult:
        conn = self.connection.connection
        self.logger.debug(f"Executing: {sql} {params if params else ''}".rstrip())
        try:
            return conn.execute(text(sql), params)
        except SQLAlchemyError as e:
            self._recover()
            raise ExecutionError(str(e), sql) from e

    def _autocommit(self) -> None:
        # Inside an explicit transaction only COMMIT/ROLLBACK statements end it
        if self.connection.autocommit:
            self.connection.connection.commit()

    def _recover(self) -> None:
        """Reset SQLAlchemy's transaction bookkeeping after a failed statement."""
        if not self.connection.autocommit:
            return
        try:
            self.connection.connection.rollback()
        except SQLAlchemyError as e:
            self.logger.warning(f"Rollback after failed statement also failed: {e}")
