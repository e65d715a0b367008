"""Explicit transaction control for the single connection."""

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional

from db_connector.core.connection import DatabaseConnection
from db_connector.core.executor import StatementExecutor
from db_connector.exceptions import DatabaseError, IllegalStateError

if TYPE_CHECKING:
    from db_connector.adapters.base import BaseAdapter

logger = logging.getLogger(__name__)


class TransactionState(str, Enum):
    """States of the per-connection transaction state machine."""

    IDLE = "idle"
    IN_TRANSACTION = "in_transaction"


class TransactionController:
    """Tracks the one transaction that may be open on a connection.

    ``start_transaction`` takes the connection lock and holds it until the
    matching ``commit`` or ``rollback``, so statements from other threads
    wait for the transaction to finish. Commit and rollback must therefore
    come from the thread that started the transaction.
    """

    def __init__(
        self,
        connection: DatabaseConnection,
        executor: StatementExecutor,
        adapter: "BaseAdapter",
    ):
        self.connection = connection
        self.executor = executor
        self.adapter = adapter
        self._state = TransactionState.IDLE
        self._owner: Optional[int] = None

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def in_transaction(self) -> bool:
        return self._state is TransactionState.IN_TRANSACTION

    def start_transaction(self) -> None:
        """
        Open an explicit transaction.

        Raises:
            IllegalStateError: If a transaction is already open
            ExecutionError: If the engine rejects the begin statement
        """
        lock = self.connection.lock
        lock.acquire()
        if self.in_transaction:
            lock.release()
            raise IllegalStateError("Transaction already started")

        self.connection.autocommit = False
        try:
            self.executor.execute_command(self.adapter.begin_statement)
        except DatabaseError:
            self.connection.autocommit = True
            lock.release()
            raise

        self._state = TransactionState.IN_TRANSACTION
        self._owner = threading.get_ident()
        logger.debug("Started transaction")

    def commit(self) -> None:
        """
        Commit the open transaction and return to auto-commit.

        Raises:
            IllegalStateError: If no transaction is open
            ExecutionError: If the engine rejects COMMIT (the transaction stays open)
        """
        self._check_open("commit")
        self.executor.execute_command(self.adapter.commit_statement)
        self._finish()
        logger.debug("Committed transaction")

    def rollback(self) -> None:
        """
        Roll back the open transaction and return to auto-commit.

        Raises:
            IllegalStateError: If no transaction is open
            ExecutionError: If the engine rejects ROLLBACK (the transaction stays open)
        """
        self._check_open("rollback")
        self.executor.execute_command(self.adapter.rollback_statement)
        self._finish()
        logger.debug("Rolled back transaction")

    @contextmanager
    def transaction(self) -> Iterator["TransactionController"]:
        """Run a block inside a transaction: commit on success, roll back on error.

        If the rollback itself fails the transaction is still closed and the
        block's exception propagates with the rollback error as its cause.
        """
        self.start_transaction()
        try:
            yield self
        except BaseException as error:
            if self.in_transaction:
                try:
                    self.rollback()
                except DatabaseError as rollback_error:
                    logger.error(f"Rollback after a failed block failed: {rollback_error}")
                    self._finish()
                    raise error from rollback_error
            raise
        else:
            self.commit()

    def abandon(self) -> None:
        """Forget an open transaction whose connection is being closed."""
        if not self.in_transaction:
            return
        self._check_open("close the connection")
        logger.warning("Closing connection with an open transaction; it will be rolled back")
        self._finish()

    def _check_open(self, action: str) -> None:
        if not self.in_transaction:
            raise IllegalStateError(f"No transaction to {action}")
        if self._owner != threading.get_ident():
            raise IllegalStateError(
                f"Cannot {action}: the transaction belongs to another thread"
            )

    def _finish(self) -> None:
        self.connection.autocommit = True
        self._state = TransactionState.IDLE
        self._owner = None
        self.connection.lock.release()
