"""Single-connection management with SQLAlchemy."""

import logging
import threading
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Connection, Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from db_connector.exceptions import DatabaseError, ExecutionError, IllegalStateError
from db_connector.models.config import DatabaseConfig

if TYPE_CHECKING:
    from db_connector.adapters.base import BaseAdapter

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Owns one engine and exactly one live connection to it.

    The connection is opened in DBAPI auto-commit mode; explicit transactions
    are opened and closed with plain statements by the transaction
    controller. ``lock`` serializes every use of the connection.
    """

    def __init__(self, config: DatabaseConfig, adapter: "BaseAdapter"):
        """
        Initialize database connection.

        Args:
            config: Database configuration for the chosen connection mode
            adapter: Dialect adapter
        """
        self.config = config
        self.adapter = adapter
        self.engine: Optional[Engine] = None
        self._conn: Optional[Connection] = None
        self.autocommit = True
        self.lock = threading.RLock()

    def connect(self) -> None:
        """Create the engine and open the connection."""
        with self.lock:
            if self._conn is not None:
                return  # Already connected

            engine = create_engine(
                self.config.url,
                pool_pre_ping=True,  # Reconnect a dropped session on checkout
                echo=self.config.echo_sql,
                **self.adapter.engine_options(self.config),
            )
            try:
                conn = engine.connect()
                conn.execution_options(isolation_level="AUTOCOMMIT")
                self.adapter.configure_session(conn, self.config)
            except SQLAlchemyError as e:
                engine.dispose()
                raise ExecutionError(
                    f"Could not connect to {self.config.display_url}: {e}"
                ) from e

            self.engine = engine
            self._conn = conn
            self.autocommit = True
            logger.info(f"Connected to database {self.config.display_url}")

    def disconnect(self) -> None:
        """Close the connection and dispose of the engine."""
        with self.lock:
            if self._conn is None:
                return

            try:
                self._conn.close()
            finally:
                if self.engine is not None:
                    self.engine.dispose()
                self._conn = None
                self.engine = None
                self.autocommit = True
            logger.info(f"Disconnected from database {self.config.display_url}")

    @property
    def connection(self) -> Connection:
        """
        The live SQLAlchemy connection.

        Raises:
            IllegalStateError: Before connect() or after disconnect()
        """
        if self._conn is None:
            raise IllegalStateError("Database not connected. Call connect() first.")
        return self._conn

    @property
    def is_connected(self) -> bool:
        """Check if the connection is open."""
        return self._conn is not None

    @property
    def dialect(self) -> str:
        """Get database dialect name."""
        return self.config.dialect

    def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if a trivial query succeeds, False otherwise
        """
        try:
            with self.lock:
                self.connection.execute(text("SELECT 1")).fetchall()
            return True
        except (DatabaseError, SQLAlchemyError) as e:
            logger.warning(f"Connection test failed: {e}")
            return False

    def get_version(self) -> str:
        """
        Get database version string.

        Returns:
            Database version string
        """
        with self.lock:
            try:
                row = self.connection.execute(text(self.adapter.version_query)).fetchone()
            except SQLAlchemyError as e:
                raise ExecutionError(str(e), self.adapter.version_query) from e
        return str(row[0]) if row else "Unknown"

    def __enter__(self) -> "DatabaseConnection":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()
