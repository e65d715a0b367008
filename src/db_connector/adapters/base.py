"""Base adapter abstract class for dialect-specific behaviour."""

from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy import Connection

from db_connector.core.synthesizer import SQLSynthesizer
from db_connector.models.capabilities import DialectCapabilities
from db_connector.models.config import DatabaseConfig


class BaseAdapter(ABC):
    """Base adapter defining the dialect-specific interface."""

    name: str = "base"

    @property
    @abstractmethod
    def capabilities(self) -> DialectCapabilities:
        """Get capabilities for this dialect."""
        ...

    @property
    @abstractmethod
    def synthesizer(self) -> SQLSynthesizer:
        """Statement synthesizer speaking this dialect."""
        ...

    @property
    @abstractmethod
    def begin_statement(self) -> str:
        """Statement that opens an explicit transaction."""
        ...

    @abstractmethod
    def engine_options(self, config: DatabaseConfig) -> dict[str, Any]:
        """
        Extra keyword arguments for ``create_engine``.

        Args:
            config: Database configuration

        Returns:
            Engine options (pooling, connect_args)
        """
        ...

    @abstractmethod
    def configure_session(self, conn: Connection, config: DatabaseConfig) -> None:
        """
        Apply per-session settings right after the connection opens.

        Args:
            conn: The freshly opened connection
            config: Database configuration
        """
        ...

    @property
    def commit_statement(self) -> str:
        return "COMMIT"

    @property
    def rollback_statement(self) -> str:
        return "ROLLBACK"

    @property
    def version_query(self) -> str:
        return "SELECT VERSION()"
