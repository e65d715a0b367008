"""SQLite adapter for local-file connections."""

import logging
from typing import Any

from sqlalchemy import Connection
from sqlalchemy.pool import StaticPool

from db_connector.adapters.base import BaseAdapter
from db_connector.core.synthesizer import SQLiteSynthesizer
from db_connector.models.capabilities import DialectCapabilities
from db_connector.models.config import DatabaseConfig

logger = logging.getLogger(__name__)


class SQLiteAdapter(BaseAdapter):
    """SQLite adapter with a reduced ALTER TABLE vocabulary."""

    name = "sqlite"

    def __init__(self) -> None:
        self._synthesizer = SQLiteSynthesizer()

    @property
    def capabilities(self) -> DialectCapabilities:
        """SQLite has no ALTER ... SET DEFAULT, PK replacement or bulk load."""
        return DialectCapabilities(
            alter_column_default=False,
            inline_defaults=True,
            replace_primary_key=False,
            bulk_load=False,
            statement_timeout=True,  # busy timeout
            transactions=True,
        )

    @property
    def synthesizer(self) -> SQLiteSynthesizer:
        return self._synthesizer

    @property
    def begin_statement(self) -> str:
        return "BEGIN TRANSACTION"

    @property
    def version_query(self) -> str:
        return "SELECT sqlite_version()"

    def engine_options(self, config: DatabaseConfig) -> dict[str, Any]:
        timeout = config.statement_timeout or config.connect_timeout
        return {
            "poolclass": StaticPool,
            "connect_args": {"timeout": timeout, "check_same_thread": False},
        }

    def configure_session(self, conn: Connection, config: DatabaseConfig) -> None:
        """Nothing to set per session; the busy timeout travels in connect_args."""
        logger.debug(f"Opened SQLite database {config.resolved_path}")
