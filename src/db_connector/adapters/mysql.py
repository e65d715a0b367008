"""MySQL adapter for network-mode connections."""

import logging
from typing import Any

from sqlalchemy import Connection, text

from db_connector.adapters.base import BaseAdapter
from db_connector.core.synthesizer import SQLSynthesizer
from db_connector.models.capabilities import DialectCapabilities
from db_connector.models.config import DatabaseConfig

logger = logging.getLogger(__name__)


class MySQLAdapter(BaseAdapter):
    """MySQL adapter; the synthesizer's native dialect."""

    name = "mysql"

    def __init__(self) -> None:
        self._synthesizer = SQLSynthesizer()

    @property
    def capabilities(self) -> DialectCapabilities:
        """MySQL runs every statement the facade can synthesize."""
        return DialectCapabilities(
            alter_column_default=True,
            inline_defaults=False,
            replace_primary_key=True,
            bulk_load=True,
            statement_timeout=True,
            transactions=True,
        )

    @property
    def synthesizer(self) -> SQLSynthesizer:
        return self._synthesizer

    @property
    def begin_statement(self) -> str:
        return "START TRANSACTION"

    def engine_options(self, config: DatabaseConfig) -> dict[str, Any]:
        # One physical connection per instance
        return {
            "pool_size": 1,
            "max_overflow": 0,
            "connect_args": {"connect_timeout": config.connect_timeout},
        }

    def configure_session(self, conn: Connection, config: DatabaseConfig) -> None:
        """Set the session statement timeout if configured."""
        if config.statement_timeout:
            timeout_ms = config.statement_timeout * 1000
            conn.execute(text(f"SET SESSION max_execution_time = {timeout_ms}"))
            logger.debug(f"Set max_execution_time to {timeout_ms} ms")
