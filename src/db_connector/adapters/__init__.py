"""Dialect adapters for the supported connection modes."""

from .base import BaseAdapter
from .mysql import MySQLAdapter
from .sqlite import SQLiteAdapter
from ..models.config import DatabaseConfig

__all__ = [
    "BaseAdapter",
    "MySQLAdapter",
    "SQLiteAdapter",
    "create_adapter",
]


def create_adapter(config: DatabaseConfig) -> BaseAdapter:
    """
    Factory function to create the adapter for a configuration.

    Args:
        config: Database configuration

    Returns:
        Dialect adapter instance

    Raises:
        ValueError: If the dialect is not supported
    """
    dialect = config.dialect

    adapters = {
        "mysql": MySQLAdapter,
        "sqlite": SQLiteAdapter,
    }

    adapter_class = adapters.get(dialect)

    if adapter_class is None:
        raise ValueError(
            f"Unsupported database dialect: {dialect}. "
            f"Supported dialects: {', '.join(adapters.keys())}"
        )

    return adapter_class()
