"""Core components: connection, execution, transactions, synthesis and marshalling."""

from db_connector.core.connection import DatabaseConnection
from db_connector.core.executor import StatementExecutor
from db_connector.core.inspector import MetadataInspector
from db_connector.core.marshaller import binding_for, clear_bindings, from_row, to_row
from db_connector.core.synthesizer import SQLiteSynthesizer, SQLSynthesizer
from db_connector.core.transaction import TransactionController, TransactionState

__all__ = [
    "DatabaseConnection",
    "MetadataInspector",
    "SQLSynthesizer",
    "SQLiteSynthesizer",
    "StatementExecutor",
    "TransactionController",
    "TransactionState",
    "binding_for",
    "clear_bindings",
    "from_row",
    "to_row",
]
