"""Exception hierarchy for the persistence layer."""

from typing import Optional


class DatabaseError(Exception):
    """Base class for every error raised by db_connector."""


class IllegalStateError(DatabaseError):
    """Operation is not valid in the current connection or transaction state."""


class InvalidSchemaError(DatabaseError):
    """A table or insert description cannot be turned into SQL."""


class InvalidIdentifierError(InvalidSchemaError):
    """A table or column name failed the identifier allow-list."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Invalid SQL identifier: {identifier!r}")


class UnsupportedOperationError(DatabaseError):
    """The statement has no equivalent on the connected dialect."""


class ExecutionError(DatabaseError):
    """The engine rejected a statement or the connection failed while running it."""

    def __init__(self, message: str, statement: Optional[str] = None):
        self.statement = statement
        super().__init__(message)


class ExportError(DatabaseError):
    """Writing exported rows to the filesystem failed."""


class MarshalError(DatabaseError):
    """Base class for object <-> row conversion failures."""


class NoDesignatedConstructorError(MarshalError):
    """The type does not mark exactly one designated constructor."""


class MissingColumnError(MarshalError):
    """A bound constructor parameter names a column absent from the row."""

    def __init__(self, column: str, type_name: str):
        self.column = column
        super().__init__(f"Column '{column}' required by {type_name} is not in the row")


class UnboundParameterError(MarshalError):
    """A constructor parameter has neither a column binding nor a default."""


class MarshalAbortError(MarshalError):
    """The object could not be turned into a usable row."""
