"""Markers persisted types use to declare how they map to table rows.

Example::

    class Player(BaseModel):
        uuid: Annotated[str, ColumnBinding("player_uuid")]
        name: str
        session_token: Annotated[Optional[str], NotPersisted()] = None

        @classmethod
        @designated_constructor
        def from_row(
            cls,
            uuid: Annotated[str, ColumnBinding("player_uuid")],
            name: Annotated[str, ColumnBinding("name")],
        ) -> "Player":
            return cls(uuid=uuid, name=name)
"""

from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

DESIGNATED_CONSTRUCTOR_ATTR = "__designated_constructor__"

F = TypeVar("F", bound=Callable[..., Any])


class ColumnBinding:
    """Binds a field or constructor parameter to a column name."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"ColumnBinding({self.name!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ColumnBinding) and other.name == self.name

    def __hash__(self) -> int:
        return hash((ColumnBinding, self.name))


class NotPersisted:
    """Excludes a field from the rows built for its object."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NotPersisted()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NotPersisted)

    def __hash__(self) -> int:
        return hash(NotPersisted)


def designated_constructor(func: F) -> F:
    """Mark ``__init__`` or a classmethod as the constructor rows are read through.

    Apply it beneath ``@classmethod``.
    """
    setattr(func, DESIGNATED_CONSTRUCTOR_ATTR, True)
    return func


def is_designated(func: Any) -> bool:
    """Check for the designated-constructor mark, unwrapping class/static methods."""
    if isinstance(func, (classmethod, staticmethod)):
        func = func.__func__
    return bool(getattr(func, DESIGNATED_CONSTRUCTOR_ATTR, False))


class FieldBinding(BaseModel):
    """How one data member of a persisted type is written to a row."""

    attribute: str = Field(..., description="Attribute name on the object")
    column: str = Field(..., description="Column name the value is stored under")

    model_config = ConfigDict(frozen=True)


class ParameterBinding(BaseModel):
    """How one designated-constructor parameter is read from a row."""

    parameter: str = Field(..., description="Constructor parameter name")
    column: Optional[str] = Field(
        None, description="Column the argument is read from (None when unbound)"
    )
    has_default: bool = Field(
        default=False, description="Whether the parameter can be omitted"
    )
    adapter: Optional[TypeAdapter] = Field(
        default=None,
        exclude=True,
        description="Converts the column value to the annotated type (None when unannotated)",
    )

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class MarshalBinding(BaseModel):
    """Binding table of a persisted type, derived once from its static shape."""

    type_name: str = Field(..., description="Qualified name of the persisted type")
    constructor_name: str = Field(
        ..., description="Name of the designated constructor (__init__ or classmethod)"
    )
    constructor: Callable[..., Any] = Field(
        ..., description="Callable that builds an instance from keyword arguments"
    )
    fields: tuple[FieldBinding, ...] = Field(
        default=(), description="Persisted data members in declaration order"
    )
    parameters: tuple[ParameterBinding, ...] = Field(
        default=(), description="Designated-constructor parameters in order"
    )

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def columns(self) -> list[str]:
        """Columns written by to_row, in order."""
        return [binding.column for binding in self.fields]

    @property
    def required_columns(self) -> list[str]:
        """Columns from_row needs to find in a row."""
        return [p.column for p in self.parameters if p.column is not None]
