"""Conversion between persisted objects and table rows.

A persisted type declares its shape statically (see
:mod:`db_connector.models.binding`). The binding table is derived once per
type from that declaration and cached; it covers every field of the class
hierarchy, pydantic models, dataclasses and annotated plain classes alike.
"""

import dataclasses
import inspect
import logging
import threading
import typing
from typing import Any, Callable, Mapping, Optional, TypeVar

from pydantic import (
    BaseModel,
    PydanticUndefinedAnnotation,
    PydanticUserError,
    TypeAdapter,
)

from db_connector.exceptions import (
    MarshalAbortError,
    MarshalError,
    MissingColumnError,
    NoDesignatedConstructorError,
    UnboundParameterError,
)
from db_connector.models.binding import (
    DESIGNATED_CONSTRUCTOR_ATTR,
    ColumnBinding,
    FieldBinding,
    MarshalBinding,
    NotPersisted,
    ParameterBinding,
    is_designated,
)
from db_connector.utils import convert_value_to_text

logger = logging.getLogger(__name__)

T = TypeVar("T")

_bindings: dict[type, MarshalBinding] = {}
_bindings_lock = threading.Lock()


def binding_for(cls: type) -> MarshalBinding:
    """
    Get the binding table of a persisted type, building it on first use.

    Raises:
        NoDesignatedConstructorError: Zero or several constructors are marked
        UnboundParameterError: A required constructor parameter has no column
        MarshalAbortError: Two fields map to the same column
    """
    binding = _bindings.get(cls)
    if binding is not None:
        return binding

    binding = _build_binding(cls)
    with _bindings_lock:
        return _bindings.setdefault(cls, binding)


def clear_bindings() -> None:
    """Drop every cached binding table."""
    with _bindings_lock:
        _bindings.clear()


def to_row(obj: Any) -> dict[str, Optional[str]]:
    """
    Extract an object's persisted fields as a column -> text mapping.

    Args:
        obj: Instance of a persisted type

    Returns:
        Ordered mapping of column name to stringified value

    Raises:
        MarshalAbortError: If the object has no persisted fields
    """
    binding = binding_for(type(obj))
    if not binding.fields:
        raise MarshalAbortError(f"{binding.type_name} has no persisted fields")

    row: dict[str, Optional[str]] = {}
    for field in binding.fields:
        try:
            value = getattr(obj, field.attribute)
        except AttributeError as e:
            raise MarshalError(
                f"{binding.type_name}.{field.attribute} is declared but not set"
            ) from e
        row[field.column] = convert_value_to_text(value)
    return row


def from_row(cls: type[T], row: Mapping[str, Any]) -> T:
    """
    Build an instance through the type's designated constructor.

    Args:
        cls: Persisted type
        row: Column name -> value mapping, e.g. one QueryResult row

    Returns:
        New instance of ``cls``

    Raises:
        MissingColumnError: If a bound column is absent from the row
        MarshalError: If the constructor rejects the values
    """
    binding = binding_for(cls)

    kwargs: dict[str, Any] = {}
    for parameter in binding.parameters:
        if parameter.column is None:
            continue
        if parameter.column not in row:
            raise MissingColumnError(parameter.column, binding.type_name)
        kwargs[parameter.parameter] = row[parameter.column]

    try:
        for parameter in binding.parameters:
            if parameter.adapter is not None:
                value = kwargs[parameter.parameter]
                kwargs[parameter.parameter] = parameter.adapter.validate_python(value)
        return binding.constructor(**kwargs)
    except (TypeError, ValueError) as e:
        raise MarshalError(
            f"{binding.type_name}.{binding.constructor_name} rejected row values: {e}"
        ) from e


def _build_binding(cls: type) -> MarshalBinding:
    type_name = cls.__qualname__
    fields = _field_bindings(cls)

    constructor_name, constructor, signature, hints = _designated_constructor(cls)
    field_columns = {field.attribute: field.column for field in fields}
    class_level = constructor_name == cls.__name__

    parameters = []
    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.kind is param.POSITIONAL_ONLY:
            raise MarshalError(
                f"{type_name}.{constructor_name}: positional-only parameter "
                f"'{param.name}' cannot be bound by column name"
            )

        hint = hints.get(param.name, param.annotation)
        column = _column_binding(hint)
        if column is None and class_level:
            column = field_columns.get(param.name)

        has_default = param.default is not param.empty
        if column is None and not has_default:
            raise UnboundParameterError(
                f"{type_name}.{constructor_name}: parameter '{param.name}' "
                "has no column binding and no default"
            )
        parameters.append(
            ParameterBinding(
                parameter=param.name,
                column=column,
                has_default=has_default,
                adapter=_argument_adapter(hint) if column is not None else None,
            )
        )

    logger.debug(
        f"Built binding for {type_name}: columns={[f.column for f in fields]}, "
        f"constructor={constructor_name}"
    )
    return MarshalBinding(
        type_name=type_name,
        constructor_name=constructor_name,
        constructor=constructor,
        fields=tuple(fields),
        parameters=tuple(parameters),
    )


def _field_bindings(cls: type) -> list[FieldBinding]:
    """Persisted data members over the whole class hierarchy, base classes first."""
    members: list[tuple[str, tuple[Any, ...]]] = []

    if isinstance(cls, type) and issubclass(cls, BaseModel):
        for name, info in cls.model_fields.items():
            metadata = tuple(info.metadata)
            if info.exclude is True:
                metadata += (NotPersisted(),)
            members.append((name, metadata))
    else:
        hints = _type_hints(cls)
        if dataclasses.is_dataclass(cls):
            names = [field.name for field in dataclasses.fields(cls)]
        else:
            names = []
            for klass in reversed(cls.__mro__):
                for name in inspect.get_annotations(klass):
                    if name not in names:
                        names.append(name)
        for name in names:
            hint = hints.get(name)
            if name.startswith("_") or typing.get_origin(hint) is typing.ClassVar:
                continue
            members.append((name, getattr(hint, "__metadata__", ())))

    bindings = []
    seen: dict[str, str] = {}
    for name, metadata in members:
        if any(isinstance(item, NotPersisted) for item in metadata):
            continue
        column = _column_from_metadata(metadata) or name
        if column in seen:
            raise MarshalAbortError(
                f"{cls.__qualname__}: fields '{seen[column]}' and '{name}' "
                f"both map to column '{column}'"
            )
        seen[column] = name
        bindings.append(FieldBinding(attribute=name, column=column))
    return bindings


def _designated_constructor(
    cls: type,
) -> tuple[str, Callable[..., Any], inspect.Signature, dict[str, Any]]:
    """Find the one marked constructor and return (name, callable, signature, hints)."""
    marked = []
    if getattr(cls, DESIGNATED_CONSTRUCTOR_ATTR, False) is True:
        marked.append(cls.__name__)
    for name in dir(cls):
        try:
            attr = inspect.getattr_static(cls, name)
        except AttributeError:
            continue
        if is_designated(attr):
            marked.append(name)

    if len(marked) != 1:
        found = ", ".join(marked) if marked else "none"
        raise NoDesignatedConstructorError(
            f"{cls.__qualname__} must mark exactly one constructor with "
            f"@designated_constructor (found: {found})"
        )

    name = marked[0]
    if name == cls.__name__:
        return name, cls, inspect.signature(cls), _type_hints(cls)

    attr = inspect.getattr_static(cls, name)
    if name == "__init__":
        return name, cls, inspect.signature(cls), _type_hints(attr)
    if isinstance(attr, (classmethod, staticmethod)):
        bound = getattr(cls, name)
        return name, bound, inspect.signature(bound), _type_hints(attr.__func__)

    raise NoDesignatedConstructorError(
        f"{cls.__qualname__}.{name} must be __init__, a classmethod or a staticmethod"
    )


def _type_hints(obj: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references (e.g. a locally defined return type);
        # the raw annotations still carry Annotated metadata
        if isinstance(obj, type):
            hints: dict[str, Any] = {}
            for klass in reversed(obj.__mro__):
                hints.update(inspect.get_annotations(klass))
            return hints
        return dict(inspect.get_annotations(obj))


def _column_binding(annotation: Any) -> Optional[str]:
    return _column_from_metadata(getattr(annotation, "__metadata__", ()))


def _column_from_metadata(metadata: tuple[Any, ...]) -> Optional[str]:
    for item in metadata:
        if isinstance(item, ColumnBinding):
            return item.name
    return None


def _argument_adapter(hint: Any) -> Optional[TypeAdapter]:
    """Validator turning a column value into the parameter's annotated type."""
    if hint is inspect.Parameter.empty or hint is Any or isinstance(hint, str):
        return None
    if typing.get_origin(hint) is typing.Annotated:
        hint = hint.__origin__
    try:
        return TypeAdapter(hint)
    except (PydanticUserError, PydanticUndefinedAnnotation) as e:
        # Types pydantic cannot describe are passed through unconverted
        logger.debug(f"No validator for {hint!r}: {e}")
        return None
