"""Pydantic models for configuration, schema descriptions and results."""

from .binding import (
    ColumnBinding,
    FieldBinding,
    MarshalBinding,
    NotPersisted,
    ParameterBinding,
    designated_constructor,
)
from .capabilities import DialectCapabilities
from .config import DatabaseConfig, LoginSpec
from .query import QueryResult
from .statements import InsertSpec, Statement, WhereSpec
from .table import Column, ColumnType, TableSpec

__all__ = [
    "Column",
    "ColumnBinding",
    "ColumnType",
    "DatabaseConfig",
    "DialectCapabilities",
    "FieldBinding",
    "InsertSpec",
    "LoginSpec",
    "MarshalBinding",
    "NotPersisted",
    "ParameterBinding",
    "QueryResult",
    "Statement",
    "TableSpec",
    "WhereSpec",
    "designated_constructor",
]
