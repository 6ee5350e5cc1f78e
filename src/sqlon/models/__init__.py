"""Relational data models for SQLON."""

from .value import ColumnType, Value, ValueKind
from .table import Column, ForeignKey, Row, Table
from .database import Database

__all__ = [
    "ColumnType",
    "Value",
    "ValueKind",
    "Column",
    "ForeignKey",
    "Row",
    "Table",
    "Database",
]
