"""
SQLON - Lossless conversion between JSON documents and relational tables.

Normalizes JSON trees into named tables with inferred columns, types and
foreign keys, and rebuilds the original tree from those tables. Tables are
stored as SQLON text or as SQLite dumps.
"""

__version__ = "1.0.0"

from .converter import SQLONConverter
from .exporter import Exporter
from .importer import Importer
from .models import Column, ColumnType, Database, ForeignKey, Table, Value
from .types import ConversionError, ConversionResult, ErrorType

__all__ = [
    "SQLONConverter",
    "Importer",
    "Exporter",
    "Database",
    "Table",
    "Column",
    "ColumnType",
    "ForeignKey",
    "Value",
    "ConversionError",
    "ConversionResult",
    "ErrorType",
]
