"""Importer: normalizes JSON documents into a relational Database."""

import logging
from typing import Any, List, Optional

from .data_type_detector import DataTypeDetector
from .models import Database, Table
from .parser import JSONParser
from .processors import ImportContext, NodeRouter
from .processors.context import ROOT_TABLE, child_path
from .types import NodeKind, ObjectCase


class Importer:
    """
    Converts a JSON document tree into tables.

    Objects and arrays are normalized recursively by the node processors.
    The importer itself owns the two root-level rules: a root object that
    mixes primitives with nested structures keeps its primitives in the
    reserved ``_root`` table in source key order, and the final
    table/column ordering policy applied before the Database is returned.
    """

    def __init__(self, parser: Optional[JSONParser] = None,
                 detector: Optional[DataTypeDetector] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the importer.

        Args:
            parser: Optional JSONParser instance
            detector: Optional DataTypeDetector instance
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.parser = parser or JSONParser(self.logger)
        self.detector = detector or DataTypeDetector(self.logger)

    def import_text(self, json_string: str) -> Database:
        """
        Import JSON text.

        Args:
            json_string: JSON document text

        Returns:
            Database with one table per normalized structure

        Raises:
            ConversionError: If the text is not valid JSON, or a nested
                field clashes with a generated foreign key column
        """
        data, root_keys = self.parser.parse(json_string)
        return self.import_document(data, root_keys)

    def import_bytes(self, data: bytes) -> Database:
        return self.import_text(self.parser.decode_bytes(data))

    def import_document(self, data: Any, root_keys: Optional[List[str]] = None) -> Database:
        """
        Import an already decoded document.

        Args:
            data: Decoded JSON document
            root_keys: Root key order captured from the source text; defaults
                to the decoded object's own key order

        Returns:
            Database with tables sorted by name
        """
        context = ImportContext()
        router = NodeRouter(context, self.detector, self.logger)
        kind = self.detector.classify(data)

        if kind == NodeKind.OBJECT:
            self._import_root_object(data, root_keys, router)
        elif kind == NodeKind.ARRAY:
            router.route(data, "")
        else:
            self.logger.warning(f"Unsupported root data type: {kind.value}; no tables produced")

        database = self._finalize(context)
        self.logger.info(
            f"Imported document into {len(database)} tables "
            f"({sum(len(table.rows) for table in database)} rows)"
        )
        return database

    def _import_root_object(self, data: dict, root_keys: Optional[List[str]],
                            router: NodeRouter) -> None:
        shape = self.detector.analyze_object(data)

        if shape.case != ObjectCase.MIXED:
            router.route(data, "")
            return

        # Primitives keep source order; the scan may miss keys on odd input
        ordered = [key for key in (root_keys or []) if key in shape.primitives]
        ordered += [key for key in shape.primitives if key not in ordered]
        router.object_processor.create_primitive_table(ROOT_TABLE, shape.primitives, ordered)

        # Root-level collections are not keyed to _root
        for key, value in shape.nested.items():
            router.route(value, child_path("", key), None)

    def _finalize(self, context: ImportContext) -> Database:
        """Apply the table and column ordering policy."""
        tables = [context.tables[name] for name in sorted(context.tables)]
        for table in tables:
            self.apply_column_order(table)
            self.logger.debug(f"Table {table.to_dict()}")
        return Database(tables=tables)

    @staticmethod
    def apply_column_order(table: Table) -> None:
        """
        Order a table's columns.

        ``_root`` keeps its captured order. Tables with foreign keys keep the
        foreign key columns first and sort the rest; all others are sorted.
        """
        if table.name == ROOT_TABLE:
            return

        fk_names = set(table.foreign_key_names())
        leading = [name for name in table.column_names() if name in fk_names]
        rest = sorted(name for name in table.column_names() if name not in fk_names)
        table.reorder_columns(leading + rest)
