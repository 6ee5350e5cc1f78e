"""Object processor for normalizing JSON objects into tables."""

import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from ..data_type_detector import DataTypeDetector, ObjectShape
from ..models import Column, Table, Value
from ..types import NodeProcessorInterface, ObjectCase
from .context import DOCUMENT_TABLE, ImportContext, ParentLink, child_path

if TYPE_CHECKING:
    from .router import NodeRouter


class ObjectProcessor(NodeProcessorInterface):
    """
    Processor for JSON objects.

    Dispatches on the object's structural case:

    * primitives only: a single-row table (or one more row of a child table),
    * nested only: every field is normalized on its own, without a foreign key,
    * mixed: the primitives form the parent row and every array or object
      field becomes a child table keyed by that row's id.
    """

    def __init__(self, context: ImportContext, router: "NodeRouter",
                 detector: Optional[DataTypeDetector] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the object processor.

        Args:
            context: Import state shared with the other processors
            router: Router used to hand nested nodes to their processor
            detector: Optional DataTypeDetector instance
            logger: Optional logger instance
        """
        self.context = context
        self.router = router
        self.detector = detector or DataTypeDetector()
        self.logger = logger or logging.getLogger(__name__)

    def process(self, node: Any, path: str, parent: Optional[ParentLink] = None) -> None:
        """
        Normalize an object found at ``path``.

        Args:
            node: Decoded JSON object
            path: Underscore-joined table path ("" for the document root)
            parent: Parent row link when the object hangs under a parent row

        Raises:
            ValueError: If node is not an object
        """
        if not isinstance(node, dict):
            raise ValueError(f"ObjectProcessor expects dict data, got {type(node).__name__}")

        shape = self.detector.analyze_object(node)
        case = shape.case

        if case == ObjectCase.EMPTY:
            self.logger.debug(f"Skipping empty object at {path or '<root>'}")
            return

        if case == ObjectCase.NESTED_ONLY:
            # No primitive parent row to key against
            for key, value in shape.nested.items():
                self.router.route(value, child_path(path, key), None)
            return

        row_id = self._store_primitives(shape, path, parent)
        if row_id is None or case == ObjectCase.PRIMITIVES_ONLY:
            return

        link = ParentLink(path, row_id)
        for key, value in shape.nested.items():
            self.router.route(value, child_path(path, key), link)

    def _store_primitives(self, shape: ObjectShape, path: str,
                          parent: Optional[ParentLink]) -> Optional[int]:
        """Write the object's primitive fields as a row and return its row id."""
        name = path or DOCUMENT_TABLE
        table = self.context.get(name)

        if parent is None:
            if table is not None:
                self.logger.debug(f"Table {name} already exists, skipping object")
                return None
            table = self.create_primitive_table(name, shape.primitives, sorted(shape.primitives))
            return table.row_id(0)

        if table is None:
            columns = self.columns_for(shape.primitives, sorted(shape.primitives))
            table = self.context.create_table(name, columns, parent)
            self.logger.debug(f"Created child table {name} -> {parent.table_name}")

        return self.context.append_row(table, self.row_for(table, shape.primitives, parent))

    def create_primitive_table(self, name: str, primitives: Dict[str, Any],
                               keys: List[str]) -> Table:
        """
        Create a single-row table from primitive fields.

        Args:
            name: Table name
            primitives: Primitive field values
            keys: Field names in column order

        Returns:
            The created table
        """
        table = self.context.create_table(name, self.columns_for(primitives, keys))
        self.context.append_row(table, self.row_for(table, primitives))
        self.logger.debug(f"Created table {name} with {len(keys)} columns")
        return table

    def columns_for(self, primitives: Dict[str, Any], keys: List[str]) -> List[Column]:
        return [Column(key, self.detector.infer_column_type(primitives[key])) for key in keys]

    def row_for(self, table: Table, fields: Dict[str, Any],
                parent: Optional[ParentLink] = None) -> List[Value]:
        """
        Build a row for ``table`` from an object's fields.

        The foreign key cell, when the table has one for ``parent``, holds the
        parent's row id. Columns the object lacks, or holds a nested value
        for, are null.
        """
        fk_column = parent.fk_column if parent is not None else None
        row = []

        for column in table.columns:
            if column.name == fk_column:
                row.append(Value.integer(parent.row_id))
                continue

            value = fields.get(column.name)
            if self.detector.is_scalar(value):
                row.append(self.detector.to_value(value))
            else:
                row.append(Value.null())

        return row
