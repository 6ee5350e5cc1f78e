"""Array processor for synthesizing tables from JSON arrays."""

import logging
from typing import Any, List, Optional, TYPE_CHECKING

from ..data_type_detector import DataTypeDetector
from ..models import Column, Table
from ..types import NodeKind, NodeProcessorInterface
from .context import VALUE_COLUMN, ImportContext, ParentLink, child_path
from .object_processor import ObjectProcessor

if TYPE_CHECKING:
    from .router import NodeRouter


class ArrayProcessor(NodeProcessorInterface):
    """
    Processor for JSON arrays.

    The table schema comes from the array's first element: objects give one
    column per primitive field (sorted by name), scalars give a single
    ``value`` column. Nested fields of object elements are pushed down into
    child tables keyed by the element's row id.
    """

    def __init__(self, context: ImportContext, router: "NodeRouter",
                 object_processor: ObjectProcessor,
                 detector: Optional[DataTypeDetector] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the array processor.

        Args:
            context: Import state shared with the other processors
            router: Router used to hand nested nodes to their processor
            object_processor: Processor used to build rows from object elements
            detector: Optional DataTypeDetector instance
            logger: Optional logger instance
        """
        self.context = context
        self.router = router
        self.object_processor = object_processor
        self.detector = detector or DataTypeDetector()
        self.logger = logger or logging.getLogger(__name__)

    def process(self, node: Any, path: str, parent: Optional[ParentLink] = None) -> None:
        """
        Normalize an array found at ``path``.

        Args:
            node: Decoded JSON array
            path: Underscore-joined table path ("" for a root-level array)
            parent: Parent row link when the array hangs under a parent row

        Raises:
            ValueError: If node is not a list
        """
        if not isinstance(node, list):
            raise ValueError(f"ArrayProcessor expects list data, got {type(node).__name__}")

        name = path or self.context.next_array_name()
        first_kind = self.detector.detect_array_element_kind(node)

        if first_kind is None:
            if self.context.get(name) is None:
                self.context.create_placeholder(name, parent)
                self.logger.debug(f"Created placeholder table {name} for empty array")
            return

        if first_kind == NodeKind.ARRAY:
            self.logger.debug(f"Skipping array of arrays at {name}")
            return

        table = self._get_or_create_table(name, node[0], first_kind, parent)

        if first_kind == NodeKind.OBJECT:
            self._add_object_rows(table, node, parent)
        else:
            self._add_scalar_rows(table, node, parent)

    def _get_or_create_table(self, name: str, first: Any, first_kind: NodeKind,
                             parent: Optional[ParentLink]) -> Table:
        table = self.context.get(name)
        if table is not None and not self.context.is_placeholder(name):
            return table

        table = self.context.create_table(name, self._infer_columns(first, first_kind), parent)
        self.logger.debug(f"Created table {name} with columns {table.column_names()}")
        return table

    def _infer_columns(self, first: Any, first_kind: NodeKind) -> List[Column]:
        if first_kind == NodeKind.OBJECT:
            shape = self.detector.analyze_object(first)
            return self.object_processor.columns_for(shape.primitives, sorted(shape.primitives))
        return [Column(VALUE_COLUMN, self.detector.infer_column_type(first))]

    def _add_object_rows(self, table: Table, elements: List[Any],
                         parent: Optional[ParentLink]) -> None:
        for position, element in enumerate(elements):
            if not isinstance(element, dict):
                self.logger.debug(f"Skipping non-object element {position} of {table.name}")
                continue

            row = self.object_processor.row_for(table, element, parent)
            row_id = self.context.append_row(table, row)

            link = ParentLink(table.name, row_id)
            for key, value in self.detector.analyze_object(element).nested.items():
                self.router.route(value, child_path(table.name, key), link)

    def _add_scalar_rows(self, table: Table, elements: List[Any],
                         parent: Optional[ParentLink]) -> None:
        for position, element in enumerate(elements):
            if not self.detector.is_scalar(element):
                self.logger.debug(f"Skipping nested element {position} of {table.name}")
                continue

            row = self.object_processor.row_for(table, {VALUE_COLUMN: element}, parent)
            self.context.append_row(table, row)
