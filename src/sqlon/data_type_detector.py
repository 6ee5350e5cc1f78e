"""Value type inference and structural classification for JSON documents."""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import ColumnType, Value
from .types import NodeKind, ObjectCase

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_COLUMN_TYPES = {
    NodeKind.NULL: ColumnType.NULL,
    NodeKind.BOOL: ColumnType.BOOL,
    NodeKind.INT: ColumnType.INT,
    NodeKind.DECIMAL: ColumnType.DECIMAL,
    NodeKind.TEXT: ColumnType.TEXT,
}


@dataclass
class ObjectShape:
    """An object's fields partitioned into primitives, arrays and nested objects."""

    primitives: Dict[str, Any] = field(default_factory=dict)
    arrays: Dict[str, List[Any]] = field(default_factory=dict)
    objects: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    # arrays and objects together, in source key order
    nested: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_primitives(self) -> bool:
        return bool(self.primitives)

    @property
    def has_nested(self) -> bool:
        return bool(self.arrays) or bool(self.objects)

    @property
    def case(self) -> ObjectCase:
        if not self.has_primitives and not self.has_nested:
            return ObjectCase.EMPTY
        if not self.has_nested:
            return ObjectCase.PRIMITIVES_ONLY
        if not self.has_primitives:
            return ObjectCase.NESTED_ONLY
        return ObjectCase.MIXED


class DataTypeDetector:
    """
    Type detector for JSON document nodes.

    Classifies scalars into value kinds (null, integer, decimal, boolean,
    text) and objects into the structural cases the importer dispatches on.
    The same scalar rule is used for column type inference and for value
    conversion, so a column's type always matches the value it was sampled
    from.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the data type detector.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def classify(self, node: Any) -> NodeKind:
        """
        Classify a decoded JSON node.

        Args:
            node: Node produced by ``json.loads``

        Returns:
            NodeKind of the node
        """
        if node is None:
            return NodeKind.NULL
        if isinstance(node, bool):
            return NodeKind.BOOL
        if isinstance(node, dict):
            return NodeKind.OBJECT
        if isinstance(node, list):
            return NodeKind.ARRAY
        if isinstance(node, int):
            if INT64_MIN <= node <= INT64_MAX:
                return NodeKind.INT
            return NodeKind.DECIMAL
        if isinstance(node, float):
            return NodeKind.INT if self._is_integral(node) else NodeKind.DECIMAL
        # Strings and anything else are text
        return NodeKind.TEXT

    def infer_column_type(self, sample: Any) -> ColumnType:
        """Infer the column type for a scalar sample value."""
        return _COLUMN_TYPES.get(self.classify(sample), ColumnType.TEXT)

    def to_value(self, scalar: Any) -> Value:
        """
        Convert a scalar node into a stored Value.

        Args:
            scalar: Scalar node (arrays and objects are never passed here)

        Returns:
            Value tagged with the same kind ``classify`` reports
        """
        kind = self.classify(scalar)

        if kind == NodeKind.NULL:
            return Value.null()
        if kind == NodeKind.BOOL:
            return Value.boolean(scalar)
        if kind == NodeKind.INT:
            return Value.integer(int(scalar))
        if kind == NodeKind.DECIMAL:
            return Value.decimal(float(scalar))
        if isinstance(scalar, str):
            return Value.text(scalar)
        return Value.text(str(scalar))

    def is_scalar(self, node: Any) -> bool:
        return self.classify(node).is_scalar

    def analyze_object(self, obj: Dict[str, Any]) -> ObjectShape:
        """
        Partition an object's fields into primitives, arrays and nested objects.

        Args:
            obj: Decoded JSON object

        Returns:
            ObjectShape with the three buckets in source key order
        """
        shape = ObjectShape()

        for key, value in obj.items():
            kind = self.classify(value)
            if kind == NodeKind.ARRAY:
                shape.arrays[key] = value
                shape.nested[key] = value
            elif kind == NodeKind.OBJECT:
                shape.objects[key] = value
                shape.nested[key] = value
            else:
                shape.primitives[key] = value

        return shape

    def detect_array_element_kind(self, array: List[Any]) -> Optional[NodeKind]:
        """Return the kind of an array's first element, or None for an empty array."""
        if not array:
            return None
        return self.classify(array[0])

    @staticmethod
    def _is_integral(number: float) -> bool:
        if not math.isfinite(number):
            return False
        if number != math.trunc(number):
            return False
        return INT64_MIN <= number <= INT64_MAX
