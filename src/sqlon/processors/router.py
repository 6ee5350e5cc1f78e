"""Routing of document nodes to their processors."""

import logging
from typing import Any, Optional

from ..data_type_detector import DataTypeDetector
from ..types import NodeKind
from .array_processor import ArrayProcessor
from .context import ImportContext, ParentLink
from .object_processor import ObjectProcessor


class NodeRouter:
    """
    Routes arrays and objects to the matching processor.

    Processors recurse through the router, so objects inside arrays and
    arrays inside objects are handled by the same two processors at every
    depth. Scalars have no table of their own and are ignored here.
    """

    def __init__(self, context: Optional[ImportContext] = None,
                 detector: Optional[DataTypeDetector] = None,
                 logger: Optional[logging.Logger] = None):
        self.context = context or ImportContext()
        self.detector = detector or DataTypeDetector(logger)
        self.logger = logger or logging.getLogger(__name__)
        self.object_processor = ObjectProcessor(self.context, self, self.detector, self.logger)
        self.array_processor = ArrayProcessor(
            self.context, self, self.object_processor, self.detector, self.logger
        )

    def route(self, node: Any, path: str, parent: Optional[ParentLink] = None) -> None:
        kind = self.detector.classify(node)

        if kind == NodeKind.OBJECT:
            self.object_processor.process(node, path, parent)
        elif kind == NodeKind.ARRAY:
            self.array_processor.process(node, path, parent)
        else:
            self.logger.debug(f"Ignoring scalar {kind.value} at {path or '<root>'}")
