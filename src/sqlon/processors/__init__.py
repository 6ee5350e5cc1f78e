"""Node processors that normalize JSON documents into tables."""

from .context import ImportContext, ParentLink
from .object_processor import ObjectProcessor
from .array_processor import ArrayProcessor
from .router import NodeRouter

__all__ = ["ImportContext", "ParentLink", "ObjectProcessor", "ArrayProcessor", "NodeRouter"]
