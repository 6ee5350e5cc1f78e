"""JSON codec built on the importer and exporter."""

import json
import logging
from typing import Optional

from ..exporter import Exporter
from ..importer import Importer
from ..models import Database
from ..types import CodecInterface, ConversionError, ErrorType


class JSONCodec(CodecInterface):
    """Reads JSON documents into a Database and writes them back out."""

    name = "JSON"

    def __init__(self, indent: Optional[int] = 4,
                 importer: Optional[Importer] = None,
                 exporter: Optional[Exporter] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the JSON codec.

        Args:
            indent: Indentation of the encoded output (None for compact output)
            importer: Optional Importer instance
            exporter: Optional Exporter instance
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.indent = indent
        self.importer = importer or Importer(logger=self.logger)
        self.exporter = exporter or Exporter(self.logger)

    def decode(self, data: bytes) -> Database:
        return self.importer.import_bytes(data)

    def encode(self, database: Database) -> bytes:
        tree = self.exporter.export(database)
        try:
            text = json.dumps(tree, indent=self.indent, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ConversionError(f"failed to encode JSON: {e}", ErrorType.MALFORMED_INPUT) from e
        return (text + "\n").encode("utf-8")
