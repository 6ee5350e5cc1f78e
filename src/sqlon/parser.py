"""JSON parser with root key-order capture."""

import json
import logging
from json.decoder import scanstring
from typing import Any, List, Optional, Tuple

from .types import ConversionError, ErrorType

_WHITESPACE = " \t\n\r"


class JSONParser:
    """
    JSON parser used by the importer.

    Parsing happens in two passes over the same text: a lightweight
    token-level scan that records the root object's key order, then the
    full structural decode.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the JSON parser.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def parse(self, json_string: str) -> Tuple[Any, List[str]]:
        """
        Parse JSON text.

        Args:
            json_string: JSON text to parse

        Returns:
            Tuple of (decoded document, root key order)

        Raises:
            ConversionError: If the text is empty or not valid JSON
        """
        if not json_string.strip():
            raise ConversionError("JSON input is empty", ErrorType.MALFORMED_INPUT)

        root_keys = self.extract_root_key_order(json_string)

        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConversionError(
                f"failed to decode JSON: {e.msg} at line {e.lineno}, column {e.colno}",
                ErrorType.MALFORMED_INPUT,
                context={"line": e.lineno, "column": e.colno}
            ) from e
        except RecursionError as e:
            raise ConversionError("failed to decode JSON: document nested too deeply",
                                  ErrorType.MALFORMED_INPUT) from e

        self.logger.debug(f"Parsed JSON document with {len(root_keys)} root keys")
        return data, root_keys

    def decode_bytes(self, data: bytes) -> str:
        """Decode raw input bytes as UTF-8 text."""
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ConversionError(f"JSON input is not valid UTF-8: {e}",
                                  ErrorType.MALFORMED_INPUT) from e

    def extract_root_key_order(self, json_string: str) -> List[str]:
        """
        Scan tokens to collect the root object's keys in source order.

        Values are skipped without being decoded. A document whose root is
        not an object yields no keys. Scanning stops quietly at the first
        malformed token; the full decode reports the error.

        Args:
            json_string: JSON text

        Returns:
            Root keys in their original order, without duplicates
        """
        keys: List[str] = []
        index = self._skip_whitespace(json_string, 0)

        if index >= len(json_string) or json_string[index] != "{":
            return keys

        index += 1
        try:
            while True:
                index = self._skip_whitespace(json_string, index)
                if index >= len(json_string) or json_string[index] == "}":
                    break
                if json_string[index] == ",":
                    index += 1
                    continue
                if json_string[index] != '"':
                    break

                key, index = scanstring(json_string, index + 1)
                if key not in keys:
                    keys.append(key)

                index = self._skip_whitespace(json_string, index)
                if index >= len(json_string) or json_string[index] != ":":
                    break
                index = self._skip_value(json_string, index + 1)
        except ValueError:
            self.logger.debug(f"Root key scan stopped at offset {index}")

        return keys

    @staticmethod
    def _skip_whitespace(text: str, index: int) -> int:
        while index < len(text) and text[index] in _WHITESPACE:
            index += 1
        return index

    @staticmethod
    def _skip_value(text: str, index: int) -> int:
        """Return the offset just past the value starting at ``index``."""
        depth = 0
        while index < len(text):
            ch = text[index]
            if ch == '"':
                _, index = scanstring(text, index + 1)
                if depth == 0:
                    return index
                continue
            if ch in "{[":
                depth += 1
            elif ch in "}]":
                if depth == 0:
                    # end of the enclosing root object
                    return index
                depth -= 1
                if depth == 0:
                    return index + 1
            elif ch == "," and depth == 0:
                return index
            index += 1
        return index
