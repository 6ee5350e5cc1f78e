"""SQLON codec: the line-oriented relational text format."""

import logging
from typing import List, Optional

from ..models import Column, ColumnType, Database, Row, Table, Value, ValueKind
from ..types import CodecInterface, ConversionError, ErrorType
from ..utils.validation import ValidationUtils
from .common import decode_text, format_decimal, infer_foreign_keys, is_decimal_token, is_int_token

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "r": "\r", "t": "\t"}
_QUOTED = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t"}

# Characters a name may not contain on @table and @cols lines
_LINE_BREAKS = ("\n", "\r")
_COLUMN_SEPARATORS = _LINE_BREAKS + (",", ":")


def _is_writable_name(name: str, forbidden) -> bool:
    # Directive arguments are read back stripped
    return bool(name) and name == name.strip() and not any(ch in name for ch in forbidden)


class SQLONCodec(CodecInterface):
    """
    Codec for SQLON text.

    A document is a sequence of tables::

        # comment
        @table people
        @cols id:int,name:text
        @pk id
        [1,"Matt"]

    Blank lines and lines starting with ``#`` or ``--`` are ignored.
    Foreign keys are not written; they are inferred again on decode from
    ``<table>_id`` column names.
    """

    name = "SQLON"

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the SQLON codec.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def decode(self, data: bytes) -> Database:
        """
        Parse SQLON text.

        Args:
            data: Raw SQLON bytes

        Returns:
            Database with inferred foreign keys

        Raises:
            ConversionError: On the first malformed line, tagged with its number
        """
        text = decode_text(data, self.name)
        database = Database()
        current: Optional[Table] = None

        for line_no, raw in enumerate(text.split("\n"), start=1):
            line = raw.strip()

            if not line or line.startswith("#") or line.startswith("--"):
                continue

            if line.startswith("@"):
                current = self._parse_directive(line, line_no, database, current)
                continue

            if current is None:
                raise self._error("row appears before @table", line_no, line)
            if not current.columns:
                raise self._error(f"row appears before @cols for table {current.name!r}", line_no, line)

            row = self.parse_row(line, line_no)
            if len(row) > len(current.columns):
                raise self._error(f"row has {len(row)} values but table {current.name!r} "
                                  f"has {len(current.columns)} columns", line_no, line)
            current.rows.append(row)

        validation = ValidationUtils.validate_database(database)
        if not validation.is_valid:
            raise ConversionError(
                "; ".join(error.message for error in validation.errors),
                ErrorType.MALFORMED_INPUT
            )
        for warning in validation.warnings:
            self.logger.debug(warning)

        infer_foreign_keys(database)
        self.logger.debug(f"Parsed SQLON with {len(database)} tables")
        return database

    def _parse_directive(self, line: str, line_no: int, database: Database,
                         current: Optional[Table]) -> Table:
        parts = line.split(None, 1)
        directive = parts[0]
        argument = parts[1].strip() if len(parts) > 1 else ""

        if directive == "@table":
            if not argument:
                raise self._error("@table requires a name", line_no, line)
            if database.table_by_name(argument) is not None:
                raise self._error(f"duplicate table {argument!r}", line_no, line)
            table = Table(name=argument)
            database.add_table(table)
            return table

        if current is None:
            raise self._error(f"directive {directive!r} appears before @table", line_no, line)

        if directive == "@cols":
            current.columns = self.parse_columns(argument, line_no)
            names = current.column_names()
            if len(names) != len(set(names)):
                raise self._error(f"duplicate column names in @cols for table {current.name!r}",
                                  line_no, line)
        elif directive == "@pk":
            if not argument:
                raise self._error("@pk requires a column name", line_no, line)
            current.primary_key = argument
        else:
            raise self._error(f"unknown directive {directive!r}", line_no, line)

        return current

    def parse_columns(self, definition: str, line_no: int = 0) -> List[Column]:
        """Parse a ``name:type[,name:type...]`` column list."""
        if not definition:
            raise self._error("@cols requires a list like name:type,name:type", line_no, definition)

        columns = []
        for part in definition.split(","):
            part = part.strip()
            if not part:
                continue

            name, sep, type_name = part.partition(":")
            name, type_name = name.strip(), type_name.strip()
            if not sep:
                raise self._error(f"invalid column definition {part!r} (expected name:type)", line_no, part)
            if not name:
                raise self._error(f"invalid column definition {part!r} (missing name)", line_no, part)
            if not ColumnType.is_valid(type_name):
                raise self._error(f"invalid column type {type_name!r} for column {name!r}", line_no, part)

            columns.append(Column(name, ColumnType(type_name)))

        if not columns:
            raise self._error("@cols produced no columns", line_no, definition)
        return columns

    def parse_row(self, line: str, line_no: int = 0) -> Row:
        """Parse a positional ``[v1,v2,...]`` data line."""
        if not (line.startswith("[") and line.endswith("]")):
            raise self._error(f"row must be a positional array like [1,\"Matt\",true], got {line!r}",
                              line_no, line)

        inner = line[1:-1].strip()
        if not inner:
            return []

        return [self.parse_value(token.strip(), line_no) for token in self._split_tokens(inner, line_no)]

    def parse_value(self, token: str, line_no: int = 0) -> Value:
        """Parse one literal: null, true, false, a quoted string or a number."""
        if not token:
            raise self._error("empty value token", line_no, token)

        lowered = token.lower()
        if lowered == "null":
            return Value.null()
        if lowered == "true":
            return Value.boolean(True)
        if lowered == "false":
            return Value.boolean(False)

        if token.startswith('"'):
            return Value.text(self._unquote(token, line_no))

        if "." in token or lowered.lstrip("+-") in ("inf", "nan"):
            if is_decimal_token(token):
                return Value.decimal(float(token))

        if is_int_token(token):
            return Value.integer(int(token))

        raise self._error(f"unable to parse value token {token!r}", line_no, token)

    def _unquote(self, token: str, line_no: int) -> str:
        if len(token) < 2 or not token.endswith('"'):
            raise self._error(f"invalid quoted string {token!r}", line_no, token)

        body = token[1:-1]
        chars = []
        escaping = False

        for ch in body:
            if escaping:
                # Unknown escapes keep the escaped character
                chars.append(_ESCAPES.get(ch, ch))
                escaping = False
            elif ch == "\\":
                escaping = True
            else:
                chars.append(ch)

        if escaping:
            raise self._error(f"unterminated escape in string {token!r}", line_no, token)
        return "".join(chars)

    def _split_tokens(self, inner: str, line_no: int) -> List[str]:
        """Split a row body on commas outside of quoted strings."""
        tokens = []
        start = 0
        in_string = False
        escaping = False

        for index, ch in enumerate(inner):
            if in_string:
                if escaping:
                    escaping = False
                elif ch == "\\":
                    escaping = True
                elif ch == '"':
                    in_string = False
                continue

            if ch == '"':
                in_string = True
            elif ch == ",":
                tokens.append(inner[start:index])
                start = index + 1

        if in_string:
            raise self._error("unterminated string in row", line_no, inner)

        tokens.append(inner[start:])
        return tokens

    def encode(self, database: Database) -> bytes:
        """
        Format a database as SQLON.

        Args:
            database: Database to format

        Returns:
            UTF-8 encoded SQLON text

        Raises:
            ConversionError: If a table has no columns or a name cannot be
                written on a directive line
        """
        blocks = []

        for table in database.tables:
            self.check_names(table)

        for table in database.tables:
            if not table.columns:
                raise ConversionError(f"table {table.name!r} has no columns and cannot be written as SQLON",
                                      ErrorType.UNSUPPORTED_SHAPE)
            lines = [
                f"@table {table.name}",
                "@cols " + ",".join(str(column) for column in table.columns),
            ]
            if table.primary_key:
                lines.append(f"@pk {table.primary_key}")
            lines.extend(self.format_row(row) for row in table.rows)
            blocks.append("\n".join(lines) + "\n")

        return "\n".join(blocks).encode("utf-8")

    @staticmethod
    def check_names(table: Table) -> None:
        """Reject table and column names the directive lines cannot carry."""
        if not _is_writable_name(table.name, _LINE_BREAKS):
            raise ConversionError(f"table name {table.name!r} cannot be written as SQLON", ErrorType.UNSUPPORTED_SHAPE)
        for column in table.columns:
            if not _is_writable_name(column.name, _COLUMN_SEPARATORS):
                raise ConversionError(
                    f"column name {column.name!r} in table {table.name!r} cannot be written as SQLON",
                    ErrorType.UNSUPPORTED_SHAPE
                )

    def format_row(self, row: Row) -> str:
        return "[" + ",".join(self.format_value(value) for value in row) + "]"

    @staticmethod
    def format_value(value: Value) -> str:
        if value.kind == ValueKind.INT:
            return str(value.raw)
        if value.kind == ValueKind.DECIMAL:
            return format_decimal(value.raw)
        if value.kind == ValueKind.BOOL:
            return "true" if value.raw else "false"
        if value.kind == ValueKind.TEXT:
            return '"' + "".join(_QUOTED.get(ch, ch) for ch in value.raw) + '"'
        return "null"

    @staticmethod
    def _error(message: str, line_no: int, token: str) -> ConversionError:
        return ConversionError(
            message,
            ErrorType.MALFORMED_INPUT,
            context={"token": token},
            line=line_no or None
        )
