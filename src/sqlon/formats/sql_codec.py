"""SQL codec: a minimal SQLite dump dialect."""

import logging
import math
from typing import List, Optional

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from ..models import Column, ColumnType, Database, Row, Table, Value, ValueKind
from ..types import CodecInterface, ConversionError, ErrorType
from .common import decode_text, format_decimal, infer_foreign_keys, is_int_token

DIALECT = "sqlite"

_SQL_TYPES = {
    ColumnType.INT: "INTEGER",
    ColumnType.TEXT: "TEXT",
    ColumnType.BOOL: "BOOLEAN",
    ColumnType.DECIMAL: "REAL",
    ColumnType.DATETIME: "DATETIME",
    ColumnType.NULL: "TEXT",
}

# Checked in order, on substrings of the declared type
_TYPE_AFFINITY = (
    ("INT", ColumnType.INT),
    ("BOOL", ColumnType.BOOL),
    ("REAL", ColumnType.DECIMAL),
    ("FLOA", ColumnType.DECIMAL),
    ("DOUB", ColumnType.DECIMAL),
    ("NUMERIC", ColumnType.DECIMAL),
    ("DECIMAL", ColumnType.DECIMAL),
    ("DATE", ColumnType.DATETIME),
    ("TIME", ColumnType.DATETIME),
)

# SQLite reads an out-of-range literal as infinity
_POSITIVE_INFINITY = "9e999"
_NEGATIVE_INFINITY = "-9e999"


def quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def column_type_for(sql_type: str) -> ColumnType:
    """Map a declared SQL type name to a column type; unknown names are text."""
    upper = sql_type.upper()
    for fragment, column_type in _TYPE_AFFINITY:
        if fragment in upper:
            return column_type
    return ColumnType.TEXT


def _malformed(message: str) -> ConversionError:
    return ConversionError(message, ErrorType.MALFORMED_INPUT)


class SQLCodec(CodecInterface):
    """
    Codec for SQL dumps.

    Writes one ``CREATE TABLE`` statement per table, with one column per
    line, followed by one ``INSERT`` statement per row. Reading parses the
    dump with ``sqlglot`` in the SQLite dialect; statements other than
    CREATE TABLE and INSERT are ignored.
    """

    name = "SQL"

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the SQL codec.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    # Encoding

    def encode(self, database: Database) -> bytes:
        """
        Write a database as a SQLite dump.

        Args:
            database: Database to write

        Returns:
            UTF-8 encoded SQL text

        Raises:
            ConversionError: If a table has no columns
        """
        blocks = []
        for table in database.tables:
            if not table.columns:
                raise ConversionError(f"table {table.name!r} has no columns and cannot be written as SQL",
                                      ErrorType.UNSUPPORTED_SHAPE)
            statements = [self.create_table_statement(table)]
            statements.extend(self.insert_statements(table))
            blocks.append("".join(statements))
        return "\n".join(blocks).encode("utf-8")

    def create_table_statement(self, table: Table) -> str:
        lines = []
        for column in table.columns:
            line = f"    {quote_ident(column.name)} {_SQL_TYPES[column.type]}"
            if table.primary_key and column.name == table.primary_key:
                line += " PRIMARY KEY"
            lines.append(line)
        return f"CREATE TABLE {quote_ident(table.name)} (\n" + ",\n".join(lines) + "\n);\n"

    def insert_statements(self, table: Table) -> List[str]:
        columns = ", ".join(quote_ident(name) for name in table.column_names())
        prefix = f"INSERT INTO {quote_ident(table.name)} ({columns}) VALUES "

        statements = []
        for row in table.rows:
            values = ", ".join(
                self.format_literal(table.value_at(row, index)) for index in range(len(table.columns))
            )
            statements.append(f"{prefix}({values});\n")
        return statements

    @staticmethod
    def format_literal(value: Value) -> str:
        if value.kind == ValueKind.INT:
            return str(value.raw)
        if value.kind == ValueKind.DECIMAL:
            if math.isnan(value.raw):
                return "NULL"
            if math.isinf(value.raw):
                return _POSITIVE_INFINITY if value.raw > 0 else _NEGATIVE_INFINITY
            return format_decimal(value.raw)
        if value.kind == ValueKind.BOOL:
            return "1" if value.raw else "0"
        if value.kind == ValueKind.TEXT:
            return "'" + value.raw.replace("'", "''") + "'"
        return "NULL"

    # Decoding

    def decode(self, data: bytes) -> Database:
        """
        Parse a SQL dump.

        Args:
            data: Raw SQL bytes

        Returns:
            Database with inferred foreign keys

        Raises:
            ConversionError: If the dump cannot be parsed or an INSERT does
                not fit the tables created before it
        """
        sql = decode_text(data, self.name)

        try:
            statements = sqlglot.parse(sql, read=DIALECT)
        except SqlglotError as e:
            raise ConversionError(f"could not parse SQL: {e}", ErrorType.MALFORMED_INPUT) from e

        database = Database()

        for statement in statements:
            if statement is None:
                continue

            if isinstance(statement, exp.Create) and statement.kind == "TABLE":
                table = self.parse_create_table(statement)
                if database.table_by_name(table.name) is not None:
                    raise _malformed(f"duplicate CREATE TABLE for {table.name!r}")
                database.add_table(table)
            elif isinstance(statement, exp.Insert):
                if not database.tables:
                    raise _malformed("INSERT statement before CREATE TABLE")
                table, rows = self.parse_insert(statement, database)
                table.rows.extend(rows)
            else:
                self.logger.debug(f"Ignoring SQL statement: {statement.sql(dialect=DIALECT)[:40]}")

        infer_foreign_keys(database)
        self.logger.debug(f"Parsed SQL with {len(database)} tables")
        return database

    def parse_create_table(self, statement: exp.Create) -> Table:
        """Build an empty table from a parsed ``CREATE TABLE`` statement."""
        schema = statement.this
        if not isinstance(schema, exp.Schema):
            raise _malformed(f"CREATE TABLE without a column list: {statement.sql(dialect=DIALECT)[:60]}")

        table = Table(name=schema.this.name)

        for expression in schema.expressions:
            if isinstance(expression, exp.ColumnDef):
                column = Column(expression.name, self._declared_type(expression))
                if table.column_index(column.name) is not None:
                    raise _malformed(f"duplicate column {column.name!r} in table {table.name!r}")
                table.columns.append(column)
                if self._is_primary(expression):
                    table.primary_key = column.name
                continue

            # Table level constraint
            primary = expression if isinstance(expression, exp.PrimaryKey) else expression.find(exp.PrimaryKey)
            if primary is not None:
                identifier = primary.find(exp.Identifier)
                if identifier is not None:
                    table.primary_key = identifier.name

        return table

    @staticmethod
    def _declared_type(column_def: exp.ColumnDef) -> ColumnType:
        kind = column_def.args.get("kind")
        if kind is None:
            return ColumnType.TEXT
        return column_type_for(kind.sql())

    @staticmethod
    def _is_primary(column_def: exp.ColumnDef) -> bool:
        for constraint in column_def.args.get("constraints") or []:
            if isinstance(constraint.kind, exp.PrimaryKeyColumnConstraint):
                return True
        return False

    def parse_insert(self, statement: exp.Insert, database: Database):
        """
        Convert a parsed ``INSERT`` statement into rows of an existing table.

        Returns:
            Tuple of (target table, list of rows)
        """
        target = statement.this
        column_names = None
        if isinstance(target, exp.Schema):
            column_names = [expression.name for expression in target.expressions]
            target = target.this

        table = database.table_by_name(target.name)
        if table is None:
            raise _malformed(f"INSERT into unknown table {target.name!r}")
        if column_names is None:
            column_names = table.column_names()

        indexes = []
        for name in column_names:
            index = table.column_index(name)
            if index is None:
                raise _malformed(f"INSERT into {table.name!r} names unknown column {name!r}")
            indexes.append(index)

        values = statement.expression
        if not isinstance(values, exp.Values):
            raise _malformed(f"INSERT into {table.name!r} must use a VALUES clause")

        rows = []
        for item in values.expressions:
            literals = item.expressions if isinstance(item, exp.Tuple) else [item]
            if len(literals) != len(indexes):
                raise _malformed(
                    f"INSERT into {table.name!r} lists {len(indexes)} columns but {len(literals)} values"
                )

            row: Row = [Value.null()] * len(table.columns)
            for index, literal in zip(indexes, literals):
                row[index] = self.parse_literal(literal, table.columns[index].type)
            rows.append(row)
        return table, rows

    def parse_literal(self, literal: exp.Expression, column_type: ColumnType) -> Value:
        """Convert a parsed SQL literal, reading 0/1 as booleans in bool columns."""
        if isinstance(literal, exp.Null):
            return Value.null()
        if isinstance(literal, exp.Boolean):
            return Value.boolean(literal.this)
        if isinstance(literal, exp.Literal) and literal.is_string:
            return Value.text(literal.this)
        # A double-quoted token in a VALUES list parses as a column reference
        if isinstance(literal, (exp.Column, exp.Identifier)):
            return Value.text(literal.name)

        token = self._number_token(literal)
        if token is None:
            self.logger.debug(f"Keeping SQL expression as text: {literal.sql(dialect=DIALECT)}")
            return Value.text(literal.sql(dialect=DIALECT))

        if column_type == ColumnType.BOOL and token in ("0", "1"):
            return Value.boolean(token == "1")
        if is_int_token(token):
            return Value.integer(int(token))
        try:
            return Value.decimal(float(token))
        except ValueError:
            return Value.text(token)

    @staticmethod
    def _number_token(literal: exp.Expression) -> Optional[str]:
        """Return the text of a numeric literal, folding a leading minus sign."""
        sign = ""
        if isinstance(literal, exp.Neg):
            sign, literal = "-", literal.this
        if isinstance(literal, exp.Literal) and not literal.is_string:
            return sign + literal.this
        return None
