"""Per-import state shared by the node processors."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from ..models import Column, ColumnType, ForeignKey, Row, Table
from ..types import ConversionError, ErrorType

ROOT_TABLE = "_root"
DOCUMENT_TABLE = "root"
VALUE_COLUMN = "value"


@dataclass(frozen=True)
class ParentLink:
    """The parent row a child row hangs under."""

    table_name: str
    row_id: int

    @property
    def fk_column(self) -> str:
        return f"{self.table_name}_id"


def child_path(path: str, key: str) -> str:
    """Join a table path and a field name the way child tables are named."""
    return f"{path}_{key}" if path else key


class ImportContext:
    """
    Mutable state of a single import call.

    Holds the tables synthesized so far, keyed by name, and the counter
    used to name unnamed root-level arrays. A new context is created for
    every import, so nothing leaks between conversions.
    """

    def __init__(self):
        self.tables: Dict[str, Table] = {}
        self.array_counter = 1
        self._placeholders: Set[str] = set()

    def next_array_name(self) -> str:
        name = f"array_{self.array_counter}"
        self.array_counter += 1
        return name

    def get(self, name: str) -> Optional[Table]:
        return self.tables.get(name)

    def create_table(self, name: str, columns: List[Column],
                     parent: Optional[ParentLink] = None) -> Table:
        """
        Register a new table, prepending the foreign key column for child tables.

        Args:
            name: Table name
            columns: Data columns
            parent: Parent link when the table is a child table

        Returns:
            The registered table

        Raises:
            ConversionError: If a data column has the foreign key column's name
        """
        if parent is not None:
            if any(column.name == parent.fk_column for column in columns):
                raise ConversionError(
                    f"table {name!r} has a field named {parent.fk_column!r}, "
                    f"which is reserved for the key to {parent.table_name!r}",
                    ErrorType.UNSUPPORTED_SHAPE
                )
            columns = [Column(parent.fk_column, ColumnType.INT)] + list(columns)

        table = Table(name=name, columns=list(columns))
        if parent is not None:
            table.add_foreign_key(ForeignKey(parent.fk_column, parent.table_name, "id"))

        self.tables[name] = table
        self._placeholders.discard(name)
        return table

    def create_placeholder(self, name: str, parent: Optional[ParentLink] = None) -> Table:
        """Register the single ``value:text`` table used for empty arrays."""
        table = self.create_table(name, [Column(VALUE_COLUMN, ColumnType.TEXT)], parent)
        self._placeholders.add(name)
        return table

    def is_placeholder(self, name: str) -> bool:
        table = self.tables.get(name)
        return name in self._placeholders and table is not None and not table.rows

    def append_row(self, table: Table, row: Row) -> int:
        """Append a row and return its row id."""
        table.rows.append(row)
        self._placeholders.discard(table.name)
        return table.row_id(len(table.rows) - 1)
