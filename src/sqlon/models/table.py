"""Table, column and foreign key models."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .value import ColumnType, Value, ValueKind

Row = List[Value]


@dataclass(frozen=True)
class Column:
    """A named, typed table column."""

    name: str
    type: ColumnType

    def __str__(self) -> str:
        return f"{self.name}:{self.type.value}"


@dataclass(frozen=True)
class ForeignKey:
    """
    An inferred foreign key.

    Foreign keys are schema hints only: the referenced column is never
    checked for existence or uniqueness.
    """

    name: str
    referenced_table: str
    referenced_column: str = "id"


@dataclass
class Table:
    """
    A relational table with positional rows.

    ``rows[i][j]`` holds the value of ``columns[j]``. Rows may be shorter
    than the column list; missing trailing positions read as null.
    """

    name: str
    columns: List[Column] = field(default_factory=list)
    primary_key: Optional[str] = None
    rows: List[Row] = field(default_factory=list)
    foreign_keys: List[ForeignKey] = field(default_factory=list)

    def __post_init__(self):
        """Validate table after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate table integrity."""
        if not isinstance(self.name, str):
            raise ValueError("table name must be a string")

        names = self.column_names()
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate column names in table {self.name!r}")

    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def column_index(self, name: str) -> Optional[int]:
        """Return the position of column ``name`` or None."""
        for index, column in enumerate(self.columns):
            if column.name == name:
                return index
        return None

    def add_foreign_key(self, foreign_key: ForeignKey) -> None:
        """Attach a foreign key unless an identical one is already present."""
        if foreign_key not in self.foreign_keys:
            self.foreign_keys.append(foreign_key)

    def foreign_key_names(self) -> List[str]:
        return [fk.name for fk in self.foreign_keys]

    def foreign_key_to(self, table_name: str) -> Optional[ForeignKey]:
        """Return the first foreign key referencing ``table_name``."""
        for fk in self.foreign_keys:
            if fk.referenced_table == table_name:
                return fk
        return None

    def non_fk_columns(self) -> List[Column]:
        fk_names = set(self.foreign_key_names())
        return [column for column in self.columns if column.name not in fk_names]

    def value_at(self, row: Row, index: int) -> Value:
        """Read position ``index`` of ``row``, treating missing cells as null."""
        if index < len(row):
            return row[index]
        return Value.null()

    def row_id(self, row_index: int) -> int:
        """
        Compute the join key of a row.

        The integer value of a column literally named ``id`` wins when
        present; otherwise the row's 1-based position is used.

        Args:
            row_index: 0-based index of the row in ``rows``

        Returns:
            Row id used as foreign key value by child tables
        """
        id_index = self.column_index("id")
        if id_index is not None:
            value = self.value_at(self.rows[row_index], id_index)
            if value.kind == ValueKind.INT:
                return value.raw
        return row_index + 1

    def reorder_columns(self, ordered_names: List[str]) -> None:
        """Reorder columns to ``ordered_names``, permuting row cells along."""
        if sorted(ordered_names) != sorted(self.column_names()):
            raise ValueError(f"column order for {self.name!r} must name every column exactly once")

        positions = [self.column_index(name) for name in ordered_names]
        self.columns = [self.columns[position] for position in positions]
        self.rows = [
            [self.value_at(row, position) for position in positions]
            for row in self.rows
        ]

    def to_dict(self) -> Dict[str, object]:
        """Summarize the table schema for logging and debugging."""
        return {
            "name": self.name,
            "columns": [str(column) for column in self.columns],
            "primaryKey": self.primary_key,
            "foreignKeys": [
                f"{fk.name}->{fk.referenced_table}.{fk.referenced_column}"
                for fk in self.foreign_keys
            ],
            "rowCount": len(self.rows),
        }
