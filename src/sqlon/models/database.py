"""Database model."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .table import Table


@dataclass
class Database:
    """An ordered collection of uniquely named tables."""

    tables: List[Table] = field(default_factory=list)

    def __post_init__(self):
        names = self.table_names()
        if len(names) != len(set(names)):
            raise ValueError("duplicate table names in database")

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables)

    def __len__(self) -> int:
        return len(self.tables)

    def table_names(self) -> List[str]:
        return [table.name for table in self.tables]

    def table_by_name(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def add_table(self, table: Table) -> None:
        """Append a table, rejecting duplicate names."""
        if self.table_by_name(table.name) is not None:
            raise ValueError(f"table {table.name!r} already exists")
        self.tables.append(table)
