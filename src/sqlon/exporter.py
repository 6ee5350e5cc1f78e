"""Exporter: rebuilds JSON document trees from a relational Database."""

import logging
from typing import Any, Dict, List, Optional

from .models import Database, Table, ValueKind
from .processors.context import DOCUMENT_TABLE, ROOT_TABLE, VALUE_COLUMN

INTERNAL_ID_COLUMN = "_id"


class Exporter:
    """
    Inverse of the importer.

    Tables that are not attached to a parent become top-level fields. Child
    tables (named ``<parent>_<field>`` and carrying a foreign key to the
    parent) are joined back into their parent rows on the parent's row id,
    recursively. One-element results collapse to the bare element at every
    level, and ``_root`` fields are spliced in front of everything else.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the exporter.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def export(self, database: Database) -> Dict[str, Any]:
        """
        Export a database as a JSON-compatible tree.

        Args:
            database: Database to export

        Returns:
            Dictionary ready for ``json.dumps``
        """
        children = self._child_index(database)
        attached = {child.name for kids in children.values() for child in kids}
        top_level = [table for table in database.tables if table.name not in attached]

        result: Dict[str, Any] = {}

        root_table = self._spliced_table(top_level)
        if root_table is not None:
            result.update(self._export_rows(root_table, range(1), children, allow_scalars=False)[0])

        for table in top_level:
            if table is root_table:
                continue
            items = self._export_rows(table, range(len(table.rows)), children)
            result[table.name] = self._collapse(items)

        self.logger.info(f"Exported {len(top_level)} top-level tables "
                         f"({len(attached)} nested)")
        return result

    def _spliced_table(self, top_level: List[Table]) -> Optional[Table]:
        """Pick the table whose single row forms the document's own fields."""
        for table in top_level:
            if table.name == ROOT_TABLE and len(table.rows) == 1:
                return table

        if len(top_level) == 1:
            table = top_level[0]
            if table.name == DOCUMENT_TABLE and len(table.rows) == 1:
                return table

        return None

    @staticmethod
    def _child_index(database: Database) -> Dict[str, List[Table]]:
        """Map each table name to the child tables nested under it."""
        children: Dict[str, List[Table]] = {}

        for parent in database.tables:
            prefix = parent.name + "_"
            for table in database.tables:
                if table is parent or not table.name.startswith(prefix):
                    continue
                if table.foreign_key_to(parent.name) is not None:
                    children.setdefault(parent.name, []).append(table)

        return children

    def _export_rows(self, table: Table, row_indices, children: Dict[str, List[Table]],
                     parent_name: Optional[str] = None,
                     allow_scalars: bool = True) -> List[Any]:
        """
        Export selected rows of a table.

        Args:
            table: Table to export
            row_indices: Indices of the rows to export, in order
            children: Child table index from ``_child_index``
            parent_name: Parent table name when ``table`` is a child table
            allow_scalars: Whether a lone ``value`` column may export as scalars

        Returns:
            One object per row, or one scalar per row for ``value`` tables
        """
        link_column = None
        if parent_name is not None:
            link_column = table.foreign_key_to(parent_name).name

        kids = children.get(table.name, [])
        fields = [
            (index, column.name) for index, column in enumerate(table.columns)
            if column.name not in (link_column, INTERNAL_ID_COLUMN)
        ]
        scalar_rows = allow_scalars and not kids and [name for _, name in fields] == [VALUE_COLUMN]

        items = []
        for row_index in row_indices:
            row = table.rows[row_index]

            if scalar_rows:
                items.append(table.value_at(row, fields[0][0]).to_python())
                continue

            obj = {name: table.value_at(row, index).to_python() for index, name in fields}

            row_id = table.row_id(row_index)
            for child in kids:
                field_name = child.name[len(table.name) + 1:]
                joined = self._join(child, table.name, row_id)
                obj[field_name] = self._collapse(
                    self._export_rows(child, joined, children, table.name)
                )

            items.append(obj)

        return items

    @staticmethod
    def _join(child: Table, parent_name: str, row_id: int) -> List[int]:
        """Indices of the child rows whose foreign key equals ``row_id``."""
        fk_index = child.column_index(child.foreign_key_to(parent_name).name)
        if fk_index is None:
            return []

        matches = []
        for index, row in enumerate(child.rows):
            value = child.value_at(row, fk_index)
            if value.kind == ValueKind.INT and value.raw == row_id:
                matches.append(index)
        return matches

    @staticmethod
    def _collapse(items: List[Any]) -> Any:
        """Replace a one-element list by its element."""
        if len(items) == 1:
            return items[0]
        return items
