"""Tests for the importer."""

import json

import pytest

from sqlon.importer import Importer
from sqlon.models import Column, ColumnType, ForeignKey, Table, Value
from sqlon.types import ConversionError, ErrorType


def schema(table):
    return [str(column) for column in table.columns]


class TestImporter:
    """Tests for Importer class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.importer = Importer()

    def test_flat_document(self):
        """Test that a scalar-only root becomes the single table root."""
        database = self.importer.import_text('{"name":"Matt","id":1}')

        assert database.table_names() == ["root"]
        root = database.table_by_name("root")
        assert schema(root) == ["id:int", "name:text"]
        assert root.rows == [[Value.integer(1), Value.text("Matt")]]

    def test_flat_document_columns_sorted(self, flat_document):
        """Test lexicographic column order for primitive tables."""
        database = self.importer.import_document(flat_document)
        root = database.table_by_name("root")

        assert root.column_names() == sorted(flat_document)
        assert len(root.rows) == 1

    def test_array_only_root(self):
        """Test that collections under a primitive-free root get no foreign key."""
        database = self.importer.import_text('{"tags":["a","b"]}')

        tags = database.table_by_name("tags")
        assert database.table_names() == ["tags"]
        assert schema(tags) == ["value:text"]
        assert tags.rows == [[Value.text("a")], [Value.text("b")]]
        assert tags.foreign_keys == []

    def test_nested_parent_and_child(self, nested_document):
        """Test that a mixed object becomes a parent of its nested object."""
        database = self.importer.import_document(nested_document)

        assert database.table_names() == ["user", "user_addr"]
        addr = database.table_by_name("user_addr")
        assert schema(addr) == ["user_id:int", "city:text"]
        assert addr.foreign_keys == [ForeignKey("user_id", "user", "id")]
        assert addr.rows == [[Value.integer(1), Value.text("X")]]

    def test_mixed_root_keeps_source_order(self):
        """Test that _root preserves the key order of the source text."""
        text = '{"zeta": 1, "items": [{"a": 1}], "alpha": "x", "mid": true}'
        database = self.importer.import_text(text)

        root = database.table_by_name("_root")
        assert root.column_names() == ["zeta", "alpha", "mid"]
        assert root.rows == [[Value.integer(1), Value.text("x"), Value.boolean(True)]]

    def test_root_collections_not_keyed_to_root_table(self, mixed_root_document):
        """Test that root-level collections carry no foreign key to _root."""
        database = self.importer.import_document(mixed_root_document)

        assert database.table_names() == ["_root", "items", "settings"]
        items = database.table_by_name("items")
        settings = database.table_by_name("settings")
        assert items.foreign_keys == []
        assert settings.foreign_keys == []
        assert items.column_names() == ["price", "qty", "sku"]

    def test_array_of_uniform_objects(self):
        """Test that N uniform objects give N rows with sorted columns."""
        items = [{"name": f"n{i}", "rank": i, "ok": i % 2 == 0} for i in range(5)]
        database = self.importer.import_document({"items": items})

        table = database.table_by_name("items")
        assert table.column_names() == ["name", "ok", "rank"]
        assert len(table.rows) == 5

    def test_child_foreign_keys_follow_parent_row_position(self):
        """Test that child keys are parent positions when the parent has no id."""
        document = {"groups": [
            {"name": "a", "members": ["x", "y"]},
            {"name": "b", "members": ["z"]},
        ]}
        database = self.importer.import_document(document)

        members = database.table_by_name("groups_members")
        assert members.column_names()[0] == "groups_id"
        assert [row[0].raw for row in members.rows] == [1, 1, 2]

    def test_child_foreign_keys_follow_explicit_ids(self, orders_document):
        """Test that an integer id column is used as the join key."""
        database = self.importer.import_document(orders_document)

        lines = database.table_by_name("orders_lines")
        assert [row[0].raw for row in lines.rows] == [10, 10, 20, 20]

    def test_fk_columns_stay_first_after_sorting(self):
        """Test the ordering policy for tables with foreign keys."""
        document = {"p": {"k": 1, "c": [{"zz": 1, "aa": 2}]}}
        database = self.importer.import_document(document)

        assert database.table_by_name("p_c").column_names() == ["p_id", "aa", "zz"]

    def test_tables_sorted_by_name(self):
        """Test that the table list is sorted regardless of discovery order."""
        database = self.importer.import_document({"b": [1], "a": [2], "c": {"x": 1}})
        assert database.table_names() == ["a", "b", "c"]

    def test_root_array(self):
        """Test that a root array is named array_1."""
        database = self.importer.import_text('[{"a": 1}, {"a": 2}]')

        assert database.table_names() == ["array_1"]
        assert len(database.table_by_name("array_1").rows) == 2

    def test_scalar_root_produces_no_tables(self, caplog):
        """Test that scalar documents are imported as an empty database."""
        database = self.importer.import_text("42")

        assert len(database) == 0
        assert "Unsupported root data type" in caplog.text

    def test_arrays_of_arrays_are_skipped(self):
        """Test that arrays of arrays are skipped silently."""
        database = self.importer.import_document({"name": "m", "grid": [[1, 2], [3, 4]]})

        assert database.table_names() == ["_root"]

    def test_integral_floats_are_integers(self):
        """Test that 2.0 is imported as an integer."""
        database = self.importer.import_text('{"n": 2.0, "d": 2.5}')

        root = database.table_by_name("root")
        assert schema(root) == ["d:decimal", "n:int"]
        assert root.rows[0] == [Value.decimal(2.5), Value.integer(2)]

    def test_invalid_json_raises(self):
        """Test that malformed input aborts the import."""
        with pytest.raises(ConversionError):
            self.importer.import_text('{"a": ')

    def test_child_object_field_named_like_its_key(self):
        """Test that a child object may not carry its own <parent>_id field."""
        with pytest.raises(ConversionError, match="user_id") as exc_info:
            self.importer.import_text('{"user":{"n":1,"addr":{"user_id":9,"c":1}}}')
        assert exc_info.value.error_type == ErrorType.UNSUPPORTED_SHAPE

    def test_child_array_field_named_like_its_key(self):
        """Test that array elements may not carry their own <parent>_id field."""
        document = {"orders": [{"n": 1, "lines": [{"orders_id": 7, "q": 1}, {"orders_id": 8, "q": 2}]}]}

        with pytest.raises(ConversionError, match="orders_id") as exc_info:
            self.importer.import_text(json.dumps(document))
        assert exc_info.value.error_type == ErrorType.UNSUPPORTED_SHAPE

    def test_import_bytes(self):
        """Test importing raw bytes."""
        database = self.importer.import_bytes(json.dumps({"k": "v"}).encode("utf-8"))
        assert database.table_names() == ["root"]

    def test_imports_do_not_share_state(self):
        """Test that every import starts from a fresh context."""
        self.importer.import_text("[1]")
        database = self.importer.import_text("[2]")

        assert database.table_names() == ["array_1"]


class TestColumnOrder:
    """Tests for the final column ordering policy."""

    def test_root_table_is_left_alone(self):
        """Test that _root keeps its captured order."""
        table = Table(name="_root", columns=[Column("b", ColumnType.INT), Column("a", ColumnType.INT)])
        Importer.apply_column_order(table)
        assert table.column_names() == ["b", "a"]

    def test_plain_table_sorted(self):
        """Test that tables without foreign keys are fully sorted."""
        table = Table(
            name="t",
            columns=[Column("b", ColumnType.INT), Column("a", ColumnType.TEXT)],
            rows=[[Value.integer(1), Value.text("x")]]
        )
        Importer.apply_column_order(table)

        assert table.column_names() == ["a", "b"]
        assert table.rows == [[Value.text("x"), Value.integer(1)]]
