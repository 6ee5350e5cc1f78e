"""Tests for node processors."""

import pytest

from sqlon.models import Column, ColumnType, ForeignKey, Value
from sqlon.processors import ImportContext, NodeRouter, ParentLink
from sqlon.processors.context import child_path
from sqlon.types import ConversionError, ErrorType


class TestImportContext:
    """Tests for ImportContext class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.context = ImportContext()

    def test_array_names_are_numbered(self):
        """Test naming of unnamed root arrays."""
        assert self.context.next_array_name() == "array_1"
        assert self.context.next_array_name() == "array_2"

    def test_counter_is_per_context(self):
        """Test that a new context restarts the counter."""
        self.context.next_array_name()
        assert ImportContext().next_array_name() == "array_1"

    def test_child_table_gets_leading_foreign_key(self):
        """Test that child tables start with the parent's id column."""
        table = self.context.create_table(
            "users_tags", [Column("value", ColumnType.TEXT)], ParentLink("users", 3)
        )

        assert table.column_names() == ["users_id", "value"]
        assert table.columns[0].type == ColumnType.INT
        assert table.foreign_keys == [ForeignKey("users_id", "users", "id")]

    def test_child_column_clashing_with_foreign_key(self):
        """Test that a data column may not reuse the foreign key column name."""
        with pytest.raises(ConversionError) as exc_info:
            self.context.create_table(
                "users_addr", [Column("users_id", ColumnType.INT)], ParentLink("users", 1)
            )

        assert exc_info.value.error_type == ErrorType.UNSUPPORTED_SHAPE
        assert "users_addr" not in self.context.tables

    def test_placeholder_lifecycle(self):
        """Test that placeholders stop being placeholders once rows arrive."""
        table = self.context.create_placeholder("empty")
        assert [str(column) for column in table.columns] == ["value:text"]
        assert self.context.is_placeholder("empty")

        row_id = self.context.append_row(table, [Value.text("x")])
        assert row_id == 1
        assert not self.context.is_placeholder("empty")

    def test_child_path(self):
        """Test joining of table paths."""
        assert child_path("", "tags") == "tags"
        assert child_path("users", "tags") == "users_tags"


class TestObjectProcessor:
    """Tests for object normalization."""

    def setup_method(self):
        """Set up test fixtures."""
        self.router = NodeRouter()
        self.context = self.router.context

    def test_primitive_root_object_becomes_root_table(self):
        """Test that a primitive-only root is stored as table root."""
        self.router.route({"name": "Matt", "id": 1}, "")

        table = self.context.get("root")
        assert table.column_names() == ["id", "name"]
        assert table.rows == [[Value.integer(1), Value.text("Matt")]]

    def test_empty_object_produces_nothing(self):
        """Test that empty objects are skipped."""
        self.router.route({}, "")
        assert self.context.tables == {}

    def test_mixed_object_links_children(self):
        """Test that nested fields of a mixed object are keyed to its row."""
        self.router.route({"user": {"id": 7, "name": "A", "addr": {"city": "X"}}}, "")

        user = self.context.get("user")
        addr = self.context.get("user_addr")
        assert user.column_names() == ["id", "name"]
        assert addr.column_names() == ["user_id", "city"]
        assert addr.rows == [[Value.integer(7), Value.text("X")]]
        assert addr.foreign_key_to("user") is not None

    def test_nested_only_object_under_parent_has_no_key(self):
        """Test that objects without primitives pass their fields down unkeyed."""
        self.router.route({"a": 1, "b": {"c": {"d": 2}}}, "doc")

        assert self.context.get("doc_b") is None
        nested = self.context.get("doc_b_c")
        assert nested.column_names() == ["d"]
        assert nested.foreign_keys == []

    def test_existing_root_level_table_is_not_overwritten(self):
        """Test that a second unparented object at the same path is skipped."""
        self.router.route({"x": 1}, "cfg")
        self.router.route({"x": 2}, "cfg")

        assert self.context.get("cfg").rows == [[Value.integer(1)]]

    def test_rejects_non_object(self):
        """Test type checking of the processed node."""
        with pytest.raises(ValueError, match="expects dict data"):
            self.router.object_processor.process([1], "x")


class TestArrayProcessor:
    """Tests for array normalization."""

    def setup_method(self):
        """Set up test fixtures."""
        self.router = NodeRouter()
        self.context = self.router.context

    def test_scalar_array(self):
        """Test that scalar arrays get a single value column."""
        self.router.route(["a", "b"], "tags")

        table = self.context.get("tags")
        assert [str(column) for column in table.columns] == ["value:text"]
        assert table.rows == [[Value.text("a")], [Value.text("b")]]
        assert table.foreign_keys == []

    def test_object_array_uses_first_element_schema(self):
        """Test column inference from the first element only."""
        self.router.route([
            {"b": 1, "a": "x"},
            {"a": "y", "extra": True},
            "not an object",
            {"b": {"nested": 1}},
        ], "items")

        table = self.context.get("items")
        assert table.column_names() == ["a", "b"]
        assert table.rows == [
            [Value.text("x"), Value.integer(1)],
            [Value.text("y"), Value.null()],
            [Value.null(), Value.null()],
        ]

    def test_empty_array_creates_placeholder(self):
        """Test placeholder tables for empty arrays."""
        self.router.route([], "nothing")

        table = self.context.get("nothing")
        assert [str(column) for column in table.columns] == ["value:text"]
        assert table.rows == []

    def test_placeholder_is_upgraded_by_later_rows(self):
        """Test that a later non-empty array replaces the placeholder schema."""
        self.router.route({"rows": [{"id": 1, "tags": []}, {"id": 2, "tags": [5, 6]}]}, "")

        tags = self.context.get("rows_tags")
        assert [str(column) for column in tags.columns] == ["rows_id:int", "value:int"]
        assert tags.rows == [
            [Value.integer(2), Value.integer(5)],
            [Value.integer(2), Value.integer(6)],
        ]

    def test_array_of_arrays_is_skipped(self):
        """Test that arrays of arrays produce no table."""
        self.router.route([[1, 2], [3]], "matrix")
        assert self.context.get("matrix") is None

    def test_unnamed_root_arrays_are_numbered(self):
        """Test names of arrays found at the root."""
        self.router.route([1, 2], "")
        assert self.context.get("array_1") is not None

    def test_grandchildren_key_on_child_row_position(self, orders_document):
        """Test recursive keying of nested arrays."""
        orders_document["orders"][0]["lines"][1]["parts"] = ["p1", "p2"]
        self.router.route(orders_document, "")

        orders = self.context.get("orders")
        lines = self.context.get("orders_lines")
        parts = self.context.get("orders_lines_parts")

        assert orders.column_names() == ["customer", "id"]
        assert lines.column_names() == ["orders_id", "qty", "sku"]
        assert [row[0].raw for row in lines.rows] == [10, 10, 20, 20]
        assert parts.column_names() == ["orders_lines_id", "value"]
        # parts hang under the second line row
        assert [row[0].raw for row in parts.rows] == [2, 2]

    def test_rejects_non_list(self):
        """Test type checking of the processed node."""
        with pytest.raises(ValueError, match="expects list data"):
            self.router.array_processor.process({"a": 1}, "x")
