"""Tests for the command-line interface."""

import json

from click.testing import CliRunner

from sqlon import __version__
from sqlon.cli import main


class TestCLI:
    """Tests for the sqlon command group."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_version(self):
        """Test the version option."""
        result = self.runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_to_sql(self, temp_dir):
        """Test printing the SQL dump of a SQLON file."""
        source = temp_dir / "people.sqlon"
        source.write_text('@table people\n@cols id:int,name:text\n[1,"Ann"]\n', encoding="utf-8")

        result = self.runner.invoke(main, ["to-sql", str(source)])

        assert result.exit_code == 0
        assert result.output == (
            'CREATE TABLE "people" (\n'
            '    "id" INTEGER,\n'
            '    "name" TEXT\n'
            ');\n'
            'INSERT INTO "people" ("id", "name") VALUES (1, \'Ann\');\n'
        )

    def test_to_sql_malformed_input(self, temp_dir):
        """Test that a parse error exits with status 1."""
        source = temp_dir / "bad.sqlon"
        source.write_text("[1]\n", encoding="utf-8")

        result = self.runner.invoke(main, ["to-sql", str(source)])

        assert result.exit_code == 1
        assert "❌ Conversion failed:" in result.output
        assert "line 1: row appears before @table" in result.output

    def test_missing_input_file(self, temp_dir):
        """Test that click rejects a missing input path."""
        result = self.runner.invoke(main, ["to-sql", str(temp_dir / "missing.sqlon")])
        assert result.exit_code == 2

    def test_json_to_sqlon_default_output(self, write_json, flat_document):
        """Test the default output path next to the input."""
        source = write_json(flat_document, "flat.json")

        result = self.runner.invoke(main, ["json-to-sqlon", str(source)])

        target = source.with_name("flat.sqlon")
        assert result.exit_code == 0
        assert f"Wrote 1 tables to {target}" in result.output
        assert target.read_text(encoding="utf-8").startswith("@table root\n")

    def test_sqlon_to_json_explicit_output(self, temp_dir):
        """Test writing JSON to a chosen path."""
        source = temp_dir / "doc.sqlon"
        source.write_text('@table tags\n@cols value:text\n["a"]\n["b"]\n', encoding="utf-8")
        target = temp_dir / "result.json"

        result = self.runner.invoke(main, ["sqlon-to-json", str(source), str(target)])

        assert result.exit_code == 0
        assert json.loads(target.read_text(encoding="utf-8")) == {"tags": ["a", "b"]}

    def test_convert_json(self, write_json, temp_dir, nested_document):
        """Test the JSON to SQLON and back command."""
        source = write_json(nested_document, "json/user.json")

        result = self.runner.invoke(main, ["convert-json", str(source)])

        assert result.exit_code == 0
        assert "✅ Original JSON:" in result.output
        assert "✅ SQLON:" in result.output
        assert "✅ Roundtrip JSON:" in result.output
        assert (temp_dir / "sqlon" / "user.sqlon").exists()
        assert (temp_dir / "json" / "user.roundtrip.json").exists()

    def test_roundtrip(self, write_json, temp_dir, orders_document):
        """Test the four-step roundtrip command."""
        source = write_json(orders_document)
        out_dir = temp_dir / "out"

        result = self.runner.invoke(main, ["roundtrip", str(source), "--out", str(out_dir)])

        assert result.exit_code == 0
        assert f"✅ Artefacts written to: {out_dir}" in result.output
        assert "📄 Log written to:" in result.output
        assert sorted(path.name for path in out_dir.iterdir()) == [
            "01.sqlon", "02.sqlite.sql", "03.roundtrip.sqlon", "04.json.out.json", "pipeline.log.jsonl"
        ]

    def test_verbose_roundtrip_prints_step_timings(self, write_json, temp_dir, orders_document):
        """Test that --verbose adds the profiler summary to the roundtrip output."""
        source = write_json(orders_document)

        result = self.runner.invoke(main, ["--verbose", "roundtrip", str(source), "-o", str(temp_dir / "out")])

        assert result.exit_code == 0
        assert "⏱️  4 steps in" in result.output
        assert "SQLON → SQL (SQLite)" in result.output

    def test_quiet_roundtrip_has_no_timings(self, write_json, temp_dir, flat_document):
        """Test that timings are only printed with --verbose."""
        source = write_json(flat_document)

        result = self.runner.invoke(main, ["roundtrip", str(source), "-o", str(temp_dir / "out")])

        assert result.exit_code == 0
        assert "⏱️" not in result.output

    def test_roundtrip_failure(self, temp_dir):
        """Test that a failing pipeline exits with status 1."""
        source = temp_dir / "broken.json"
        source.write_text("{", encoding="utf-8")

        result = self.runner.invoke(main, ["roundtrip", str(source), "-o", str(temp_dir / "out")])

        assert result.exit_code == 1
        assert "JSON → SQLON" in result.output

    def test_validate_valid(self, write_json):
        """Test validation of a convertible file."""
        source = write_json({"grid": [[1]], "name": "x"})

        result = self.runner.invoke(main, ["validate", str(source)])

        assert result.exit_code == 0
        assert "Array of arrays at $.grid" in result.output
        assert "is valid" in result.output

    def test_validate_invalid(self, temp_dir):
        """Test validation of malformed JSON."""
        source = temp_dir / "broken.json"
        source.write_text('{"a": }', encoding="utf-8")

        result = self.runner.invoke(main, ["validate", str(source)])

        assert result.exit_code == 1
        assert "❌ Invalid JSON:" in result.output
        assert "(line 1, column 7)" in result.output
