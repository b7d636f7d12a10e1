"""
Tests for the base output formatter and table helper.
"""

import json

import pytest

from src.shared_utilities.base_output_formatter import (
    BaseOutputFormatter,
    OutputFormat,
    TableFormatter,
)


class EchoFormatter(BaseOutputFormatter):
    """Minimal concrete formatter."""

    def _format_table(self, data, **kwargs):
        return f"table:{data}"

    def _format_csv(self, data, **kwargs):
        return f"csv:{data}"

    def _format_html(self, data, **kwargs):
        return f"<p>{data}</p>"


class TestOutputFormat:
    """Test OutputFormat."""

    def test_choices(self):
        assert OutputFormat.choices() == ["html", "table", "json", "csv"]


class TestBaseOutputFormatter:
    """Test format dispatch and saving."""

    def test_dispatch(self):
        formatter = EchoFormatter()

        assert formatter.format("x", OutputFormat.TABLE) == "table:x"
        assert formatter.format("x", OutputFormat.CSV) == "csv:x"
        assert formatter.format("x", OutputFormat.HTML) == "<p>x</p>"

    def test_json_default(self):
        output = EchoFormatter().format({"b": 1, "a": 2}, OutputFormat.JSON)

        assert json.loads(output) == {"b": 1, "a": 2}
        assert output.index('"b"') < output.index('"a"')

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported format type"):
            EchoFormatter().format("x", "yaml")

    def test_save_creates_parents(self, tmp_path):
        path = EchoFormatter().save("x", tmp_path / "nested" / "out.html")

        assert path.read_text(encoding="utf-8") == "<p>x</p>"


class TestTableFormatter:
    """Test TableFormatter.create_table."""

    def test_auto_widths(self):
        table = TableFormatter.create_table(["Release", "New"], [["2010", 12]])

        lines = table.splitlines()
        assert lines[0] == "Release | New"
        assert lines[1] == "-" * len(lines[0])
        assert lines[2] == "2010    | 12 "

    def test_right_alignment(self):
        table = TableFormatter.create_table(["A"], [["x"]], [3], alignment="right")
        assert table.splitlines()[2] == "  x"
