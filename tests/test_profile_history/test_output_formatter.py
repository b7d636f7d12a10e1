"""Tests for profile history output formatting."""

import csv
import json
from io import StringIO

import pytest

from src.profile_history.config import ReportSettings
from src.profile_history.core import FetchErrorPolicy, ProfileHistoryBuilder
from src.profile_history.data_models import RemovedLabelPolicy
from src.profile_history.output_formatter import (
    CSV_COLUMNS,
    ProfileHistoryFormatter,
    VersionTableFormatter,
    page_style,
)
from src.profile_history.sources import InMemoryProfileSource
from src.profile_history.version_table import build_version_table
from src.shared_utilities import OutputFormat, OutputManager

OTHER_COUNTS = [[1, 2], [3, 4], [5, 6], [7, 8]]


@pytest.fixture
def output_manager(tmp_path):
    return OutputManager(tmp_path)


@pytest.fixture
def result(versioned_registry, matrix_factory, mock_renderer, output_manager):
    """MA0001 new/unchanged/changed, MA0002 removed in 2016, MA0003 from 2014."""
    collections = {
        "2010": [
            matrix_factory("MA0001.1", "AGL3"),
            matrix_factory("MA0002.1", "RUNX1"),
        ],
        "2014": [
            matrix_factory("MA0001.1", "AGL3"),
            matrix_factory("MA0002.1", "RUNX1"),
            matrix_factory("MA0003.1", "TFAP2A"),
        ],
        "2016": [
            matrix_factory("MA0001.2", "AGL3-like", OTHER_COUNTS),
            matrix_factory("MA0003.1", "TFAP2A"),
        ],
    }
    builder = ProfileHistoryBuilder(
        versioned_registry,
        InMemoryProfileSource(collections),
        output_manager=output_manager,
        renderer=mock_renderer,
    )
    return builder.build()


def row_for(html: str, base_id: str) -> str:
    for line in html.splitlines():
        if f">{base_id}</a></th>" in line:
            return line
    raise AssertionError(f"No row for {base_id}")


class TestPageStyle:
    """Test the shared stylesheet."""

    def test_alignment(self):
        assert "text-align: left;" in page_style()
        assert "text-align: center;" in page_style(centered=True)


class TestProfileHistoryHtml:
    """Test the HTML history report."""

    def test_header_row(self, result, output_manager, versioned_registry):
        html = ProfileHistoryFormatter(
            output_manager=output_manager, registry=versioned_registry
        ).format(result, OutputFormat.HTML)

        assert "<tr><th></th><td></td><th>2010</th><th>2014</th><th>2016</th></tr>" in html
        assert html.startswith("<html>")
        assert html.rstrip().endswith("</html>")

    def test_row_links_latest_matrix_and_name(
        self, result, output_manager, versioned_registry
    ):
        html = ProfileHistoryFormatter(
            output_manager=output_manager, registry=versioned_registry
        ).format(result, OutputFormat.HTML)

        row = row_for(html, "MA0001")
        assert row.startswith(
            '<tr><th><a href="https://jaspar.elixir.no/matrix/MA0001.2/" '
            "target=_blank>MA0001</a></th><td>AGL3-like</td>"
        )

    def test_cells(self, result, output_manager, versioned_registry):
        html = ProfileHistoryFormatter(
            output_manager=output_manager, registry=versioned_registry
        ).format(result, OutputFormat.HTML)

        row = row_for(html, "MA0001")
        cells = row.split("<td")[2:]
        assert 'title="MA0001.1"' in cells[0]
        assert '<img src="JASPAR2010_logos/MA0001.1.png">' in cells[0]
        assert cells[1].startswith("></td>")
        assert '<img src="JASPAR2016_logos/MA0001.2.png">' in cells[2]

    def test_removed_and_not_yet_introduced(
        self, result, output_manager, versioned_registry
    ):
        html = ProfileHistoryFormatter(
            output_manager=output_manager, registry=versioned_registry
        ).format(result, OutputFormat.HTML)

        assert row_for(html, "MA0002").endswith("<td></td><td>removed</td></tr>")
        ma0003 = row_for(html, "MA0003")
        assert "<td>TFAP2A</td><td></td><td title=" in ma0003

    def test_links_only_for_linkable_releases(self, result, output_manager):
        html = ProfileHistoryFormatter(output_manager=output_manager).format(
            result, OutputFormat.HTML
        )

        row = row_for(html, "MA0001")
        assert row.count("<a href=") == 1

    def test_linked_cells(self, result, output_manager, versioned_registry):
        html = ProfileHistoryFormatter(
            output_manager=output_manager, registry=versioned_registry
        ).format(result, OutputFormat.HTML)

        assert (
            '<a href="https://jaspar.elixir.no/matrix/MA0001.1/" target=_blank>'
            '<img src="JASPAR2010_logos/MA0001.1.png"></a>'
        ) in html

    def test_labeled_and_centered(self, result, output_manager):
        html = ProfileHistoryFormatter(
            ReportSettings(labeled=True, centered=True), output_manager=output_manager
        ).format(result, OutputFormat.HTML)

        assert "&nbsp;&nbsp;&nbsp;MA0001.1<br><img" in html
        assert "text-align: center;" in html

    def test_removed_first_policy(self, versioned_registry, matrix_factory):
        collections = {
            "2010": [matrix_factory("MA0001.1")],
            "2014": [matrix_factory("MA0002.1")],
            "2016": [matrix_factory("MA0002.1")],
        }
        result = ProfileHistoryBuilder(
            versioned_registry, InMemoryProfileSource(collections)
        ).build()

        every = ProfileHistoryFormatter().format(result, OutputFormat.HTML)
        first = ProfileHistoryFormatter(
            ReportSettings(removed_policy=RemovedLabelPolicy.FIRST)
        ).format(result, OutputFormat.HTML)

        assert row_for(every, "MA0001").count("removed") == 2
        assert row_for(first, "MA0001").count("removed") == 1

    def test_skipped_release_column(self, versioned_registry, matrix_factory):
        collections = {
            "2010": [matrix_factory("MA0001.1"), matrix_factory("MA0002.1")],
            "2016": [matrix_factory("MA0001.1")],
        }
        result = ProfileHistoryBuilder(
            versioned_registry,
            InMemoryProfileSource(collections),
            fetch_error_policy=FetchErrorPolicy.SKIP,
        ).build()

        every = ProfileHistoryFormatter().format(result, OutputFormat.HTML)
        first = ProfileHistoryFormatter(
            ReportSettings(removed_policy=RemovedLabelPolicy.FIRST)
        ).format(result, OutputFormat.HTML)

        assert row_for(every, "MA0002").endswith(
            "<td></td><td>skipped</td><td>removed</td></tr>"
        )
        assert row_for(first, "MA0002").endswith(
            "<td></td><td>skipped</td><td>removed</td></tr>"
        )
        assert "<td>skipped</td><td></td></tr>" in row_for(every, "MA0001")

    def test_names_escaped(self, versioned_registry, matrix_factory):
        collections = {
            "2010": [matrix_factory("MA0001.1", "A<B>&C")],
            "2014": [],
            "2016": [],
        }
        result = ProfileHistoryBuilder(
            versioned_registry, InMemoryProfileSource(collections)
        ).build()

        html = ProfileHistoryFormatter().format(result, OutputFormat.HTML)

        assert "<td>A&lt;B&gt;&amp;C</td>" in html

    def test_save(self, result, output_manager, tmp_path):
        path = ProfileHistoryFormatter(output_manager=output_manager).save(
            result, tmp_path / "report.html"
        )

        assert path.read_text(encoding="utf-8").startswith("<html>")


class TestProfileHistoryExports:
    """Test table, JSON and CSV output."""

    def test_table(self, result):
        output = ProfileHistoryFormatter().format(result, OutputFormat.TABLE)

        assert "Total Profiles: 3" in output
        assert "Release | Profiles | New | Changed | Unchanged | Logos" in output
        lines = [line for line in output.splitlines() if line.startswith("2014")]
        assert [cell.strip() for cell in lines[0].split("|")] == [
            "2014", "3", "1", "0", "2", "1"
        ]

    def test_table_lists_problems(self, result):
        result.skipped_releases["2012"] = "no data"
        result.malformed_ids.append(
            {"release": "2014", "matrix_id": "MA9.x", "reason": "bad version"}
        )

        output = ProfileHistoryFormatter().format(result, OutputFormat.TABLE)

        assert "2012: no data" in output
        assert "Malformed IDs skipped: 1" in output

    def test_json(self, result):
        data = json.loads(ProfileHistoryFormatter().format(result, OutputFormat.JSON))

        assert data["releases"] == ["2010", "2014", "2016"]
        assert data["total_profiles"] == 3
        ma0002 = next(p for p in data["profiles"] if p["base_id"] == "MA0002")
        assert ma0002["releases"]["2016"] == {"state": "removed"}
        assert ma0002["releases"]["2010"]["state"] == "logo"
        assert ma0002["releases"]["2014"]["state"] == "unchanged"
        assert ma0002["releases"]["2014"]["display_logo"] is False

    def test_json_states_ignore_removed_policy(self, versioned_registry, matrix_factory):
        collections = {
            "2010": [matrix_factory("MA0001.1"), matrix_factory("MA0002.1")],
            "2014": [matrix_factory("MA0001.1")],
            "2016": [matrix_factory("MA0001.1")],
        }
        result = ProfileHistoryBuilder(
            versioned_registry, InMemoryProfileSource(collections)
        ).build()

        data = json.loads(
            ProfileHistoryFormatter(
                ReportSettings(removed_policy=RemovedLabelPolicy.FIRST)
            ).format(result, OutputFormat.JSON)
        )

        ma0002 = next(p for p in data["profiles"] if p["base_id"] == "MA0002")
        states = {r: cell["state"] for r, cell in ma0002["releases"].items()}
        assert states == {"2010": "logo", "2014": "removed", "2016": "removed"}

    def test_json_skipped_state(self, versioned_registry, matrix_factory):
        collections = {
            "2010": [matrix_factory("MA0001.1")],
            "2016": [matrix_factory("MA0001.1")],
        }
        result = ProfileHistoryBuilder(
            versioned_registry,
            InMemoryProfileSource(collections),
            fetch_error_policy=FetchErrorPolicy.SKIP,
        ).build()

        data = json.loads(ProfileHistoryFormatter().format(result, OutputFormat.JSON))

        assert list(data["skipped_releases"]) == ["2014"]
        assert data["profiles"][0]["releases"]["2014"] == {"state": "skipped"}

    def test_csv(self, result):
        output = ProfileHistoryFormatter().format(result, OutputFormat.CSV)
        rows = list(csv.DictReader(StringIO(output)))

        assert list(rows[0]) == CSV_COLUMNS
        assert len(rows) == 7
        assert rows[0]["base_id"] == "MA0001"
        assert rows[0]["release"] == "2010"
        assert rows[1]["logo_reference"] == ""

    def test_unsupported_format(self, result):
        with pytest.raises(ValueError, match="Unsupported format"):
            ProfileHistoryFormatter().format(result, "xml")


class TestVersionTableFormatter:
    """Test the version table report."""

    @pytest.fixture
    def table(self, matrix_factory, mock_renderer, output_manager):
        matrices = [
            matrix_factory("MA0001.1", "AGL3", tax_group="plants"),
            matrix_factory("MA0001.2", "AGL3", tax_group="plants"),
            matrix_factory("MA0002.2", "RUNX1"),
        ]
        return build_version_table(
            matrices,
            "2016",
            out_dir=output_manager.get_release_dir("2016"),
            renderer=mock_renderer,
        )

    def test_html(self, table, output_manager):
        html = VersionTableFormatter(output_manager=output_manager).format(
            table, OutputFormat.HTML
        )

        assert "<tr><th>Name</th><th>ID</th><th>Tax group</th><th>1</th><th>2</th></tr>" in html
        assert (
            "<tr><th>AGL3</th><td>MA0001</td><td>plants</td>"
            '<td><img src="JASPAR2016_logos/MA0001.1.png"></td>'
            '<td><img src="JASPAR2016_logos/MA0001.2.png"></td></tr>'
        ) in html
        assert "<th>RUNX1</th><td>MA0002</td><td>vertebrates</td><td></td><td><img" in html

    def test_labeled_omits_id_column(self, table, output_manager):
        html = VersionTableFormatter(
            ReportSettings(labeled=True), output_manager=output_manager
        ).format(table, OutputFormat.HTML)

        assert "<th>ID</th>" not in html
        assert "<td>MA0001</td>" not in html
        assert "&nbsp;&nbsp;&nbsp;MA0001.2<br><img" in html

    def test_table(self, table):
        output = VersionTableFormatter().format(table, OutputFormat.TABLE)

        assert "release 2016 (2 profiles)" in output
        assert "MA0001.2" in output

    def test_json_and_csv(self, table):
        data = json.loads(VersionTableFormatter().format(table, OutputFormat.JSON))
        assert data["max_version"] == 2
        assert list(data["profiles"][0]["versions"]) == ["1", "2"]

        rows = list(csv.reader(StringIO(VersionTableFormatter().format(table, "csv"))))
        assert len(rows) == 4
