"""
Output formatting for profile history results.

The HTML reports are standalone pages: one table, logo images referenced by
paths relative to the report's directory.
"""

import csv
from html import escape
from io import StringIO
from pathlib import Path
from typing import Any

from ..shared_utilities import BaseOutputFormatter, OutputManager, TableFormatter
from .config import ReleaseRegistry, ReportSettings
from .data_models import CellState, HistoryResult
from .version_table import VersionTable

CSV_COLUMNS = [
    "base_id",
    "release",
    "matrix_id",
    "name",
    "version",
    "is_new",
    "differs",
    "display_logo",
    "logo_reference",
]


def page_style(centered: bool = False) -> str:
    """Inline stylesheet shared by both HTML reports."""
    align = "center" if centered else "left"
    return (
        '<style type="text/css">\n'
        "table {\n"
        "    border: 1px solid black;\n"
        "    border-collapse: collapse;\n"
        "}\n"
        "\n"
        "th, td {\n"
        "    border: 1px solid black;\n"
        f"    text-align: {align};\n"
        "    padding:    2px 5px 2px 5px;\n"
        "}\n"
        "</style>\n"
    )


def _page(title: str, body_lines: list[str], centered: bool) -> str:
    lines = [
        "<html>",
        "<head>",
        f"<title>{escape(title)}</title>",
        "</head>",
        "<body>",
        page_style(centered).rstrip("\n"),
        "<table>",
        *body_lines,
        "</table>",
        "</body>",
        "</html>",
    ]
    return "\n".join(lines) + "\n"


class ProfileHistoryFormatter(BaseOutputFormatter):
    """Formatter for cross-release history results."""

    def __init__(
        self,
        settings: ReportSettings | None = None,
        output_manager: OutputManager | None = None,
        registry: ReleaseRegistry | None = None,
    ):
        """Initialize the formatter.

        Args:
            settings: Presentation options
            output_manager: Resolves logo paths relative to the report
            registry: Release table, used to decide which releases get links.
                Without it no cell is linked.
        """
        super().__init__()
        self.settings = settings or ReportSettings()
        self.output_manager = output_manager or OutputManager()
        self.registry = registry

    def _links_enabled(self, release: str) -> bool:
        if self.registry is None:
            return False
        return self.registry.get(release).links_enabled

    def _logo_src(self, logo_reference: Path) -> str:
        return escape(self.output_manager.relative_reference(logo_reference))

    def _format_html(self, data: HistoryResult, **kwargs) -> str:
        table = data.table
        settings = self.settings

        header = "<tr><th></th><td></td>"
        header += "".join(f"<th>{escape(release)}</th>" for release in table.releases)
        rows = [header + "</tr>"]

        for base_id in table.base_ids():
            history = table.get_history(base_id)
            current_id = history.current_matrix_id
            cells = [
                f'<th><a href="{escape(settings.profile_url(current_id))}" '
                f"target=_blank>{escape(base_id)}</a></th>",
                f"<td>{escape(history.current_name)}</td>",
            ]

            for release in table.releases:
                state = table.cell_state(base_id, release)
                if state is CellState.SKIPPED:
                    cells.append("<td>skipped</td>")
                    continue
                if state is CellState.REMOVED:
                    marked = table.shows_removed_marker(
                        base_id, release, settings.removed_policy
                    )
                    cells.append("<td>removed</td>" if marked else "<td></td>")
                    continue
                entry = table.get_entry(base_id, release)
                if state is not CellState.LOGO or entry.logo_reference is None:
                    cells.append("<td></td>")
                    continue

                matrix_id = escape(entry.matrix_id)
                image = f'<img src="{self._logo_src(entry.logo_reference)}">'
                if self._links_enabled(release):
                    url = escape(settings.profile_url(entry.matrix_id))
                    image = f'<a href="{url}" target=_blank>{image}</a>'
                if settings.labeled:
                    image = f"&nbsp;&nbsp;&nbsp;{matrix_id}<br>{image}"
                cells.append(f'<td title="{matrix_id}">{image}</td>')

            rows.append("<tr>" + "".join(cells) + "</tr>")

        return _page(settings.title, rows, settings.centered)

    def _format_table(self, data: HistoryResult, **kwargs) -> str:
        lines = [
            "Profile History",
            f"Releases: {', '.join(data.releases)}",
            f"Total Profiles: {data.total_profiles}",
            f"Logos Drawn: {data.logo_count}",
            "",
        ]

        rows = [
            [s.release, s.total, s.new, s.changed, s.unchanged, s.logos]
            for s in data.summaries()
        ]
        lines.append(
            TableFormatter.create_table(
                ["Release", "Profiles", "New", "Changed", "Unchanged", "Logos"], rows
            )
        )

        if data.skipped_releases:
            lines.append("")
            lines.append("Skipped releases:")
            for release, reason in data.skipped_releases.items():
                lines.append(f"  {release}: {reason}")

        if data.malformed_ids:
            lines.append("")
            lines.append(f"Malformed IDs skipped: {len(data.malformed_ids)}")
            for item in data.malformed_ids:
                lines.append(
                    f"  {item['release']}: {item['matrix_id']!r} ({item['reason']})"
                )

        if data.render_failures:
            lines.append("")
            lines.append(f"Logos not drawn: {len(data.render_failures)}")
            for item in data.render_failures:
                lines.append(
                    f"  {item['release']}: {item['matrix_id']} ({item['reason']})"
                )

        return "\n".join(lines)

    def _format_csv(self, data: HistoryResult, **kwargs) -> str:
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_COLUMNS)

        for base_id in data.table.base_ids():
            for release in data.releases:
                entry = data.table.get_entry(base_id, release)
                if entry is None:
                    continue
                row = entry.to_dict()
                writer.writerow(["" if row[c] is None else row[c] for c in CSV_COLUMNS])

        return output.getvalue()

    def _format_json(self, data: HistoryResult, **kwargs) -> str:
        return super()._format_json(self.prepare_data(data), **kwargs)

    def prepare_data(self, result: HistoryResult) -> dict[str, Any]:
        """Machine-readable view of the history, including each cell's state."""
        table = result.table
        profiles = []
        for base_id in table.base_ids():
            history = table.get_history(base_id)
            cells = {}
            for release in table.releases:
                entry = table.get_entry(base_id, release)
                state = table.cell_state(base_id, release)
                cells[release] = {"state": state.value}
                if entry is not None:
                    cells[release].update(entry.to_dict())
            profiles.append(
                {
                    "base_id": base_id,
                    "current_matrix_id": history.current_matrix_id,
                    "name": history.current_name,
                    "releases": cells,
                }
            )

        return {
            "releases": list(result.releases),
            "total_profiles": result.total_profiles,
            "metadata": result.metadata,
            "summary": [vars(s) for s in result.summaries()],
            "skipped_releases": result.skipped_releases,
            "malformed_ids": result.malformed_ids,
            "render_failures": result.render_failures,
            "profiles": profiles,
        }


class VersionTableFormatter(BaseOutputFormatter):
    """Formatter for the single-release version table."""

    def __init__(
        self,
        settings: ReportSettings | None = None,
        output_manager: OutputManager | None = None,
    ):
        super().__init__()
        self.settings = settings or ReportSettings(
            title="JASPAR profile versions"
        )
        self.output_manager = output_manager or OutputManager()

    def _format_html(self, data: VersionTable, **kwargs) -> str:
        labeled = self.settings.labeled

        header = "<tr><th>Name</th>"
        if not labeled:
            header += "<th>ID</th>"
        header += "<th>Tax group</th>"
        header += "".join(f"<th>{version}</th>" for version in data.versions)
        rows = [header + "</tr>"]

        for row in data.rows:
            cells = [f"<th>{escape(row.name)}</th>"]
            if not labeled:
                cells.append(f"<td>{escape(row.base_id)}</td>")
            cells.append(f"<td>{escape(row.tax_group or '')}</td>")

            for version in data.versions:
                cell = row.cells.get(version)
                if cell is None or cell.logo_reference is None:
                    cells.append("<td></td>")
                    continue
                src = escape(self.output_manager.relative_reference(cell.logo_reference))
                image = f'<img src="{src}">'
                if labeled:
                    image = f"&nbsp;&nbsp;&nbsp;{escape(cell.matrix_id)}<br>{image}"
                cells.append(f"<td>{image}</td>")

            rows.append("<tr>" + "".join(cells) + "</tr>")

        return _page(self.settings.title, rows, self.settings.centered)

    def _format_table(self, data: VersionTable, **kwargs) -> str:
        headers = ["ID", "Name", "Tax group"] + [f"v{v}" for v in data.versions]
        rows = []
        for row in data.rows:
            rows.append(
                [row.base_id, row.name, row.tax_group or ""]
                + [
                    row.cells[v].matrix_id if v in row.cells else ""
                    for v in data.versions
                ]
            )
        title = f"Profile versions in release {data.release} ({len(data.rows)} profiles)"
        return title + "\n\n" + TableFormatter.create_table(headers, rows)

    def _format_csv(self, data: VersionTable, **kwargs) -> str:
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(["base_id", "name", "tax_group", "version", "matrix_id", "logo"])
        for row in data.rows:
            for version, cell in sorted(row.cells.items()):
                writer.writerow(
                    [
                        row.base_id,
                        row.name,
                        row.tax_group or "",
                        version,
                        cell.matrix_id,
                        str(cell.logo_reference) if cell.logo_reference else "",
                    ]
                )
        return output.getvalue()

    def _format_json(self, data: VersionTable, **kwargs) -> str:
        payload = {
            "release": data.release,
            "max_version": data.max_version,
            "profiles": [
                {
                    "base_id": row.base_id,
                    "name": row.name,
                    "tax_group": row.tax_group,
                    "versions": {
                        str(version): {
                            "matrix_id": cell.matrix_id,
                            "logo": str(cell.logo_reference)
                            if cell.logo_reference
                            else None,
                        }
                        for version, cell in sorted(row.cells.items())
                    },
                }
                for row in data.rows
            ],
        }
        return super()._format_json(payload, **kwargs)
