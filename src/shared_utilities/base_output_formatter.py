"""
Shared base for the history and version-table report formatters.

Both reports come in four renderings: the standalone HTML page, a console
summary table, and JSON and CSV exports for further processing.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class OutputFormat:
    """Names accepted by ``--format``."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"
    HTML = "html"

    @classmethod
    def choices(cls) -> list[str]:
        """Format names with the HTML page first, as the CLI lists them."""
        return [cls.HTML, cls.TABLE, cls.JSON, cls.CSV]


class BaseOutputFormatter(ABC):
    """
    Renders one kind of report result in any of the ``OutputFormat`` names.

    Subclasses provide the HTML page, console table and CSV export. JSON
    defaults to dumping ``data`` as given; formatters whose results are not
    plain dicts override ``_format_json`` to build a serializable view first.
    """

    def __init__(self):
        self._format_handlers = {
            OutputFormat.TABLE: self._format_table,
            OutputFormat.JSON: self._format_json,
            OutputFormat.CSV: self._format_csv,
            OutputFormat.HTML: self._format_html,
        }

    def format(self, data: Any, format_type: str = OutputFormat.TABLE, **kwargs) -> str:
        """
        Render a report result as text.

        Args:
            data: Result object the subclass understands
            format_type: One of the ``OutputFormat`` names
            **kwargs: Passed through to the handler (e.g. ``indent`` for JSON)

        Raises:
            ValueError: ``format_type`` is not a known format
        """
        handler = self._format_handlers.get(format_type)
        if not handler:
            raise ValueError(f"Unsupported format type: {format_type}")

        return handler(data, **kwargs)

    def save(
        self,
        data: Any,
        output_path: str | Path,
        format_type: str = OutputFormat.HTML,
        **kwargs,
    ) -> Path:
        """
        Write a rendered report, creating its directory if needed.

        Logo references in HTML pages are relative, so the page should be
        saved in the output directory its logos were drawn under.

        Returns:
            The path written
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        output_path.write_text(
            self.format(data, format_type, **kwargs), encoding="utf-8"
        )
        return output_path

    @abstractmethod
    def _format_table(self, data: Any, **kwargs) -> str:
        """Console summary."""

    @abstractmethod
    def _format_csv(self, data: Any, **kwargs) -> str:
        """One CSV row per table cell."""

    @abstractmethod
    def _format_html(self, data: Any, **kwargs) -> str:
        """Standalone HTML page."""

    def _format_json(self, data: Any, **kwargs) -> str:
        # Key order is kept so that exports list releases chronologically.
        return json.dumps(
            data,
            indent=kwargs.get("indent", 2),
            sort_keys=kwargs.get("sort_keys", False),
            default=str,
        )


class TableFormatter:
    """Plain-text tables for the console summaries."""

    @staticmethod
    def create_table(
        headers: list[str],
        rows: list[list[Any]],
        column_widths: list[int] | None = None,
        alignment: str = "left",
    ) -> str:
        """
        Lay out rows under a header line and a dashed rule.

        Columns are as wide as their widest cell unless ``column_widths`` is
        given. ``alignment`` is "left", "center" or "right".
        """
        if not column_widths:
            column_widths = [
                max([len(h)] + [len(str(row[i])) for row in rows])
                for i, h in enumerate(headers)
            ]

        align = {"center": "^", "right": ">"}.get(alignment, "<")
        formats = [f"{{:{align}{w}}}" for w in column_widths]

        def join(cells) -> str:
            return " | ".join(
                fmt.format(str(cell)) for fmt, cell in zip(formats, cells, strict=False)
            )

        header_row = join(headers)
        return "\n".join(
            [header_row, "-" * len(header_row), *(join(row) for row in rows)]
        )
