"""
Main CLI entry point for profile history reports.
"""

from dataclasses import replace
from pathlib import Path

import click
from dotenv import load_dotenv

from ..shared_utilities import (
    OutputFormat,
    OutputManager,
    TableFormatter,
    configure_logging,
    get_logger,
    release_logo_dirname,
)
from .config import (
    VERSION_TABLE_LOGO_SETTINGS,
    LogoSettings,
    ProfileFilter,
    ReleaseConfigManager,
    ReportSettings,
)
from .core import FetchErrorPolicy, ProfileHistoryBuilder, draw_release_logos
from .data_models import RemovedLabelPolicy
from .errors import ProfileHistoryError
from .logo_renderer import LogoRenderer
from .output_formatter import ProfileHistoryFormatter, VersionTableFormatter
from .sources import SourceFactory
from .version_table import build_version_table

# Load environment variables from .env file
load_dotenv()

DEFAULT_REPORT_NAME = "jaspar_profile_history.html"


class ProgressIndicator:
    """Simple progress indicator for CLI operations."""

    def __init__(self, quiet: bool = False):
        """Initialize progress indicator.

        Args:
            quiet: If True, suppress progress output
        """
        self.quiet = quiet

    def update(self, current: int, total: int, message: str) -> None:
        """Update progress display."""
        if self.quiet:
            return

        if total > 0:
            percentage = (current / total) * 100
            click.echo(f"[{percentage:6.1f}%] {message}", err=True)
        else:
            click.echo(f"[  ---  ] {message}", err=True)


def data_options(func):
    """Options shared by every command that reads release data."""
    options = [
        click.option(
            "--data-dir",
            type=click.Path(file_okay=False),
            envvar="PROFILE_HISTORY_DATA_DIR",
            help="Root directory of release data",
        ),
        click.option(
            "--releases-file",
            type=click.Path(dir_okay=False),
            envvar="PROFILE_HISTORY_RELEASES",
            help="Release table (JSON); defaults to the built-in one",
        ),
        click.option(
            "--collection",
            default="CORE",
            show_default=True,
            help="Collection to include",
        ),
        click.option(
            "--tax-groups",
            help="Comma-separated taxonomic groups to include (default: all)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _fail(error: Exception) -> None:
    get_logger(__name__).error("Command failed: {error}", error=str(error))
    click.echo(f"Error: {error}", err=True)
    raise click.Abort() from error


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    envvar="LOG_LEVEL",
    default="WARNING",
    show_default=True,
    help="Logging level",
)
def cli(log_level: str) -> None:
    """
    Track JASPAR profile matrices across database releases.

    Examples:

        # HTML history of every configured release
        profile-history history -o report

        # Console summary of the versioned releases only
        profile-history history --releases 2010,2014,2016 --format table

        # Logos of every profile in one release
        profile-history logos -r 2016 -d logos_2016

        # Version table of one release
        profile-history versions -r 2016 --labeled
    """
    configure_logging(level=log_level.upper())


@cli.command()
@data_options
@click.option(
    "--releases",
    "release_labels",
    help="Comma-separated releases to include (default: all configured)",
)
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False),
    default="output",
    show_default=True,
    help="Directory for the report and logo directories",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OutputFormat.choices()),
    default=OutputFormat.HTML,
    show_default=True,
    help="Output format",
)
@click.option(
    "--report",
    "report_file",
    type=click.Path(dir_okay=False),
    help=f"Report file (HTML default: <output-dir>/{DEFAULT_REPORT_NAME}, "
    "other formats: stdout)",
)
@click.option("--fixed-width", is_flag=True, help="Draw all logos the same width")
@click.option("--labeled", is_flag=True, help="Show the matrix ID above each logo")
@click.option("--centered", is_flag=True, help="Center table cells")
@click.option(
    "--removed",
    "removed_policy",
    type=click.Choice([p.value for p in RemovedLabelPolicy]),
    default=RemovedLabelPolicy.ALL.value,
    show_default=True,
    help="Mark every release after a profile's removal, or only the first",
)
@click.option(
    "--skip-unavailable",
    is_flag=True,
    help="Skip releases that cannot be fetched instead of aborting",
)
@click.option("--no-logos", is_flag=True, help="Do not draw logo images")
@click.option("-q", "--quiet", is_flag=True, help="Suppress progress indicators")
def history(
    data_dir: str | None,
    releases_file: str | None,
    collection: str,
    tax_groups: str | None,
    release_labels: str | None,
    output_dir: str,
    output_format: str,
    report_file: str | None,
    fixed_width: bool,
    labeled: bool,
    centered: bool,
    removed_policy: str,
    skip_unavailable: bool,
    no_logos: bool,
    quiet: bool,
) -> None:
    """Build the profile history table across releases."""
    output_manager = OutputManager(output_dir)

    try:
        config_manager = ReleaseConfigManager(releases_file)
        registry = config_manager.registry
        if release_labels:
            registry = registry.subset(
                [label.strip() for label in release_labels.split(",") if label.strip()]
            )

        builder = ProfileHistoryBuilder(
            registry,
            SourceFactory(data_dir),
            output_manager=output_manager,
            renderer=None if no_logos else LogoRenderer(),
            logo_settings=LogoSettings(fixed_width=fixed_width),
            filters=ProfileFilter.from_strings(collection, tax_groups),
            fetch_error_policy=(
                FetchErrorPolicy.SKIP if skip_unavailable else FetchErrorPolicy.ABORT
            ),
        )
        result = builder.build(progress_callback=ProgressIndicator(quiet).update)

        formatter = ProfileHistoryFormatter(
            ReportSettings(
                labeled=labeled,
                centered=centered,
                removed_policy=RemovedLabelPolicy(removed_policy),
            ),
            output_manager=output_manager,
            registry=registry,
        )

        if output_format == OutputFormat.HTML and report_file is None:
            report_file = str(output_manager.base_dir / DEFAULT_REPORT_NAME)

        if report_file:
            path = formatter.save(result, report_file, output_format)
            click.echo(f"Output saved to {path}")
        else:
            click.echo(formatter.format(result, output_format))

        if result.skipped_releases and not quiet:
            click.echo(
                f"Skipped releases: {', '.join(result.skipped_releases)}", err=True
            )
    except (ProfileHistoryError, OSError) as e:
        _fail(e)
    finally:
        output_manager.cleanup_empty_directories()


@cli.command()
@data_options
@click.option(
    "-r",
    "--release",
    "release_label",
    help="Release to draw (default: every configured release)",
)
@click.option(
    "-d",
    "--out-dir",
    type=click.Path(file_okay=False),
    help="Logo directory (default: JASPAR<release>_logos)",
)
@click.option("--fixed-width", is_flag=True, help="Draw all logos the same width")
def logos(
    data_dir: str | None,
    releases_file: str | None,
    collection: str,
    tax_groups: str | None,
    release_label: str | None,
    out_dir: str | None,
    fixed_width: bool,
) -> None:
    """Draw a logo for every profile of one or all releases."""
    try:
        config_manager = ReleaseConfigManager(releases_file)
        if release_label:
            releases = [config_manager.get_release(release_label)]
        else:
            releases = list(config_manager.get_releases())

        factory = SourceFactory(data_dir)
        renderer = LogoRenderer()
        settings = LogoSettings(fixed_width=fixed_width)
        filters = ProfileFilter.from_strings(collection, tax_groups)

        for release in releases:
            if out_dir and release_label:
                target = Path(out_dir)
            else:
                target = Path(out_dir or ".") / release_logo_dirname(release.label)
            drawn = draw_release_logos(
                factory.get_source(release),
                release,
                target,
                renderer,
                logo_settings=settings,
                filters=filters,
            )
            click.echo(f"Release {release.label}: {len(drawn)} logos in {target}")
    except (ProfileHistoryError, OSError) as e:
        _fail(e)


@cli.command()
@data_options
@click.option(
    "-r",
    "--release",
    "release_label",
    help="Release to tabulate (default: latest configured)",
)
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False),
    default="output",
    show_default=True,
    help="Directory for the report and logos",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OutputFormat.choices()),
    default=OutputFormat.HTML,
    show_default=True,
    help="Output format",
)
@click.option(
    "--report",
    "report_file",
    type=click.Path(dir_okay=False),
    help="Report file (HTML default: <output-dir>/JASPAR<release>_versions.html)",
)
@click.option("--labeled", is_flag=True, help="Show the matrix ID above each logo")
@click.option("--centered", is_flag=True, help="Center table cells")
@click.option("--fixed-width", is_flag=True, help="Draw all logos the same width")
@click.option("--no-logos", is_flag=True, help="Do not draw logo images")
def versions(
    data_dir: str | None,
    releases_file: str | None,
    collection: str,
    tax_groups: str | None,
    release_label: str | None,
    output_dir: str,
    output_format: str,
    report_file: str | None,
    labeled: bool,
    centered: bool,
    fixed_width: bool,
    no_logos: bool,
) -> None:
    """Table of every version of every profile in one release."""
    output_manager = OutputManager(output_dir)

    try:
        config_manager = ReleaseConfigManager(releases_file)
        release = (
            config_manager.get_release(release_label)
            if release_label
            else config_manager.latest
        )

        source = SourceFactory(data_dir).get_source(release)
        matrices = source.fetch_collection(
            release,
            ProfileFilter.from_strings(collection, tax_groups),
            on_malformed=lambda e: get_logger(__name__).error(
                "Skipping profile with malformed ID: {error}", error=str(e)
            ),
        )

        logo_settings = replace(VERSION_TABLE_LOGO_SETTINGS, fixed_width=fixed_width)

        table = build_version_table(
            matrices,
            release.label,
            out_dir=None if no_logos else output_manager.get_release_dir(release.label),
            renderer=None if no_logos else LogoRenderer(),
            logo_settings=logo_settings,
        )

        formatter = VersionTableFormatter(
            ReportSettings(
                labeled=labeled,
                centered=centered,
                title=f"JASPAR {release.label} profile versions",
            ),
            output_manager=output_manager,
        )

        if output_format == OutputFormat.HTML and report_file is None:
            report_file = str(
                output_manager.base_dir / f"JASPAR{release.label}_versions.html"
            )

        if report_file:
            path = formatter.save(table, report_file, output_format)
            click.echo(f"Output saved to {path}")
        else:
            click.echo(formatter.format(table, output_format))
    except (ProfileHistoryError, OSError) as e:
        _fail(e)
    finally:
        output_manager.cleanup_empty_directories()


@cli.command("releases")
@click.option(
    "--releases-file",
    type=click.Path(dir_okay=False),
    envvar="PROFILE_HISTORY_RELEASES",
    help="Release table (JSON); defaults to the built-in one",
)
def list_releases(releases_file: str | None) -> None:
    """List the configured releases, oldest first."""
    try:
        config_manager = ReleaseConfigManager(releases_file)
    except ProfileHistoryError as e:
        _fail(e)

    rows = [
        [
            release.label,
            release.era,
            release.database,
            release.data_path,
            "yes" if release.links_enabled else "no",
        ]
        for release in config_manager.get_releases()
    ]
    click.echo(
        TableFormatter.create_table(
            ["Release", "Era", "Database", "Data path", "Links"], rows
        )
    )


if __name__ == "__main__":
    cli()
