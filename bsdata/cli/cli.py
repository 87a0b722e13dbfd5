"""
CLI entry point for bsdata.

Provides headless command-line access to catalogue retrieval.
Uses Typer for modern CLI with auto-completion and help generation.

Usage:
    bsdata fetch star-wars-legion
    bsdata fetch star-wars-legion --revision 1.7.0 --json
    bsdata load ./checkout/star-wars-legion
    bsdata config
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Annotated

import typer

from bsdata.adapters.catalogue import Catalogue, CatalogueLoader
from bsdata.common.exceptions import FetchError, FetchStep, RetrievalError
from bsdata.services.config_models import BsdataSettings
from bsdata.services.retrieval import CatalogueRetriever

app = typer.Typer(
    name="bsdata",
    help="bsdata CLI - Retrieve and decode BSData army list catalogues",
    no_args_is_help=True,
)


# =============================================================================
# Output Helpers
# =============================================================================


def _setup_logging(settings: BsdataSettings, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def _print_catalogues(catalogues: list[Catalogue], as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps([c.to_dict() for c in catalogues], indent=2))
        return

    typer.echo(f"\n{'=' * 60}")
    typer.echo("CATALOGUES")
    typer.echo(f"{'=' * 60}")
    for catalogue in catalogues:
        typer.echo(f"  {catalogue.name or 'N/A'} (revision {catalogue.revision or 'N/A'})")
        typer.echo(f"    ID:             {catalogue.id or 'N/A'}")
        typer.echo(f"    Entries:        {len(catalogue.shared_selection_entries)}")
        typer.echo(f"    Entry groups:   {len(catalogue.shared_selection_entry_groups)}")
        typer.echo(f"    Rules:          {len(catalogue.shared_rules)}")
        typer.echo("")
    typer.echo(f"Total: {len(catalogues)} catalogues")


def _fail(error: RetrievalError) -> None:
    typer.echo(f"\nError: {error}", err=True)
    if error.cleanup_error is not None:
        typer.echo(f"Cleanup also failed: {error.cleanup_error}", err=True)
    if isinstance(error, FetchError) and error.step == FetchStep.RESOLVE:
        typer.echo("Check the revision name; only tags are supported.", err=True)
    raise typer.Exit(1)


# =============================================================================
# Commands
# =============================================================================


@app.command("fetch")
def fetch(
    repository: Annotated[str, typer.Argument(help="Data repository name, e.g. star-wars-legion")],
    revision: Annotated[
        str | None, typer.Option("-r", "--revision", help="Tag to check out (default: branch tip)")
    ] = None,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print decoded catalogues as JSON")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Print debug logging")
    ] = False,
) -> None:
    """Fetch a repository and decode its catalogues."""
    settings = BsdataSettings()
    _setup_logging(settings, verbose)

    if not as_json:
        typer.echo(f"\n{'=' * 60}")
        typer.echo("BSDATA - Fetching Catalogues")
        typer.echo(f"{'=' * 60}")
        typer.echo(f"Repository: {settings.base_url}/{repository}")
        typer.echo(f"Revision:   {revision or 'default branch'}")

    try:
        catalogues = CatalogueRetriever(settings=settings).get_data(repository, revision)
    except RetrievalError as e:
        _fail(e)
        return

    _print_catalogues(catalogues, as_json)


@app.command("load")
def load(
    directory: Annotated[str, typer.Argument(help="Directory holding catalogue files")],
    as_json: Annotated[
        bool, typer.Option("--json", help="Print decoded catalogues as JSON")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Print debug logging")
    ] = False,
) -> None:
    """Decode catalogue files from a local directory."""
    settings = BsdataSettings()
    _setup_logging(settings, verbose)

    try:
        catalogues = CatalogueLoader(settings.catalogue_marker).load(directory)
    except RetrievalError as e:
        _fail(e)
        return

    _print_catalogues(catalogues, as_json)


@app.command("config")
def show_config() -> None:
    """Show the effective settings."""
    settings = BsdataSettings()
    typer.echo(f"\n{'=' * 60}")
    typer.echo("BSDATA - Configuration")
    typer.echo(f"{'=' * 60}")
    for name, value in settings.model_dump().items():
        typer.echo(f"  {name:<18} {value if value is not None else '(unset)'}")


# =============================================================================
# Main Entry Point
# =============================================================================


def main() -> int:
    """Main entry point."""
    try:
        app()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


if __name__ == "__main__":
    sys.exit(main())
