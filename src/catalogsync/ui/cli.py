from __future__ import annotations

from collections.abc import Iterator
import contextlib
import json
from pathlib import Path
import signal
import sys
import threading
from typing import Any

from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.table import Table
import typer

from catalogsync.core.config import (
    MAX_ITEMS_CEILING,
    ClientSettings,
    RunConfiguration,
    load_client_settings_from_env,
)
from catalogsync.dispatch.confirmation import (
    AcceptAll,
    Confirmation,
    PromptConfirmation,
)
from catalogsync.dispatch.exclusion import find_exclusion
from catalogsync.errors import (
    ConfigurationError,
    EndpointResolutionError,
    ServiceCallError,
    SubmissionChannelError,
)
from catalogsync.infra.clients.endpoint import (
    EndpointResolver,
    SettingsEndpointResolver,
    StaticEndpointResolver,
)
from catalogsync.models.exclusion import ExclusionField
from catalogsync.rules.loader import ExclusionRulesLoader
from catalogsync.services.catalog_run import (
    CatalogRunService,
    client_factory_from_settings,
)
from catalogsync.ui.progress_renderer import (
    RichProgressRenderer,
    render_result,
    summary_table,
)

# Load environment variables from .env
load_dotenv()

EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} [{level}] {name}: {message}"

app = typer.Typer(
    help="Submit uncategorized inventory records for classification.",
    no_args_is_help=True,
)


def _stderr_sink(message: Any) -> None:
    # Looked up per call so rich's live display can redirect stderr.
    sys.stderr.write(str(message))


def _configure_logging(*, verbose: bool, quiet: bool, log_file: Path | None) -> None:
    logger.remove()
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    else:
        level = "INFO"
    logger.add(_stderr_sink, format=LOG_FORMAT, level=level)
    if log_file is not None:
        logger.add(
            log_file,
            format=LOG_FORMAT,
            level="DEBUG",
            rotation="10 MB",
            retention=5,
        )


def _fail(message: str, code: int = EXIT_FAILURE) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code)


def _load_settings() -> ClientSettings:
    try:
        return load_client_settings_from_env()
    except ConfigurationError as e:
        raise _fail(str(e), EXIT_CONFIGURATION) from None


def _resolver(endpoint: str | None, settings: ClientSettings) -> EndpointResolver:
    if endpoint:
        return StaticEndpointResolver(endpoint, settings.site_code)
    return SettingsEndpointResolver(settings)


def _build_config(
    *,
    limit: int,
    ignore_product: list[str] | None,
    ignore_publisher: list[str] | None,
    exclusions_file: Path | None,
    sync_catalog: bool = False,
    dry_run: bool = False,
) -> RunConfiguration:
    products = list(ignore_product or [])
    publishers = list(ignore_publisher or [])
    if exclusions_file is not None:
        loader = ExclusionRulesLoader(exclusions_file)
        products.extend(loader.patterns(ExclusionField.DISPLAY_NAME))
        publishers.extend(loader.patterns(ExclusionField.PUBLISHER_NAME))

    return RunConfiguration.build(
        limit=limit,
        ignore_products=products,
        ignore_publishers=publishers,
        sync_catalog=sync_catalog,
        dry_run=dry_run,
    )


@contextlib.contextmanager
def _cancel_on_sigterm(cancel_event: threading.Event) -> Iterator[None]:
    """Stop at the next candidate boundary when the scheduler sends SIGTERM."""

    def handler(signum: int, frame: Any) -> None:
        logger.warning("Received SIGTERM; stopping after the current candidate")
        cancel_event.set()

    try:
        previous = signal.signal(signal.SIGTERM, handler)
    except ValueError:
        # Handlers can only be installed from the main thread.
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


@app.command("run")
def run_cmd(
    limit: int = typer.Option(
        MAX_ITEMS_CEILING,
        "--limit",
        "-l",
        envvar="CATALOGSYNC_LIMIT",
        help=f"Maximum submissions to attempt (1-{MAX_ITEMS_CEILING})",
    ),
    ignore_product: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--ignore-product",
        help="Skip products whose name contains this value (glob if it has *)",
    ),
    ignore_publisher: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--ignore-publisher",
        help="Skip products whose publisher contains this value (glob if it has *)",
    ),
    exclusions_file: Path | None = typer.Option(  # noqa: B008
        None,
        "--exclusions-file",
        envvar="CATALOGSYNC_EXCLUSIONS_FILE",
        help="YAML file with 'products' and 'publishers' exclusion lists",
    ),
    sync_catalog: bool = typer.Option(
        False, "--sync-catalog", help="Request a catalog sync after the run"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Simulate every mutating call without issuing it"
    ),
    confirm: bool = typer.Option(
        False, "--confirm", help="Ask before each mutating call"
    ),
    endpoint: str | None = typer.Option(
        None, "--endpoint", help="Management service base URL (overrides env)"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print the run summary as JSON"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
    log_file: Path | None = typer.Option(  # noqa: B008
        None, "--log-file", envvar="CATALOGSYNC_LOG_FILE", help="Also log to file"
    ),
) -> None:
    """Submit uncategorized records for classification and report progress."""
    _configure_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    try:
        config = _build_config(
            limit=limit,
            ignore_product=ignore_product,
            ignore_publisher=ignore_publisher,
            exclusions_file=exclusions_file,
            sync_catalog=sync_catalog,
            dry_run=dry_run,
        )
    except ConfigurationError as e:
        raise _fail(str(e), EXIT_CONFIGURATION) from None
    settings = _load_settings()

    confirmation: Confirmation = PromptConfirmation() if confirm else AcceptAll()
    show_progress = not (quiet or json_output or confirm)
    renderer = RichProgressRenderer() if show_progress else None
    service = CatalogRunService(
        _resolver(endpoint, settings),
        client_factory_from_settings(settings),
        confirmation=confirmation,
        observer=renderer,
    )

    cancel_event = threading.Event()
    display = renderer if renderer is not None else contextlib.nullcontext()

    try:
        with _cancel_on_sigterm(cancel_event), display:
            result = service.execute(config, cancel_event=cancel_event)
    except EndpointResolutionError as e:
        raise _fail(str(e)) from None
    except SubmissionChannelError as e:
        if json_output and e.partial_summary is not None:
            typer.echo(json.dumps(e.partial_summary.to_dict(), indent=2))
        elif e.partial_summary is not None:
            Console(stderr=True).print(
                summary_table(e.partial_summary, title="Partial Run (halted)")
            )
        raise _fail(str(e)) from None
    except ServiceCallError as e:
        raise _fail(str(e)) from None

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        render_result(Console(), result)


@app.command("summary")
def summary_cmd(
    endpoint: str | None = typer.Option(
        None, "--endpoint", help="Management service base URL (overrides env)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
) -> None:
    """Show how many records are currently awaiting classification."""
    _configure_logging(verbose=verbose, quiet=not verbose, log_file=None)
    settings = _load_settings()

    try:
        resolved = _resolver(endpoint, settings).resolve()
        client = client_factory_from_settings(settings)(resolved)
        count = client.get_classification_summary()["uncategorized_count"]
    except (EndpointResolutionError, ServiceCallError) as e:
        raise _fail(str(e)) from None

    if json_output:
        payload = {"endpoint": resolved.base_url, "uncategorizedCount": count}
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(f"{resolved.label}: {count} records awaiting classification")


@app.command("list")
def list_cmd(
    ignore_product: list[str] | None = typer.Option(  # noqa: B008
        None, "--ignore-product", help="Product exclusion to preview"
    ),
    ignore_publisher: list[str] | None = typer.Option(  # noqa: B008
        None, "--ignore-publisher", help="Publisher exclusion to preview"
    ),
    exclusions_file: Path | None = typer.Option(  # noqa: B008
        None, "--exclusions-file", envvar="CATALOGSYNC_EXCLUSIONS_FILE"
    ),
    endpoint: str | None = typer.Option(
        None, "--endpoint", help="Management service base URL (overrides env)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
) -> None:
    """List current candidates and whether the exclusions would skip them.

    Read only: nothing is submitted.
    """
    _configure_logging(verbose=verbose, quiet=not verbose, log_file=None)
    try:
        config = _build_config(
            limit=MAX_ITEMS_CEILING,
            ignore_product=ignore_product,
            ignore_publisher=ignore_publisher,
            exclusions_file=exclusions_file,
        )
    except ConfigurationError as e:
        raise _fail(str(e), EXIT_CONFIGURATION) from None
    settings = _load_settings()

    try:
        resolved = _resolver(endpoint, settings).resolve()
        client = client_factory_from_settings(settings)(resolved)
        candidates = client.list_candidates()
    except (EndpointResolutionError, ServiceCallError) as e:
        raise _fail(str(e)) from None

    rows: list[dict[str, Any]] = []
    for record in candidates:
        match = find_exclusion(record, config)
        rows.append(
            {
                "key": record.key,
                "displayName": record.display_name,
                "publisherName": record.publisher_name,
                "state": record.state.value,
                "excludedBy": None if match is None else match.rule.pattern,
            }
        )

    if json_output:
        typer.echo(json.dumps(rows, indent=2))
        return

    table = Table(title=f"Candidates at {resolved.label}")
    table.add_column("Key", style="cyan")
    table.add_column("Product")
    table.add_column("Publisher")
    table.add_column("State")
    table.add_column("Excluded by", style="yellow")
    for row in rows:
        table.add_row(
            row["key"],
            row["displayName"],
            row["publisherName"],
            row["state"],
            row["excludedBy"] or "",
        )
    Console().print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
