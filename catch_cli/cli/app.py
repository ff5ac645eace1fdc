"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path

import aiofiles
import typer
from rich.console import Console
from rich.logging import RichHandler

from catch_cli import __version__
from catch_cli.exceptions import CatchCliError, StoreIOError
from catch_cli.models.config import CatchConfig
from catch_cli.models.record import Dialect
from catch_cli.net.fetcher import Fetcher
from catch_cli.net.pinger import Pinger
from catch_cli.storage.codec import encode
from catch_cli.storage.config_manager import ConfigManager
from catch_cli.storage.reader import extract_record, find_record, iter_records
from catch_cli.storage.writer import append_record_async
from catch_cli.utils.formatting import format_rtt

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_encoded_payload,
    print_fetch_summary,
    print_ping_stats,
    print_records_table,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("catch_cli")

app = typer.Typer(
    name="catch",
    help=(
        "Download files and keep them in a human-readable record store. Use"
        " 'catch <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "catch-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> CatchConfig:
    """Loads the config file with CLI overrides, exiting on invalid settings."""
    try:
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    except CatchCliError as e:
        _fail(e)


def _fail(error: Exception) -> None:
    console.print(format_error_with_suggestions(error))
    raise typer.Exit(code=1) from error


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """Catch: download, store and extract payloads."""
    if version:
        console.print(f"[bold]catch-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("catch_cli").setLevel(log_level)

    if show_config:
        config = _load_config()
        config_data = config.model_dump(exclude={"config_path"})
        print_config(CONFIG_FILE, config_data)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config without asking."
    ),
):
    """Write a configuration file with default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config()
    except CatchCliError as e:
        _fail(e)
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command(name="fetch")
def fetch_command(
    url: str = typer.Argument(..., help="URL to download."),
    output: str | None = typer.Option(
        None, "-o", "--output", help="File to save the download to."
    ),
    store: str | None = typer.Option(
        None,
        "-s",
        "--store",
        help="Also append the payload to this store (.dqb: quantum, .dlb: standard).",
    ),
    dialect: str | None = typer.Option(
        None,
        "--dialect",
        help="Record dialect: auto (by store extension), quantum or standard.",
    ),
):
    """Download a URL and optionally append it to a record store."""
    cli_options = {
        key: value
        for key, value in {"default_output": output, "dialect": dialect}.items()
        if value is not None
    }
    config = _load_config(cli_options)
    output_path = config.default_output
    store_path = store or config.default_store or None

    async def _fetch_async():
        console.print(f"[cyan]Downloading {url} -> {output_path}[/cyan]")
        async with ProgressManager(console) as progress_manager:
            async with Fetcher(
                chunk_size=config.chunk_size,
                timeout=config.timeout,
                max_attempts=config.fetch_attempts,
            ) as fetcher:
                task = progress_manager.add_task(Path(output_path).name, 0)
                result = await fetcher.fetch(url, task)

            try:
                async with aiofiles.open(output_path, "wb") as f:
                    await f.write(result.data)
            except OSError as e:
                raise StoreIOError(f"Failed to write '{output_path}': {e}") from e

            if store_path:
                record_dialect = config.resolve_dialect(store_path)
                store_task = None
                if record_dialect is Dialect.STANDARD:
                    store_task = progress_manager.add_task(
                        f"→ {Path(store_path).name}", len(result.data)
                    )
                await append_record_async(
                    store_path, output_path, result.data, record_dialect, store_task
                )
                log.info(f"Stored {output_path} into {store_path}")
        return result

    try:
        result = asyncio.run(_fetch_async())
    except CatchCliError as e:
        _fail(e)
    print_fetch_summary(result.stats, output_path, store_path)


@app.command()
def extract(
    store: str = typer.Argument(..., help="Store file to read."),
    name: str = typer.Argument(..., help="Name of the record to extract."),
    output: str = typer.Option(..., "-o", "--output", help="File to write."),
):
    """Extract the first record with the given name from a store."""
    config = _load_config()
    try:
        with ProgressManager(console) as progress_manager:
            task = progress_manager.add_task(name, 0)
            extract_record(store, name, output, task, strict=config.strict_decode)
    except CatchCliError as e:
        _fail(e)


@app.command(name="list")
def list_command(
    store: str = typer.Argument(..., help="Store file to read."),
):
    """List the complete records of a store."""
    config = _load_config()
    try:
        records = list(iter_records(store, strict=config.strict_decode))
    except CatchCliError as e:
        _fail(e)
    print_records_table(store, records)


@app.command()
def show(
    store: str = typer.Argument(..., help="Store file to read."),
    name: str = typer.Argument(..., help="Name of the record to show."),
    radix: str = typer.Option(
        "hex", "--radix", "-r", help="Display radix: hex, oct or dec."
    ),
):
    """Print a record's payload as hex, octal or decimal bytes."""
    config = _load_config()
    try:
        record = find_record(store, name, strict=config.strict_decode)
    except CatchCliError as e:
        _fail(e)
    try:
        encoded = encode(record.payload, radix)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=2) from e
    print_encoded_payload(record, radix, encoded)


@app.command()
def ping(
    host: str = typer.Argument(..., help="Host name or IPv4 address."),
    count: int | None = typer.Option(
        None, "-c", "--count", help="Number of echo requests (default 4)."
    ),
):
    """Send ICMP echo requests and report round-trip statistics."""
    cli_options = {"ping_count": count} if count is not None else None
    config = _load_config(cli_options)

    def _report(seq: int, rtt: float | None):
        if rtt is None:
            console.print(f"[yellow]Request timeout for seq={seq}[/yellow]")
        else:
            console.print(f"Reply from {host}: seq={seq} time={format_rtt(rtt)}")

    try:
        stats = Pinger(timeout=config.ping_timeout).ping(
            host, config.ping_count, on_result=_report
        )
    except CatchCliError as e:
        _fail(e)
    print_ping_stats(stats)
