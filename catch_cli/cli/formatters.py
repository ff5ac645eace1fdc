"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from catch_cli.models.record import Record
from catch_cli.models.stats import PingStats, TransferStats
from catch_cli.utils.formatting import format_duration, format_rtt, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "RecordNotFoundError": [
            "• Record names are matched exactly, including the file extension.",
            "• Run `catch list <STORE>` to see the names the store holds.",
        ],
        "StoreIOError": [
            "• Check that the store path exists and is readable.",
            "• Check free disk space and write permissions for output files.",
            "• A store must be UTF-8 text; damaged bytes make it unreadable.",
        ],
        "MalformedTokenError": [
            "• The store contains a damaged payload line.",
            "• Set `strict_decode = false` to skip bad tokens instead.",
        ],
        "FetchError": [
            "• Check the URL and your internet connection.",
            "• The server may be temporarily unavailable; try again later.",
            "• Raise `fetch_attempts` in the config to retry automatically.",
        ],
        "ProbeError": [
            "• Raw ICMP sockets need root (or CAP_NET_RAW) on most systems.",
            "• Check that the host name resolves.",
        ],
        "ConfigurationError": [
            "• Run `catch --show-config` to inspect the current settings.",
            "• Run `catch init --force` to write a fresh default config.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_records_table(store_path: str, records: list[Record]):
    """Lists the records of a store."""
    console = Console()
    if not records:
        console.print(f"[yellow]No complete records in '{store_path}'.[/yellow]")
        return

    table = Table(title=f"Records in {store_path}", box=box.ROUNDED)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Declared", justify="right")
    table.add_column("Recovered", justify="right", style="green")
    table.add_column("Dialect", style="magenta")
    for i, record in enumerate(records, 1):
        declared = "?" if record.size is None else str(record.size)
        recovered = format_size(len(record.payload))
        if not record.size_matches:
            recovered = f"[yellow]{recovered}[/yellow]"
        table.add_row(str(i), record.name, declared, recovered, record.dialect.value)
    console.print(table)


def print_encoded_payload(record: Record, radix: str, encoded: str):
    """Shows a record payload rendered in a fixed radix."""
    console = Console()
    console.print(
        Panel(
            Text(encoded or "(empty)"),
            title=f"[bold]{record.name}[/bold] [dim]({radix}, {len(record.payload)} bytes)[/dim]",
            border_style="cyan",
        )
    )


def print_fetch_summary(
    stats: TransferStats, output_path: str, store_path: str | None = None
):
    """Displays a summary of a completed transfer."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=14)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row("Saved To:", f"[green]{output_path}[/green]")
    if store_path:
        stats_table.add_row("Stored In:", f"[green]{store_path}[/green]")
    stats_table.add_row("Size:", f"[cyan]{format_size(stats.bytes_received)}[/cyan]")
    stats_table.add_row(
        "Avg. Speed:",
        f"[magenta]{format_size(int(stats.average_speed_bps))}/s[/magenta]",
    )
    if stats.peak_speed_bps > 0:
        stats_table.add_row(
            "Peak Speed:",
            f"[magenta]{format_size(int(stats.peak_speed_bps))}/s[/magenta]",
        )
    stats_table.add_row(
        "Time Elapsed:", f"[blue]{format_duration(stats.elapsed)}[/blue]"
    )

    console.print(
        Panel(
            stats_table,
            title="📥 [bold]Download Complete![/bold]",
            border_style="green",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )


def print_ping_stats(stats: PingStats):
    """Displays the summary of an ICMP probe."""
    console = Console()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()
    table.add_row(
        "Packets:",
        f"Sent = {stats.sent}, Received = [green]{stats.received}[/green], "
        f"Lost = [red]{stats.lost}[/red] ({stats.loss_percent}% loss)",
    )
    if stats.round_trips:
        table.add_row("Minimum:", format_rtt(stats.minimum))
        table.add_row("Maximum:", format_rtt(stats.maximum))
        table.add_row("Average:", format_rtt(stats.average))

    border = "green" if stats.lost == 0 else "yellow"
    console.print(
        Panel(
            table,
            title=f"[bold]Ping statistics for {stats.host}[/bold]",
            border_style=border,
            expand=False,
        )
    )
