"""
Main entry point for the catch-cli application.

Commands report their own CatchCliError failures and exit through typer, so
only errors nobody anticipated reach the handler here.
"""

import logging
import os
import sys

from rich.console import Console

from catch_cli.cli.app import app
from catch_cli.cli.formatters import format_error_with_suggestions


def main() -> None:
    """Main entry point function."""
    if os.name == "nt":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")

    try:
        app()
    except Exception as e:
        console = Console()
        console.print()
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        logging.getLogger("catch_cli").debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
