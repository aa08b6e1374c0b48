"""
Main entry point for the openlens-cli application.

The typer app runs outside standalone mode so that the error panels below
are the only place a failure is rendered.
"""

import asyncio
import logging
import os
import sys

import click
from rich.console import Console

from openlens_cli.cli.app import app
from openlens_cli.cli.formatters import format_error_with_suggestions
from openlens_cli.exceptions import OpenLensError

EXIT_CANCELLED = 130


def main() -> None:
    """Runs the CLI and converts its outcome into a process exit code."""
    if os.name == "nt":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            sys.stderr.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass

    log = logging.getLogger("openlens_cli")
    console = Console(stderr=True)

    try:
        exit_code = app(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except (click.exceptions.Abort, KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]⚠️  Operation cancelled by user.[/yellow]")
        sys.exit(EXIT_CANCELLED)
    except OpenLensError as e:
        console.print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)

    sys.exit(exit_code if isinstance(exit_code, int) else 0)


if __name__ == "__main__":
    main()
