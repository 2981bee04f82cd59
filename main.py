"""
Taqwa Fortress - operator CLI for the fortress core.

Shows the commitment plan catalog and, from the local policy store,
the running commitment and past ones.
"""

import argparse
import asyncio
import logging

from rich.logging import RichHandler

from core.display import console, print_history, print_plans, print_status
from shared.config import get_settings
from shared.exceptions import FortressError
from modules.fortress.service import get_fortress_service


def configure_logging(level: str) -> None:
    """Send log records through rich at the configured level."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


async def show_status() -> None:
    service = get_fortress_service()
    status = await service.get_status()
    remaining = await service.get_remaining_time()
    print_status(status, remaining, service.get_content_filter_status())


async def show_history() -> None:
    service = get_fortress_service()
    print_history(await service.get_history())


def main(command: str) -> int:
    """Main entry point.

    Args:
        command: One of "plans", "status" or "history"

    Returns:
        Process exit code
    """
    settings = get_settings()
    console.print(f"[bold]{settings.app_name}[/bold] [dim]v{settings.app_version}[/dim]\n")

    try:
        if command == "plans":
            print_plans()
        elif command == "status":
            asyncio.run(show_status())
        elif command == "history":
            asyncio.run(show_history())
    except FortressError as e:
        console.print(f"[red]Error:[/red] {e.message} [dim]({e.code})[/dim]")
        return 1

    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Taqwa Fortress commitment CLI")
    parser.add_argument(
        "command",
        choices=["plans", "status", "history"],
        help="What to show",
    )
    parser.add_argument(
        "--log-level",
        help="Override LOG_LEVEL (default from settings)",
    )
    args = parser.parse_args()

    configure_logging(args.log_level or get_settings().log_level)
    raise SystemExit(main(args.command))
