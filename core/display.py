"""Rich terminal rendering for the fortress CLI."""

from rich.console import Console
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table

from shared.clock import to_datetime
from modules.fortress.models import FortressActive, FortressStatus
from modules.policies.models import CommitmentPlan, CommitmentPolicy, FortressState, RemainingTime
from modules.restrictions.models import ContentFilterStatus

console = Console()


def format_timestamp(millis: int) -> str:
    """Format epoch millis as a UTC date and time."""
    return to_datetime(millis).strftime("%Y-%m-%d %H:%M UTC")


def format_remaining(remaining: RemainingTime) -> str:
    """Format a countdown, e.g. "12d 04h 30m 05s"."""
    return (
        f"{remaining.days}d {remaining.hours:02d}h "
        f"{remaining.minutes:02d}m {remaining.seconds:02d}s"
    )


def print_plans() -> None:
    """Print the commitment plan catalog."""
    table = Table(title="Commitment Plans")
    table.add_column("Plan", style="bold")
    table.add_column("Name")
    table.add_column("Days", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Description", style="dim")

    for plan in CommitmentPlan:
        price_style = "green" if plan.is_free else ""
        table.add_row(
            plan.value,
            plan.display_name,
            str(plan.days),
            f"[{price_style}]{plan.price_display}[/{price_style}]" if price_style else plan.price_display,
            plan.description,
        )

    console.print(table)


def print_status(
    status: FortressStatus,
    remaining: RemainingTime | None,
    content_filter: ContentFilterStatus | None = None,
) -> None:
    """Print the active commitment, or a short note when there is none.

    Args:
        status: Fortress status snapshot
        remaining: Countdown for the active policy
        content_filter: Live content-filtering state, if it could be read
    """
    if not isinstance(status, FortressActive):
        console.print(f"[dim]{FortressState.INACTIVE.display_message}[/dim]")
        return

    policy = status.policy
    lines = [
        f"[bold]{policy.plan.display_name}[/bold] via {policy.activation_method.display_name}",
        f"Started:   {format_timestamp(policy.activation_timestamp)}",
        f"Ends:      {format_timestamp(policy.expiry_timestamp)}",
    ]
    if remaining is not None:
        lines.append(f"Remaining: {format_remaining(remaining)}")
    lines.append(f"Progress:  {status.progress_percentage:.1f}%")
    lines.append(f"Protection score: {status.protection_score}/100")
    if content_filter is not None:
        lines.append(f"Content filter score: {content_filter.score}/100")

    border = "green" if policy.state is FortressState.UNLOCKABLE else "red"
    console.print(Panel("\n".join(lines), title=policy.state.display_message, border_style=border))
    console.print(ProgressBar(total=100, completed=status.progress_percentage, width=60))


def print_history(policies: list[CommitmentPolicy]) -> None:
    """Print finished commitments, most recent first."""
    if not policies:
        console.print("[dim]No completed commitments yet[/dim]")
        return

    table = Table(title="Commitment History")
    table.add_column("Plan", style="bold")
    table.add_column("Started")
    table.add_column("Ended")
    table.add_column("State")
    table.add_column("Score", justify="right")

    for policy in policies:
        table.add_row(
            policy.plan.display_name,
            format_timestamp(policy.activation_timestamp),
            format_timestamp(policy.expiry_timestamp),
            policy.state.value,
            str(policy.protection_score()),
        )

    console.print(table)
