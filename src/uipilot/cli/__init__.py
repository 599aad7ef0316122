"""
uipilot CLI - sign in to the application and check MFA codes from a terminal.
"""
from rich.console import Console
from rich.table import Table

from ..automation.types import LoginContext, LoginOutcome, LoginStatus

# Create console for rich output
console = Console()


def print_outcome(context: LoginContext, outcome: LoginOutcome) -> None:
    """Render a login outcome as a small table."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("URL", context.target_url)
    table.add_row("Identity", context.credentials.handle if context.credentials else "pass-through")
    table.add_row("Session", context.session_id)
    if outcome.status == LoginStatus.FAILURE:
        table.add_row("Result", f"[red]✗ {outcome.status.value}[/]")
        table.add_row("Reason", outcome.reason)
    else:
        table.add_row("Result", f"[green]✓ {outcome.status.value}[/]")
    console.print(table)
