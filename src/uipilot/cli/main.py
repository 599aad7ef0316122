"""
uipilot CLI - Command Line Interface for the automation core.
"""
import sys
from typing import Optional

import click

from . import console, print_outcome
from .. import tracing
from ..automation.errors import AutomationError
from ..automation.session import BrowserSession, create_engine
from ..automation.totp import generate_code
from ..automation.types import Credentials, LoginContext, LoginStatus
from ..config import AutomationConfig

logger = tracing.get_logger("cli")


@click.group(invoke_without_command=True)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Enable debug output",
    show_default=True
)
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """uipilot - resilient sign-in and command execution for web UI automation."""
    tracing.configure(debug)
    ctx.obj = {"debug": debug}

    # If no command is provided, show help
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("url")
@click.option("--username", "-u", envvar="UIPILOT_USERNAME", default=None,
              help="Sign-in name; omit for pass-through sign-in")
@click.option("--password", "-p", envvar="UIPILOT_PASSWORD", default=None,
              help="Password (prompt if not provided)")
@click.option("--mfa-secret", envvar="UIPILOT_MFA_SECRET", default=None,
              help="Base32 TOTP secret for multi-factor sign-in")
@click.option("--engine", type=click.Choice(["playwright", "selenium"]), default="playwright", show_default=True)
@click.option("--headless/--no-headless", default=True, show_default=True)
@click.option("--user-data-dir", type=click.Path(file_okay=False), default=None,
              help="Browser profile directory to reuse")
@click.pass_obj
def login(
    obj: dict,
    url: str,
    username: Optional[str],
    password: Optional[str],
    mfa_secret: Optional[str],
    engine: str,
    headless: bool,
    user_data_dir: Optional[str],
) -> None:
    """Sign in to URL and report the outcome."""
    credentials = None
    if username:
        if password is None:
            password = click.prompt("Password", hide_input=True)
        credentials = Credentials(username=username, password=password, mfa_secret=mfa_secret or None)

    try:
        config = AutomationConfig()
        eng = create_engine(engine)
    except (RuntimeError, ValueError) as e:
        raise click.ClickException(str(e))

    with BrowserSession(eng, config, headless=headless, user_data_dir=user_data_dir) as session:
        context = LoginContext(target_url=url, credentials=credentials, session_id=session.session_id)
        outcome = session.login.login(context)
    print_outcome(context, outcome)
    if outcome.status == LoginStatus.FAILURE:
        sys.exit(1)


@cli.command()
@click.argument("secret", envvar="UIPILOT_MFA_SECRET")
@click.option("--digits", type=click.IntRange(6, 8), default=6, show_default=True)
@click.pass_obj
def totp(obj: dict, secret: str, digits: int) -> None:
    """Print the current one-time code for SECRET."""
    try:
        code = generate_code(secret, digits=digits)
    except AutomationError as e:
        console.print(f"[red]✗[/] {e}")
        if obj.get("debug"):
            logger.exception("code generation failed")
        sys.exit(1)
    click.echo(code)


def main() -> None:
    cli(prog_name="uipilot")


if __name__ == "__main__":
    main()
