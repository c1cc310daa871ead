"""
Vibe Homework - session command line.

Bootstraps the same client-side session the web app uses and prints
what the app would show: the auth state, the profile and the view.
Useful for checking a Supabase project's auth and profiles setup.
"""

import argparse
import asyncio
import getpass
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from modules.auth import AuthGate, AuthResult, AuthSession, AuthState, open_auth_session
from shared.config import Settings, get_settings

console = Console()


def configure_logging(level: str) -> None:
    """Route log records through rich at the given level."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def render_state(state: AuthState, gate: AuthGate) -> Table:
    """Build a table describing an auth state."""
    table = Table(title="Auth state", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Status", state.status.value)
    table.add_row("View", gate.view.value)
    table.add_row("User", state.user.id if state.user else "-")
    if state.profile:
        table.add_row("Name", state.profile.full_name)
        table.add_row("Email", state.profile.email or "-")
        table.add_row("Role", state.profile.role_name)
    return table


def report_error(result: AuthResult, action: str) -> int:
    """Print a result error. Returns the exit code."""
    if result.error is None:
        return 0
    console.print(f"[red]{action} failed:[/red] {result.error.message} [dim]({result.error.code})[/dim]")
    return 1


async def show_status(auth: AuthSession, gate: AuthGate) -> int:
    state = await auth.wait_until_settled()
    console.print(render_state(state, gate))
    return 0


async def login(auth: AuthSession, gate: AuthGate, email: str, sign_out: bool) -> int:
    await auth.wait_until_settled()
    password = getpass.getpass("Password: ")

    result = await auth.sign_in(email, password)
    if report_error(result, "Sign-in"):
        return 1

    # The SIGNED_IN event drives the profile lookup; wait for it to land
    timeout = auth.settings.auth_session_timeout + auth.settings.auth_profile_timeout
    try:
        while not auth.state.is_authenticated:
            await asyncio.wait_for(_next_state(auth), timeout=timeout)
    except asyncio.TimeoutError:
        console.print("[yellow]Signed in, but the profile did not load in time[/yellow]")
        return 1
    console.print(render_state(auth.state, gate))

    if sign_out:
        outcome = await auth.sign_out()
        if outcome.error is not None:
            console.print(f"[red]Sign-out failed:[/red] {outcome.error.message}")
            return 1
        console.print("[green]Signed out[/green]")
    return 0


async def register(
    auth: AuthSession,
    email: str,
    full_name: str,
    role: str,
) -> int:
    await auth.wait_until_settled()
    password = getpass.getpass("Password: ")

    result = await auth.sign_up(email, password, full_name, role)
    if report_error(result, "Registration"):
        return 1

    if result.data and result.data.session is None:
        console.print("[green]Registered.[/green] Check your email to confirm the account.")
    else:
        console.print("[green]Registered and signed in.[/green]")
    return 0


async def _next_state(auth: AuthSession) -> AuthState:
    """Wait for the next published state."""
    future: asyncio.Future[AuthState] = asyncio.get_running_loop().create_future()

    def deliver(state: AuthState) -> None:
        if not future.done():
            future.set_result(state)

    unsubscribe = auth.subscribe(deliver)
    try:
        return await future
    finally:
        unsubscribe()


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Open a session, run the chosen command and close the session."""
    if not settings.backend_configured:
        console.print("[yellow]Supabase is not configured; the app would show the login view.[/yellow]")

    async with await open_auth_session(settings) as auth:
        gate = AuthGate(auth)
        try:
            if args.command == "login":
                return await login(auth, gate, args.email, args.sign_out)
            if args.command == "register":
                return await register(auth, args.email, args.name, args.role)
            return await show_status(auth, gate)
        finally:
            gate.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect and drive the Vibe Homework session bootstrap"
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: LOG_LEVEL setting)",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("status", help="Restore the stored session and show the resulting state")

    login_parser = subparsers.add_parser("login", help="Sign in with email and password")
    login_parser.add_argument("email", help="Account email")
    login_parser.add_argument(
        "--sign-out",
        action="store_true",
        help="Sign out again after showing the profile",
    )

    register_parser = subparsers.add_parser("register", help="Create an account")
    register_parser.add_argument("email", help="Account email")
    register_parser.add_argument("--name", required=True, help="Full name")
    register_parser.add_argument(
        "--role",
        choices=["student", "teacher"],
        default="student",
        help="Role to register as (default: student)",
    )
    return parser


def cli() -> None:
    """Console script entry point."""
    args = build_parser().parse_args()
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)
    sys.exit(asyncio.run(run(args, settings)))


if __name__ == "__main__":
    cli()
