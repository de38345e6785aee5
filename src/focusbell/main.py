"""Main entry point for the focusbell CLI."""

import asyncio

import typer
from rich.console import Console
from rich.markup import escape

from focusbell import __version__
from focusbell.app import FocusBellApp, build_app
from focusbell.config import TOKEN_ENV_VAR, AppConfig, get_config_manager, get_token
from focusbell.services.commands import CONTROLS, Reply
from focusbell.services.orchestrator import CommandContext
from focusbell.ui import formatters
from focusbell.ui.console import get_console
from focusbell.utils import exit_codes
from focusbell.utils.logger import get_logger, set_level

app = typer.Typer(
    name="focusbell",
    help="Multi-user focus session timer with audio notifications",
    no_args_is_help=True,
)

console = get_console()
err_console = get_console(stderr=True)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]focusbell[/bold] version [cyan]{__version__}[/cyan]")


@app.command()
def run(
    user: str = typer.Option("local", "--user", "-u", help="User ID for typed commands"),
    scope: str = typer.Option("console", "--scope", "-s", help="Scope (server) ID"),
    channel: str = typer.Option("stdin", "--channel", help="Text channel ID"),
) -> None:
    """Run the bot, reading commands from stdin.

    Lines are dispatched as commands. The words pause, resume and stop act
    as the session control buttons.
    """
    if get_token() is None:
        err_console.print(f"[red]✗ {TOKEN_ENV_VAR} environment variable is not set[/red]")
        raise typer.Exit(exit_codes.ERROR_AUTH_FAILURE)

    try:
        config = get_config_manager().config
    except RuntimeError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(exit_codes.ERROR_CONFIG) from e

    set_level(config.log_level)
    ctx = CommandContext(user_id=user, scope_id=scope, channel_id=channel)
    try:
        asyncio.run(_serve(config, ctx, console))
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutting down...[/yellow]")


async def _serve(config: AppConfig, ctx: CommandContext, out: Console) -> None:
    focus = build_app(config)
    focus.orchestrator.add_observer(lambda event: out.print(formatters.format_event(event)))
    focus.maintenance.start()
    get_logger().info("focusbell %s started for user %s", __version__, ctx.user_id)
    out.print("[bold]🍅 focusbell[/bold] ready. Type [cyan]help[/cyan] for commands.")
    try:
        await _read_commands(focus, ctx, out)
    finally:
        await focus.shutdown()


async def _read_commands(focus: FocusBellApp, ctx: CommandContext, out: Console) -> None:
    while True:
        try:
            line = await asyncio.to_thread(input)
        except EOFError:
            return
        content = line.strip()
        if content in ("quit", "exit"):
            return
        if content.lower() in CONTROLS:
            reply = await focus.dispatcher.control(ctx, content.lower())
        else:
            reply = await focus.dispatcher.dispatch(ctx, content)
        if reply is not None:
            _print_reply(out, reply)


def _print_reply(out: Console, reply: Reply) -> None:
    if reply.message:
        out.print(reply.message, style=None if reply.ok else "red", markup=False)
    if reply.body is not None:
        out.print(reply.body)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
