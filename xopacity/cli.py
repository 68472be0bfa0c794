"""
xopacity command-line interface.

Usage:
    xopacity [OPTIONS] [OPACITY]

Examples:
    xopacity 75              click a window, set it to 75% opacity
    xopacity -c +10          make the focused window 10% more opaque
    xopacity -n Firefox -g   print the opacity of the first Firefox window
    xopacity --reset         clear opacity on every window
"""

import logging
from typing import Sequence

import click
from rich.console import Console
from rich.markup import escape

from .config import Config
from .controller import OpacityController
from .errors import MissingOperandError, OpacityError
from .models import Action, CanonicalRequest
from .normalizer import normalize
from .resolver import WindowResolver
from .x11 import X11Client

logger = logging.getLogger(__name__)

USAGE = """\
Usage: xopacity [OPTIONS] [OPACITY]

Set, query or clear the opacity of an X11 window.

OPACITY is a percentage (0-100) with an optional trailing %. A leading
+ or - adjusts the current opacity instead; results saturate at 0 and 100.

Actions (default: set):
  -o, --opacity VALUE   opacity to set (a bare VALUE works anywhere too)
  -g, --get             print the window's opacity (100 when unset)
  -d, --delete          remove the window's opacity property
  -t, --toggle          delete opacity if set, otherwise set it (default 100)
  -r, --reset           remove opacity from every window
  -h, --help            show this message and exit

Window selection (default: click a window):
  -s, --select          click the window to change
  -c, --current         use the focused window
  -n, --name NAME       use the first window whose name contains NAME
  -w, --window ID       use window ID (hexadecimal 0x... or decimal)
"""


class RawArgsCommand(click.Command):
    """Command that hands its argument vector to the normalizer untouched."""

    def parse_args(self, ctx: click.Context, args: list) -> list:
        ctx.params["tokens"] = tuple(args)
        return []


def configure_logging(config: Config) -> None:
    logging.basicConfig(
        level=config.logging_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def execute(request: CanonicalRequest, window_system, config: Config) -> None:
    """Resolve the target window and run the requested action."""
    if request.action == Action.SET and request.opacity is None:
        raise MissingOperandError(Action.SET.value)

    controller = OpacityController(window_system, config.opacity_property)

    window = None
    if request.action != Action.RESET:
        window = WindowResolver(window_system).resolve(request)

    result = controller.apply(request.action, window, request.opacity)
    if result.output is not None:
        click.echo(result.output)


@click.command(cls=RawArgsCommand, context_settings={"help_option_names": []})
@click.pass_context
def cli(ctx: click.Context, tokens: Sequence[str]):
    """Set, query or clear the opacity of an X11 window."""
    config = Config.from_env()
    configure_logging(config)
    console = Console(stderr=True)

    if not tokens:
        click.echo(USAGE, err=True)
        ctx.exit(1)

    window_system = ctx.obj if ctx.obj is not None else X11Client(config)

    try:
        request = normalize(tokens, focus_lookup=window_system.get_active_window)
        if request.show_help:
            click.echo(USAGE)
            ctx.exit(0)
        logger.debug(f"Request: {request.model_dump()}")
        execute(request, window_system, config)
    except OpacityError as e:
        logger.debug(f"Error details: {e.to_dict()}")
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        if e.suggestion:
            console.print(f"[dim]{escape(e.suggestion)}[/dim]")
        ctx.exit(e.exit_status)


def main():
    """Main entry point."""
    cli(prog_name="xopacity")


if __name__ == "__main__":
    main()
