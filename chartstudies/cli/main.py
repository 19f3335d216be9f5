"""Main CLI entry point for chartstudies.

This module provides the main click group and lazy loading
for heavy imports to improve startup time.
"""

import logging

import click
from rich.console import Console

# Console for rich output
console = Console()


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    This improves CLI startup time by only importing
    command modules when they are actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        # The command is either a module attribute named cmd_name or a
        # command object whose name is cmd_name
        attr = getattr(module, cmd_name, None)
        if isinstance(attr, click.Command):
            cmd = attr
        else:
            cmd = None
            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if isinstance(attr, click.Command) and attr.name == cmd_name:
                    cmd = attr
                    break

            if cmd is None:
                raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd, cmd_name)
        return cmd


LAZY_SUBCOMMANDS = {
    "calc": "chartstudies.cli.calc",
    "point": "chartstudies.cli.calc",
    "studies": "chartstudies.cli.calc",
    "init": "chartstudies.cli.config",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _setup_logging(verbose: bool) -> None:
    """Configure logging from --verbose or the [logging] config section."""
    if verbose:
        level = "DEBUG"
    else:
        from chartstudies.cli.config import _get_config

        config = _get_config() or {}
        level = str(config.get("logging", {}).get("level", "WARNING")).upper()

    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="chartstudies")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """chartstudies - technical studies for candlestick charts.

    Calculates ATR, RSI, moving averages and other chart studies
    over OHLCV candles loaded from CSV files.

    \b
    Quick Start:
      chartstudies init                   # Create a config file
      chartstudies studies                # List available studies
      chartstudies calc prices.csv -s atr # Calculate ATR(14)
    """
    ctx.ensure_object(dict)
    _setup_logging(verbose)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
