"""Configuration commands for chartstudies CLI.

Settings live in ~/.config/chartstudies/config.toml. Every setting is
optional; missing values fall back to the study defaults.
"""

import click
from rich.console import Console
from rich.panel import Panel

console = Console()


def _config_path():
    from pathlib import Path

    return Path.home() / ".config" / "chartstudies" / "config.toml"


def _get_config():
    """Lazily load configuration.

    Returns:
        Config dict or None if not configured.
    """
    import logging
    import toml

    config_path = _config_path()

    if not config_path.exists():
        return None

    try:
        return toml.load(config_path)
    except (OSError, toml.TomlDecodeError) as e:
        logging.getLogger(__name__).warning("Ignoring unreadable config %s: %s", config_path, e)
        return None


def _create_template_config():
    """Create a template configuration file."""
    import toml

    config_path = _config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    template = {
        "studies": {
            "default": ["atr", "rsi", "sma", "ema"],
        },
        "periods": {
            "atr": 14,
            "rsi": 14,
            "sma": 20,
            "ema": 20,
            "adx": 14,
        },
        "display": {
            "rows": 20,
        },
        "logging": {
            "level": "WARNING",  # DEBUG shows why studies fully recalculate
        },
    }

    with open(config_path, "w") as f:
        toml.dump(template, f)

    return config_path


@click.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
def init(force: bool) -> None:
    """Create a template configuration file.

    \b
    Examples:
      chartstudies init
      chartstudies init --force
    """
    config_path = _config_path()

    if config_path.exists() and not force:
        console.print(Panel(
            f"[yellow]Configuration already exists at:[/yellow]\n"
            f"[cyan]{config_path}[/cyan]\n\n"
            f"Use [green]chartstudies init --force[/green] to overwrite it.",
            title="[bold]Configuration[/bold]",
            border_style="yellow",
        ))
        return

    config_path = _create_template_config()
    console.print(Panel(
        f"[green]✓[/green] Configuration file created at:\n"
        f"[cyan]{config_path}[/cyan]",
        title="[bold]Configuration[/bold]",
        border_style="green",
    ))
