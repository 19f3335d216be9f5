"""Study commands for chartstudies CLI.

Loads candles from a CSV file and calculates and displays chart studies.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chartstudies.cli.config import _get_config
from chartstudies.models import TimeFrame
from chartstudies.studies import STUDIES, Study, StudyStatus
from chartstudies.tools import DEFAULT_STUDIES, calculate_studies, load_candle_set

console = Console()

TIMEFRAMES = {
    "1min": TimeFrame.MINUTE,
    "5min": TimeFrame.MINUTE5,
    "15min": TimeFrame.MINUTE15,
    "30min": TimeFrame.MINUTE30,
    "1hour": TimeFrame.HOUR,
    "2hour": TimeFrame.HOUR2,
    "4hour": TimeFrame.HOUR4,
    "1day": TimeFrame.DAY,
    "2day": TimeFrame.DAY2,
    "3day": TimeFrame.DAY3,
    "1week": TimeFrame.WEEK,
    "1month": TimeFrame.MONTH,
}

STATUS_COLORS = {
    StudyStatus.CALCULATED.value: "green",
    StudyStatus.WARMING_UP.value: "yellow",
    StudyStatus.INSUFFICIENT_DATA.value: "red",
    StudyStatus.NOT_CALCULATED.value: "dim",
}


def _parse_studies(studies_str: str, default: Optional[list[str]] = None) -> list[str]:
    """Parse comma-separated study string into list.

    Args:
        studies_str: Comma-separated study names.
        default: Returned when no valid name is given.

    Returns:
        List of valid study names, in the order given, without duplicates.
    """
    default = default or DEFAULT_STUDIES
    requested = [s.strip().lower() for s in studies_str.split(",")]
    valid = []
    for name in requested:
        if name in STUDIES and name not in valid:
            valid.append(name)
    return valid if valid else default


def _load(file: str, timeframe: str, decimals: int):
    """Load a CSV file, printing an error panel and exiting on failure."""
    try:
        return load_candle_set(Path(file), time_frame=TIMEFRAMES[timeframe], decimals=decimals)
    except (OSError, ValueError) as e:
        console.print(Panel(
            f"[red]{e}[/red]",
            title="[bold red]Could not load candles[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--studies", "-s", default=None, help="Comma-separated studies (e.g. atr,rsi)")
@click.option(
    "--timeframe", "-t",
    type=click.Choice(list(TIMEFRAMES)),
    default="1day",
    help="Candle timeframe (default: 1day)",
)
@click.option("--rows", "-n", type=int, default=None, help="Number of trailing rows to show")
@click.option("--decimals", type=click.IntRange(0, 10), default=2, help="Display precision")
def calc(file: str, studies: Optional[str], timeframe: str, rows: Optional[int], decimals: int) -> None:
    """Calculate studies over candles in a CSV file.

    The file needs timestamp, open, high, low, close and volume columns.

    \b
    Examples:
      chartstudies calc reliance.csv
      chartstudies calc reliance.csv -s atr,adx -n 10
      chartstudies calc nifty_5min.csv -t 5min --decimals 1
    """
    config = _get_config() or {}
    default_studies = config.get("studies", {}).get("default", DEFAULT_STUDIES)
    study_list = _parse_studies(studies, default_studies) if studies else list(default_studies)
    rows = rows or config.get("display", {}).get("rows", 20)

    candle_set = _load(file, timeframe, decimals)
    console.print(
        f"[dim]Calculating {', '.join(study_list)} over {len(candle_set)} "
        f"{timeframe} candles of {candle_set.symbol}...[/dim]"
    )

    results = calculate_studies(candle_set, study_list, config.get("periods", {}))

    if results["error"]:
        console.print(Panel(
            f"[yellow]{results['error']}[/yellow]",
            title="[bold yellow]Calculation Failed[/bold yellow]",
            border_style="yellow",
        ))
        raise SystemExit(1)

    instances = results["instances"]
    table = Table(title=f"{candle_set.symbol} - last {min(rows, len(candle_set))} candles")
    table.add_column("Date", style="cyan")
    table.add_column("Close", justify="right")
    for name in study_list:
        table.add_column(instances[name].study_description(), justify="right")

    for i in range(max(0, len(candle_set) - rows), len(candle_set)):
        candle = candle_set[i]
        row = [
            candle_set.time_frame.date_text(candle.timestamp),
            format(candle.close, f",.{decimals}f"),
        ]
        for name in study_list:
            study = instances[name]
            row.append(study.display_value(i) if study.status == StudyStatus.CALCULATED else "-")
        table.add_row(*row)

    console.print(table)

    legend = []
    for name in study_list:
        info = results["studies"][name]
        color = STATUS_COLORS[info["status"]]
        legend.append(f"[bold]{info['tooltip']}[/bold] [{color}]{info['status']}[/{color}]")
        if info["status"] != StudyStatus.CALCULATED.value:
            legend.append(f"  [dim]needs {info['required_candles']} candles[/dim]")
    console.print(Panel("\n".join(legend), title="[bold]Studies[/bold]", border_style="blue"))


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--study", "-s", "study_name", type=click.Choice(sorted(STUDIES)), required=True)
@click.option("--index", "-i", type=int, required=True, help="Candle index (negative counts from the end)")
@click.option("--periods", "-p", type=int, default=None, help="Study periods")
@click.option("--decimals", type=click.IntRange(0, 10), default=2, help="Display precision")
def point(file: str, study_name: str, index: int, periods: Optional[int], decimals: int) -> None:
    """Evaluate one study at one candle, recalculating from scratch.

    \b
    Examples:
      chartstudies point reliance.csv -s atr -i 50
      chartstudies point reliance.csv -s rsi -i -1 -p 9
    """
    config = _get_config() or {}
    study_cls = STUDIES[study_name]
    if periods is None:
        periods = config.get("periods", {}).get(study_name, study_cls.default_periods)

    candle_set = _load(file, "1day", decimals)
    if index < 0:
        index += len(candle_set)

    value = study_cls.value_at(index, candle_set, periods)
    if 0 <= index < len(candle_set):
        when = candle_set.time_frame.date_text(candle_set[index].timestamp)
    else:
        when = "out of range"

    console.print(
        f"[bold]{study_cls.name.upper()}({periods})[/bold] at index {index} "
        f"[dim]({when})[/dim]: {value:,.{decimals}f}"
    )


def _placement(study_cls: type[Study]) -> str:
    """Where a study is drawn: over the candles or in its own panel."""
    return "overlay" if study_cls.use_right_axis else "panel"


@click.command(name="studies")
def list_studies() -> None:
    """List available studies."""
    table = Table(title="Available Studies")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Plot")
    table.add_column("Default periods", justify="right")
    table.add_column("Warm-up candles", justify="right")

    for name, study_cls in sorted(STUDIES.items()):
        study = study_cls()
        table.add_row(
            name,
            study.study_tooltip(),
            _placement(study_cls),
            str(study.periods),
            str(study.prepend_candles_needed),
        )

    console.print(table)
