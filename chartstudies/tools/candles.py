"""Candle loading tools."""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from chartstudies.models import Candle, CandleSet, TimeFrame

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["timestamp", "open", "high", "low", "close", "volume"]


def load_candles_csv(path: Path) -> list[Candle]:
    """Load candles from a CSV file.

    The file needs a header with timestamp, open, high, low, close and
    volume columns (any case, any order). Rows are sorted by timestamp and
    duplicate timestamps keep the last row.

    Raises:
        ValueError: If a required column is missing.
    """
    df = pd.read_csv(path)
    df.columns = [str(col).strip().lower() for col in df.columns]

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing columns: {', '.join(missing)}")

    df["timestamp"] = pd.to_datetime(df["timestamp"])
    df = df.sort_values("timestamp").drop_duplicates("timestamp", keep="last")

    candles = [
        Candle(
            timestamp=row.timestamp.to_pydatetime(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=int(row.volume),
        )
        for row in df.itertuples(index=False)
    ]
    logger.info("Loaded %d candles from %s", len(candles), path)
    return candles


def load_candle_set(
    path: Path,
    symbol: Optional[str] = None,
    time_frame: TimeFrame = TimeFrame.DAY,
    decimals: int = 2,
) -> CandleSet:
    """Load a CSV file into a CandleSet. The symbol defaults to the file name."""
    path = Path(path)
    return CandleSet(
        symbol=(symbol or path.stem).upper(),
        decimals=decimals,
        time_frame=time_frame,
        candles=load_candles_csv(path),
    )
