"""CandleSet data model.

A CandleSet is the ordered candle series a chart displays, together with the
metadata studies need: display precision, frequency, the requested time window
and the number of leading candles fetched only to warm studies up.
"""

import calendar
from datetime import datetime, timedelta
from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, Field, PrivateAttr, model_validator

from chartstudies.models.candle import Candle


class TimeFrame(IntEnum):
    """Candle frequency. Values at or above DAY are multiples of 1000 per day."""

    MINUTE = 1
    MINUTE5 = 5
    MINUTE15 = 15
    MINUTE30 = 30
    HOUR = 60
    HOUR2 = 120
    HOUR4 = 240
    DAY = 1000
    DAY2 = 2000
    DAY3 = 3000
    WEEK = 7000
    MONTH = 30000

    @property
    def is_intraday(self) -> bool:
        return self < TimeFrame.DAY

    def prepend_start_time(self, start_time: datetime, prepend_candles: int) -> datetime:
        """Get how far before start_time data must be requested for warm-up.

        Args:
            start_time: First timestamp the user wants to see.
            prepend_candles: Number of warm-up candles needed before it.

        Returns:
            Timestamp to request data from.
        """
        if self == TimeFrame.MONTH:
            return _add_months(start_time, -prepend_candles)
        if self == TimeFrame.WEEK:
            return start_time - timedelta(days=prepend_candles * 7)
        if self in (TimeFrame.DAY, TimeFrame.DAY2, TimeFrame.DAY3):
            # 5 market days in a week
            days = prepend_candles * (self // TimeFrame.DAY) * 7 // 5
            return start_time - timedelta(days=days)
        # Hard to calculate exactly for intraday; a day or two covers it
        if self >= TimeFrame.MINUTE15:
            return start_time - timedelta(days=2)
        return start_time - timedelta(days=1)

    def date_text(self, timestamp: datetime) -> str:
        """Format a timestamp for a legend or tooltip."""
        if self.is_intraday:
            return timestamp.strftime("%m/%d/%Y %I:%M %p")
        return timestamp.strftime("%m/%d/%Y")

    def is_after_hours(self, timestamp: datetime) -> bool:
        """Check whether an intraday timestamp falls outside regular hours."""
        if not self.is_intraday:
            return False
        if 9 <= timestamp.hour < 15:
            return False
        if timestamp.hour == 8 and timestamp.minute >= 30:
            return False
        return True


def _add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


class CandleSet(BaseModel):
    """An ordered candle series plus chart metadata.

    Candles are in strictly increasing timestamp order. The set is only ever
    replaced wholesale (reload), extended by one trailing candle (append) or
    has its still-forming last candle revised (update_last).
    """

    symbol: str = Field(default="", description="Trading symbol")
    description: str = Field(default="", description="Instrument description")
    decimals: int = Field(default=2, ge=0, le=10, description="Display precision")
    time_frame: TimeFrame = Field(default=TimeFrame.DAY, description="Candle frequency")
    start_time: Optional[datetime] = Field(default=None, description="Requested start")
    end_time: Optional[datetime] = Field(default=None, description="Requested end")
    prepend_candles: int = Field(
        default=0, ge=0, description="Leading candles fetched only for study warm-up"
    )
    candles: list[Candle] = Field(default_factory=list, description="Candles, oldest first")
    loaded_at: datetime = Field(default_factory=datetime.now, description="Last (re)load time")

    _generation: int = PrivateAttr(default=0)

    @model_validator(mode="after")
    def _check_order(self) -> "CandleSet":
        _check_chronological(self.candles)
        return self

    def __len__(self) -> int:
        return len(self.candles)

    def __getitem__(self, index: int) -> Candle:
        return self.candles[index]

    @property
    def count(self) -> int:
        return len(self.candles)

    @property
    def generation(self) -> int:
        """Counter bumped on every reload, used to detect replaced data."""
        return self._generation

    @property
    def start_time_index(self) -> int:
        """Index of the first candle inside the user-visible window."""
        if self.start_time is None:
            return min(self.prepend_candles, len(self.candles))
        for i, candle in enumerate(self.candles):
            if candle.timestamp >= self.start_time:
                return i
        return len(self.candles)

    def closes(self) -> list[float]:
        return [c.close for c in self.candles]

    def highs(self) -> list[float]:
        return [c.high for c in self.candles]

    def lows(self) -> list[float]:
        return [c.low for c in self.candles]

    def volumes(self) -> list[float]:
        return [float(c.volume) for c in self.candles]

    def append(self, candle: Candle) -> None:
        """Extend the series with a new trailing candle.

        Raises:
            ValueError: If the candle is not after the current last candle.
        """
        if self.candles and candle.timestamp <= self.candles[-1].timestamp:
            raise ValueError(
                f"Candle at {candle.timestamp} is not after last candle "
                f"at {self.candles[-1].timestamp}"
            )
        self.candles.append(candle)

    def update_last(self, candle: Candle) -> None:
        """Replace the still-forming last candle with a revised one.

        Raises:
            ValueError: If the set is empty or the timestamps differ.
        """
        if not self.candles:
            raise ValueError("Cannot update last candle of an empty CandleSet")
        if candle.timestamp != self.candles[-1].timestamp:
            raise ValueError(
                f"Revised candle at {candle.timestamp} does not match last candle "
                f"at {self.candles[-1].timestamp}"
            )
        self.candles[-1] = candle

    def reload(self, candles: list[Candle]) -> None:
        """Replace every candle, e.g. after a symbol or timeframe change."""
        _check_chronological(candles)
        self.candles = list(candles)
        self.loaded_at = datetime.now()
        self._generation += 1


def _check_chronological(candles: list[Candle]) -> None:
    for i in range(1, len(candles)):
        if candles[i].timestamp <= candles[i - 1].timestamp:
            raise ValueError(
                f"Candles out of order at index {i}: "
                f"{candles[i].timestamp} <= {candles[i - 1].timestamp}"
            )
