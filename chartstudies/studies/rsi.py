"""RSI - Relative Strength Index study."""

from enum import Enum
from typing import Any, Optional, Sequence

from chartstudies.indicators.technical import (
    price_change,
    rsi_components,
    rsi_from_averages,
    wilder_step,
)
from chartstudies.models import Candle
from chartstudies.studies.base import Study, backfill


class RSIMode(str, Enum):
    """Which candle price the RSI is calculated on."""

    CLOSE = "close"
    HIGH = "high"
    LOW = "low"


def _prices(candles: Sequence[Candle], mode: RSIMode) -> list[float]:
    if mode == RSIMode.HIGH:
        return [c.high for c in candles]
    if mode == RSIMode.LOW:
        return [c.low for c in candles]
    return [c.close for c in candles]


class RSI(Study):
    """Relative Strength Index using Wilder's smoothing of gains and losses.

    Average gain and loss are seeded at index ``periods`` with the simple
    mean of the first ``periods`` price changes and kept as extra buffers,
    since the RSI value alone is not enough to continue the smoothing.
    """

    name = "rsi"
    label = "relative strength index"
    default_periods = 14
    output_names = ("values", "avg_gain", "avg_loss")

    def __init__(
        self,
        periods: Optional[int] = None,
        overbought: int = 70,
        oversold: int = 30,
        mode: RSIMode = RSIMode.CLOSE,
    ):
        super().__init__(periods)
        self.overbought = overbought
        self.oversold = oversold
        self.mode = RSIMode(mode)

    def study_description(self) -> str:
        if self.mode == RSIMode.HIGH:
            return f"RSI-H({self.periods})"
        if self.mode == RSIMode.LOW:
            return f"RSI-L({self.periods})"
        return f"RSI({self.periods})"

    def params(self) -> dict[str, Any]:
        return {"mode": self.mode}

    @classmethod
    def warmup_length(cls, periods: int, **params: Any) -> int:
        return periods

    @classmethod
    def _compute(
        cls, candles: Sequence[Candle], periods: int, mode: RSIMode = RSIMode.CLOSE, **params: Any
    ) -> dict[str, list[float]]:
        rsi, avg_gain, avg_loss = rsi_components(_prices(candles, RSIMode(mode)), periods)
        return {
            "values": backfill(rsi, periods),
            "avg_gain": backfill(avg_gain, periods),
            "avg_loss": backfill(avg_loss, periods),
        }

    def _update_index(
        self, candles: Sequence[Candle], series: dict[str, list[float]], i: int
    ) -> None:
        gain, loss = price_change(_prices(candles[i - 1:i + 1], self.mode), 1)
        avg_gain = wilder_step(series["avg_gain"][i - 1], gain, self.periods)
        avg_loss = wilder_step(series["avg_loss"][i - 1], loss, self.periods)
        series["avg_gain"][i] = avg_gain
        series["avg_loss"][i] = avg_loss
        series["values"][i] = rsi_from_averages(avg_gain, avg_loss)

    def zone(self, index: int) -> str:
        """Classify the value at index as overbought, oversold or neutral."""
        value = self[index]
        if value >= self.overbought:
            return "overbought"
        if value <= self.oversold:
            return "oversold"
        return "neutral"
