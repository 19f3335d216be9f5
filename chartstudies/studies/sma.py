"""SMA - Simple Moving Average study."""

from typing import Any, Sequence

from chartstudies.indicators.technical import calculate_sma, window_mean
from chartstudies.models import Candle
from chartstudies.studies.base import Study, backfill


class SMA(Study):
    """Simple moving average of closing prices."""

    name = "sma"
    label = "simple moving average"
    default_periods = 20
    use_right_axis = True

    def study_description(self) -> str:
        return f"SMA({self.periods})"

    @classmethod
    def warmup_length(cls, periods: int, **params: Any) -> int:
        return periods - 1

    @classmethod
    def _compute(
        cls, candles: Sequence[Candle], periods: int, **params: Any
    ) -> dict[str, list[float]]:
        sma = calculate_sma([c.close for c in candles], periods)
        return {"values": backfill(sma, periods - 1)}

    def _update_index(
        self, candles: Sequence[Candle], series: dict[str, list[float]], i: int
    ) -> None:
        closes = [c.close for c in candles[i - self.periods + 1:i + 1]]
        series["values"][i] = window_mean(closes, len(closes) - 1, self.periods)
